"""标签请求与返回结构。"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema


class TagCreateRequest(BaseModel):
    """创建标签请求体。"""

    name: str = Field(min_length=1, max_length=64, description="标签名，首尾空白会被去除。", examples=["release"])


class TagUpdateRequest(BaseModel):
    """重命名标签请求体。"""

    name: str = Field(min_length=1, max_length=64, description="新的标签名。")


class TagBrief(BaseSchema):
    """嵌入文章中的标签摘要。"""

    id: UUID = Field(description="标签 ID。")
    name: str = Field(description="标签名。")


class TagData(TagBrief):
    """标签详情。"""

    workspace_id: UUID = Field(description="所属工作空间 ID。")
    created_by_id: UUID = Field(description="创建人用户 ID。")
    created_at: datetime = Field(description="创建时间。")
    article_count: int = Field(default=0, description="引用该标签的文章数。")
