"""通知请求与返回结构。"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema


class MarkReadRequest(BaseModel):
    """批量标记已读请求体。"""

    notification_ids: list[UUID] = Field(min_length=1, description="需要标记已读的通知 ID 列表。")


class NotificationData(BaseSchema):
    """通知信息。"""

    id: UUID = Field(description="通知 ID。")
    user_id: UUID = Field(description="接收人用户 ID。")
    type: str = Field(description="通知类型。")
    reference_id: UUID | None = Field(default=None, description="关联实体 ID。")
    is_read: bool = Field(description="是否已读。")
    created_at: datetime = Field(description="创建时间。")


class UnreadCountData(BaseSchema):
    """未读数。"""

    count: int = Field(description="未读通知数。")


class MarkReadData(BaseSchema):
    """标记已读结果。"""

    updated: int = Field(description="本次标记的通知数。")
