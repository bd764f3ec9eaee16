"""评审请求与返回结构。"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema


class ApprovalDecisionRequest(BaseModel):
    """提交或修改评审结论请求体。"""

    status: Literal["APPROVED", "REJECTED"] = Field(description="评审结论。", examples=["APPROVED"])
    feedback: str | None = Field(default=None, description="评审意见。")


class ApprovalData(BaseSchema):
    """评审记录。"""

    id: UUID = Field(description="评审记录 ID。")
    article_id: UUID = Field(description="文章 ID。")
    reviewer_id: UUID = Field(description="评审人用户 ID。")
    status: str = Field(description="评审结论。")
    feedback: str | None = Field(default=None, description="评审意见。")
    reviewed_at: datetime | None = Field(default=None, description="评审时间。")
    created_at: datetime = Field(description="创建时间。")


class ApprovalResultData(ApprovalData):
    """写入评审后的结果（含重新计算后的文章状态）。"""

    article_status: str = Field(description="重新计算后的文章状态。")
