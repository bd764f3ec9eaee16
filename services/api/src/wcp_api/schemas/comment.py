"""评论请求与返回结构。"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema


class CommentCreateRequest(BaseModel):
    """发表评论请求体。"""

    content: str = Field(min_length=1, description="评论正文。")
    parent_comment_id: UUID | None = Field(default=None, description="回复的父评论 ID。")


class CommentUpdateRequest(BaseModel):
    """编辑评论请求体。"""

    content: str = Field(min_length=1, description="新的评论正文。")


class CommentData(BaseSchema):
    """评论信息。"""

    id: UUID = Field(description="评论 ID。")
    article_id: UUID = Field(description="所属文章 ID。")
    author_id: UUID = Field(description="评论人用户 ID。")
    content: str = Field(description="评论正文。")
    parent_comment_id: UUID | None = Field(default=None, description="父评论 ID。")
    is_edited: bool = Field(description="是否编辑过。")
    created_at: datetime = Field(description="创建时间。")
    updated_at: datetime = Field(description="更新时间。")


class CommentThreadData(CommentData):
    """顶层评论及其一层回复。"""

    replies: list[CommentData] = Field(default_factory=list, description="未删除的回复（时间升序）。")
