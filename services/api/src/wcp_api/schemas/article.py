"""文章与版本请求、返回结构。"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.approval import ApprovalData
from wcp_api.schemas.comment import CommentThreadData
from wcp_api.schemas.common import BaseSchema
from wcp_api.schemas.tag import TagBrief


class ArticleCreateRequest(BaseModel):
    """创建文章请求体。"""

    title: str = Field(min_length=1, max_length=255, description="文章标题。", examples=["Release notes"])
    content: str | None = Field(default=None, description="初始正文，提供时记录第 1 版。")
    tags: list[str] | None = Field(default=None, description="标签名列表，不存在的标签会自动创建。")


class ArticleUpdateRequest(BaseModel):
    """更新文章请求体。"""

    title: str | None = Field(default=None, min_length=1, max_length=255, description="新标题。")
    content: str | None = Field(default=None, description="新正文，变更时追加新版本。")
    status: str | None = Field(default=None, description="请求的状态，仅支持 IN_REVIEW。")
    tags: list[str] | None = Field(default=None, description="整体替换的标签名列表。")


class VersionCreateRequest(BaseModel):
    """创建版本请求体。"""

    title: str | None = Field(default=None, max_length=255, description="版本标题，缺省取文章标题。")
    content: str | None = Field(default=None, description="版本正文，缺省为空。")
    change_summary: str | None = Field(default=None, description="变更说明。")


class ArticleData(BaseSchema):
    """文章基础信息。"""

    id: UUID = Field(description="文章 ID。")
    workspace_id: UUID = Field(description="所属工作空间 ID。")
    author_id: UUID = Field(description="作者用户 ID。")
    title: str = Field(description="标题。")
    slug: str = Field(description="工作空间内唯一短标识。")
    current_version: int = Field(description="当前版本号。")
    status: str = Field(description="文章状态。")
    view_count: int = Field(description="浏览次数。")
    last_edited_at: datetime | None = Field(default=None, description="最近编辑时间。")
    last_edited_by_id: UUID | None = Field(default=None, description="最近编辑人。")
    created_at: datetime = Field(description="创建时间。")
    updated_at: datetime = Field(description="更新时间。")
    tags: list[TagBrief] = Field(default_factory=list, description="标签列表。")


class VersionData(BaseSchema):
    """版本快照。"""

    id: UUID = Field(description="版本 ID。")
    article_id: UUID = Field(description="文章 ID。")
    edited_by_id: UUID = Field(description="编辑人用户 ID。")
    version_number: int = Field(description="版本号。")
    title: str = Field(description="版本标题。")
    content: str = Field(description="版本正文。")
    change_summary: str | None = Field(default=None, description="变更说明。")
    created_at: datetime = Field(description="创建时间。")


class ArticleDetailData(ArticleData):
    """文章详情。"""

    versions: list[VersionData] = Field(default_factory=list, description="最近 5 个版本（新到旧）。")
    comments: list[CommentThreadData] = Field(default_factory=list, description="未删除的评论线程。")
    approvals: list[ApprovalData] = Field(default_factory=list, description="评审记录。")
