"""文章、版本与评审模型。"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wcp_api.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin
from wcp_api.models.enums import ApprovalStatus, ArticleStatus


class Article(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """文章实体，状态由生命周期状态机与评审聚合共同驱动。"""

    __tablename__ = "articles"
    __table_args__ = (UniqueConstraint("workspace_id", "slug", name="uk_article_slug"),)

    # 所属工作空间 ID。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 作者用户 ID。
    author_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 标题。
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # 工作空间内唯一短标识。
    slug: Mapped[str] = mapped_column(String(320), nullable=False)
    # 当前版本号指针。
    current_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 文章状态（DRAFT/IN_REVIEW/APPROVED/REJECTED）。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=ArticleStatus.DRAFT, index=True)
    # 逻辑删除标记。
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 浏览次数，每次成功读取详情时累加。
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 最近编辑时间与编辑人（冗余字段）。
    last_edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_edited_by_id: Mapped[UUID | None] = mapped_column()


class ArticleVersion(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """文章版本快照，只追加不修改。"""

    __tablename__ = "article_versions"
    __table_args__ = (UniqueConstraint("article_id", "version_number", name="uk_article_version_number"),)

    # 所属文章 ID。
    article_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 编辑人用户 ID。
    edited_by_id: Mapped[UUID] = mapped_column(nullable=False)
    # 文章内严格递增的版本号，从 1 开始。
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # 版本标题。
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # 版本正文。
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 变更说明。
    change_summary: Mapped[str | None] = mapped_column(Text)


class Approval(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """单个评审人对文章的评审结论。"""

    __tablename__ = "approvals"
    __table_args__ = (UniqueConstraint("article_id", "reviewer_id", name="uk_approval_reviewer"),)

    # 所属文章 ID。
    article_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 评审人用户 ID。
    reviewer_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 评审结论（PENDING/APPROVED/REJECTED）。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=ApprovalStatus.PENDING)
    # 评审意见。
    feedback: Mapped[str | None] = mapped_column(Text)
    # 评审时间。
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
