"""评论、标签与通知模型。"""

from uuid import UUID

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wcp_api.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Comment(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """文章评论，可挂在同一文章的父评论下（一层回复）。"""

    __tablename__ = "comments"

    # 所属文章 ID。
    article_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 评论人用户 ID。
    author_id: Mapped[UUID] = mapped_column(nullable=False)
    # 评论正文。
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # 父评论 ID，为空表示顶层评论。
    parent_comment_id: Mapped[UUID | None] = mapped_column(index=True)
    # 是否被编辑过。
    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 软删除标记，评论从不物理删除。
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Tag(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """工作空间内按名称唯一的标签。"""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uk_tag_name"),)

    # 标签名（去除首尾空白后存储）。
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    # 所属工作空间 ID。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 创建人用户 ID。
    created_by_id: Mapped[UUID] = mapped_column(nullable=False)


class ArticleTag(Base, UUIDPrimaryKeyMixin):
    """文章与标签的关联。"""

    __tablename__ = "article_tags"
    __table_args__ = (UniqueConstraint("article_id", "tag_id", name="uk_article_tag"),)

    article_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    tag_id: Mapped[UUID] = mapped_column(nullable=False, index=True)


class Notification(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """站内通知。"""

    __tablename__ = "notifications"

    # 接收人用户 ID。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 通知类型（COMMENT/APPROVAL/MENTION）。
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # 关联实体 ID（评论或评审记录）。
    reference_id: Mapped[UUID | None] = mapped_column()
    # 已读标记。
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
