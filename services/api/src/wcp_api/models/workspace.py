"""工作空间模型。"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wcp_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from wcp_api.models.enums import WorkspaceRole


class Workspace(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """工作空间实体，文章与标签的租户隔离边界。"""

    __tablename__ = "workspaces"

    # 工作空间名称。
    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    # 可选描述。
    description: Mapped[str | None] = mapped_column(Text)
    # 创建者用户 ID。
    created_by_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 归档后所有成员门控操作一律拒绝。
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class WorkspaceMember(Base, UUIDPrimaryKeyMixin):
    """工作空间成员关系。"""

    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id", name="uk_workspace_member"),)

    # 工作空间 ID。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 用户 ID。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 工作空间角色（OWNER/EDITOR/VIEWER/REVIEWER）。
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=WorkspaceRole.VIEWER)
    # 加入时间。
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
