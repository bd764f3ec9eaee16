"""身份模型。"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from wcp_api.models.base import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin
from wcp_api.models.enums import GlobalRole


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """用户实体，持有本地凭据与全局角色。"""

    __tablename__ = "users"

    # 展示名。
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # 登录邮箱，全局唯一（小写归一化后存储）。
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    # 口令哈希，不存明文。
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    # 可选头像地址。
    avatar: Mapped[str | None] = mapped_column(String(512))
    # 全局角色（SUPER_ADMIN/ADMIN/USER）。
    global_role: Mapped[str] = mapped_column(String(32), nullable=False, default=GlobalRole.USER)
    # 停用账号不可登录，也不可通过令牌访问。
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # 最近一次登录时间。
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class PasswordResetToken(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """重置密码令牌，仅存储令牌摘要。"""

    __tablename__ = "password_reset_tokens"

    # 用户 ID（逻辑关联 users.id，不声明数据库外键）。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 令牌 SHA-256 摘要。
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # 过期时间。
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 使用时间，非空表示已失效。
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
