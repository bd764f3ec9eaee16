"""注册、登录与密码重置请求结构。"""

from datetime import datetime

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema
from wcp_api.schemas.user import UserData

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AuthRegisterRequest(BaseModel):
    """本地账号注册请求。"""

    name: str = Field(min_length=1, max_length=100, description="展示名。", examples=["Alice"])
    email: str = Field(
        min_length=5,
        max_length=256,
        pattern=EMAIL_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=8, max_length=128, description="登录密码。", examples=["StrongPassw0rd!"])


class AuthLoginRequest(BaseModel):
    """本地账号登录请求。"""

    email: str = Field(
        min_length=5,
        max_length=256,
        pattern=EMAIL_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=1, max_length=128, description="登录密码。", examples=["StrongPassw0rd!"])


class ForgotPasswordRequest(BaseModel):
    """申请重置密码请求。"""

    email: str = Field(min_length=5, max_length=256, pattern=EMAIL_PATTERN, description="登录邮箱。")


class VerifyResetTokenRequest(BaseModel):
    """校验重置令牌请求。"""

    token: str = Field(min_length=1, max_length=256, description="邮件中的重置令牌。")


class ResetPasswordRequest(BaseModel):
    """重置密码请求。"""

    token: str = Field(min_length=1, max_length=256, description="邮件中的重置令牌。")
    password: str = Field(min_length=8, max_length=128, description="新密码。")


class ChangePasswordRequest(BaseModel):
    """修改密码请求。"""

    current_password: str = Field(min_length=1, max_length=128, description="当前密码。")
    new_password: str = Field(min_length=8, max_length=128, description="新密码。")


class AccessTokenData(BaseSchema):
    """访问令牌结构。"""

    access_token: str = Field(description="访问令牌。")
    token_type: str = Field(default="bearer", description="令牌类型。")
    expires_at: datetime = Field(description="令牌过期时间（UTC）。")
    expires_in: int = Field(description="距过期剩余秒数。")


class AuthSessionData(AccessTokenData):
    """注册/登录结果结构。"""

    user: UserData = Field(description="当前用户资料。")


class AuthLogoutData(BaseSchema):
    """登出结果结构。"""

    logged_out: bool = Field(description="是否已完成登出。")


class ResetTokenStatusData(BaseSchema):
    """重置令牌校验结果。"""

    valid: bool = Field(description="令牌是否可用。")
