"""用户相关请求与返回结构。"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema


class UserData(BaseSchema):
    """用户公开资料（不含口令哈希）。"""

    id: UUID = Field(description="用户 ID。")
    name: str = Field(description="展示名。")
    email: str = Field(description="登录邮箱。")
    avatar: str | None = Field(default=None, description="头像地址。")
    global_role: str = Field(description="全局角色。")
    is_active: bool = Field(description="账号是否启用。")
    last_login_at: datetime | None = Field(default=None, description="最近一次登录时间。")
    created_at: datetime = Field(description="注册时间。")


class UserBrief(BaseSchema):
    """嵌入其他结构中的用户摘要。"""

    id: UUID = Field(description="用户 ID。")
    name: str = Field(description="展示名。")
    email: str = Field(description="登录邮箱。")
    avatar: str | None = Field(default=None, description="头像地址。")


class ProfileUpdateRequest(BaseModel):
    """更新个人资料请求体。"""

    name: str | None = Field(default=None, min_length=1, max_length=100, description="新的展示名。")
    avatar: str | None = Field(default=None, max_length=512, description="新的头像地址。")


class UserStatusUpdateRequest(BaseModel):
    """管理员启用/停用账号请求体。"""

    is_active: bool = Field(description="是否启用账号。")


class UserRoleUpdateRequest(BaseModel):
    """超级管理员变更全局角色请求体。"""

    global_role: Literal["SUPER_ADMIN", "ADMIN", "USER"] = Field(description="新的全局角色。", examples=["ADMIN"])


class UserWorkspaceItem(BaseSchema):
    """当前用户所属工作空间条目。"""

    workspace_id: UUID = Field(description="工作空间 ID。")
    name: str = Field(description="工作空间名称。")
    description: str | None = Field(default=None, description="工作空间描述。")
    role: str = Field(description="当前用户在该工作空间中的角色。")
    joined_at: datetime = Field(description="加入时间。")
