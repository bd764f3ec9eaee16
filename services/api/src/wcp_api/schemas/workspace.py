"""工作空间相关请求与返回结构。"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from wcp_api.schemas.common import BaseSchema
from wcp_api.schemas.user import UserBrief

WorkspaceRoleLiteral = Literal["OWNER", "EDITOR", "VIEWER", "REVIEWER"]


class WorkspaceCreateRequest(BaseModel):
    """创建工作空间请求体。"""

    name: str = Field(min_length=1, max_length=128, description="工作空间名称。", examples=["Docs Team"])
    description: str | None = Field(default=None, description="工作空间说明。")


class WorkspaceUpdateRequest(BaseModel):
    """更新工作空间请求体。"""

    name: str | None = Field(default=None, min_length=1, max_length=128, description="新的工作空间名称。")
    description: str | None = Field(default=None, description="新的工作空间说明。")


class MemberInviteRequest(BaseModel):
    """邀请成员请求体。"""

    email: str = Field(min_length=5, max_length=256, description="被邀请用户邮箱。", examples=["bob@example.com"])
    role: WorkspaceRoleLiteral = Field(default="VIEWER", description="授予的工作空间角色。", examples=["EDITOR"])


class MemberRoleUpdateRequest(BaseModel):
    """变更成员角色请求体。"""

    role: WorkspaceRoleLiteral = Field(description="新的工作空间角色。", examples=["REVIEWER"])


class WorkspaceData(BaseSchema):
    """工作空间基础信息。"""

    id: UUID = Field(description="工作空间 ID。")
    name: str = Field(description="工作空间名称。")
    description: str | None = Field(default=None, description="工作空间说明。")
    created_by_id: UUID = Field(description="创建者用户 ID。")
    is_archived: bool = Field(description="是否已归档。")
    created_at: datetime = Field(description="创建时间。")
    updated_at: datetime = Field(description="更新时间。")
    role: str | None = Field(default=None, description="当前用户在该工作空间中的角色。")


class WorkspaceListItem(WorkspaceData):
    """工作空间列表条目。"""

    joined_at: datetime = Field(description="当前用户加入时间。")
    member_count: int = Field(description="成员数。")
    article_count: int = Field(description="未归档文章数。")


class MemberData(BaseSchema):
    """工作空间成员信息。"""

    id: UUID = Field(description="成员关系 ID。")
    workspace_id: UUID = Field(description="工作空间 ID。")
    user_id: UUID = Field(description="用户 ID。")
    role: str = Field(description="工作空间角色。")
    joined_at: datetime = Field(description="加入时间。")
    user: UserBrief = Field(description="成员用户摘要。")


class WorkspaceDetailData(WorkspaceData):
    """工作空间详情（含成员列表）。"""

    members: list[MemberData] = Field(default_factory=list, description="成员列表。")
    member_count: int = Field(description="成员数。")
    article_count: int = Field(description="未归档文章数。")
