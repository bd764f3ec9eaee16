"""请求上下文依赖。

职责:
1. 解析并校验访问令牌，映射为本地 User。
2. 按全局角色等级做跨工作空间的管理权限限制。
3. 完成工作空间成员关系授权，生成路由统一使用的 WorkspaceContext。
"""

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from wcp_api.core.security import ACCESS_TOKEN_TYPE, decode_token, extract_bearer_token
from wcp_api.db.session import get_db
from wcp_api.exceptions import UnauthenticatedError
from wcp_api.models.user import User
from wcp_api.models.workspace import Workspace, WorkspaceMember
from wcp_api.services.authorization import WorkspaceAccess, ensure_minimum_global_role, evaluate_workspace_access

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class WorkspaceContext:
    """工作空间请求上下文。

    由成员授权依赖生成并显式传入路由与服务层，下游不再重复查询成员关系。
    """

    # 当前请求用户。
    user: User
    # 成员授权结果（工作空间 + 成员关系）。
    access: WorkspaceAccess

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def workspace(self) -> Workspace:
        return self.access.workspace

    @property
    def membership(self) -> WorkspaceMember:
        return self.access.membership

    @property
    def role(self) -> str:
        return self.access.role


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """校验访问令牌并返回有效的本地用户。"""
    authorization = None
    if credentials is not None and credentials.credentials:
        authorization = f"{credentials.scheme} {credentials.credentials}"
    token = extract_bearer_token(authorization)
    user_id = decode_token(token, token_type=ACCESS_TOKEN_TYPE)

    user = db.get(User, user_id)
    if user is None:
        raise UnauthenticatedError("The user belonging to this token no longer exists")
    if not user.is_active:
        raise UnauthenticatedError("Your account has been deactivated")
    return user


def require_minimum_global_role(minimum: str):
    """按全局角色等级（>=）做路由级权限限制。"""

    def _dep(user: User = Depends(get_current_user)) -> User:
        ensure_minimum_global_role(user.global_role, minimum)
        return user

    return _dep


def require_workspace_member(*allowed_roles: str):
    """工作空间成员授权；给定角色时按集合精确匹配。"""
    required = allowed_roles or None

    def _dep(
        workspace_id: UUID = Path(description="工作空间 ID。"),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> WorkspaceContext:
        access = evaluate_workspace_access(db, user_id=user.id, workspace_id=workspace_id, required_roles=required)
        return WorkspaceContext(user=user, access=access)

    return _dep
