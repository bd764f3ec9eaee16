"""访问控制判定服务。

工作空间角色按集合精确匹配（无层级），全局角色按等级做 >= 比较，
两套规则刻意保持独立。
"""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from wcp_api.exceptions import ForbiddenError
from wcp_api.models.enums import GLOBAL_ROLE_RANK, WorkspaceRole
from wcp_api.models.workspace import Workspace, WorkspaceMember

# 可创建、编辑、归档文章与维护标签的角色。
CONTENT_WRITE_ROLES = (WorkspaceRole.OWNER, WorkspaceRole.EDITOR)
# 可进入文章更新接口的角色（评审人仅能将状态置为评审中）。
ARTICLE_UPDATE_ROLES = (WorkspaceRole.OWNER, WorkspaceRole.EDITOR, WorkspaceRole.REVIEWER)
# 可提交评审结论的角色。
REVIEW_ROLES = (WorkspaceRole.REVIEWER, WorkspaceRole.EDITOR, WorkspaceRole.OWNER)


@dataclass(frozen=True)
class WorkspaceAccess:
    """访问判定结果，显式传递给下游处理逻辑。"""

    workspace: Workspace
    membership: WorkspaceMember

    @property
    def role(self) -> str:
        return self.membership.role

    @property
    def user_id(self) -> UUID:
        return self.membership.user_id

    def has_role(self, *roles: str) -> bool:
        return self.membership.role in roles


def get_membership(db: Session, *, workspace_id: UUID, user_id: UUID) -> WorkspaceMember | None:
    """查询用户在工作空间中的成员关系。"""
    return db.execute(
        select(WorkspaceMember)
        .where(WorkspaceMember.workspace_id == workspace_id)
        .where(WorkspaceMember.user_id == user_id)
    ).scalar_one_or_none()


def evaluate_workspace_access(
    db: Session,
    *,
    user_id: UUID,
    workspace_id: UUID,
    required_roles: Iterable[str] | None = None,
) -> WorkspaceAccess:
    """判定用户对工作空间的访问权限。

    判定顺序：
    1. 必须存在成员关系（不存在的工作空间同样视为非成员）。
    2. 工作空间未归档；归档后即使 OWNER 也被拒绝。
    3. 给定角色集合时，成员角色必须在集合内。
    """
    membership = get_membership(db, workspace_id=workspace_id, user_id=user_id)
    workspace = db.get(Workspace, workspace_id) if membership else None
    if membership is None or workspace is None:
        raise ForbiddenError("You are not a member of this workspace", code="NOT_A_MEMBER")
    if workspace.is_archived:
        raise ForbiddenError("This workspace has been archived", code="WORKSPACE_ARCHIVED")

    if required_roles is not None:
        allowed = set(required_roles)
        if membership.role not in allowed:
            raise ForbiddenError(
                "You do not have permission to perform this action",
                details={"role": membership.role, "required_roles": sorted(allowed)},
            )
    return WorkspaceAccess(workspace=workspace, membership=membership)


def has_minimum_global_role(role: str, minimum: str) -> bool:
    """全局角色等级比较，未知角色按最低等级之下处理。"""
    return GLOBAL_ROLE_RANK.get(role, 0) >= GLOBAL_ROLE_RANK[minimum]


def ensure_minimum_global_role(role: str, minimum: str) -> None:
    if not has_minimum_global_role(role, minimum):
        raise ForbiddenError(
            "You do not have permission to perform this action",
            details={"global_role": role, "minimum_role": minimum},
        )
