"""工作空间与成员关系服务。"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from wcp_api.db.session import flush_or_conflict
from wcp_api.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from wcp_api.models.article import Article
from wcp_api.models.user import User
from wcp_api.models.workspace import Workspace, WorkspaceMember
from wcp_api.models.enums import WorkspaceRole
from wcp_api.services.authorization import WorkspaceAccess
from wcp_api.services.local_auth import normalize_email

logger = logging.getLogger("wcp_api.workspaces")

ALREADY_MEMBER_MESSAGE = "User is already a member of this workspace"


@dataclass
class WorkspaceSummary:
    """工作空间列表条目（含当前用户角色与计数）。"""

    workspace: Workspace
    role: str
    joined_at: datetime
    member_count: int
    article_count: int


def create_workspace(db: Session, *, creator_id: UUID, name: str, description: str | None = None) -> Workspace:
    """创建工作空间，创建者自动成为 OWNER。"""
    workspace = Workspace(name=name.strip(), description=description, created_by_id=creator_id, is_archived=False)
    db.add(workspace)
    db.flush()
    db.add(WorkspaceMember(workspace_id=workspace.id, user_id=creator_id, role=WorkspaceRole.OWNER))
    db.flush()
    return workspace


def _member_counts(db: Session, workspace_ids: list[UUID]) -> dict[UUID, int]:
    rows = db.execute(
        select(WorkspaceMember.workspace_id, func.count())
        .where(WorkspaceMember.workspace_id.in_(workspace_ids))
        .group_by(WorkspaceMember.workspace_id)
    ).all()
    return {workspace_id: count for workspace_id, count in rows}


def _article_counts(db: Session, workspace_ids: list[UUID]) -> dict[UUID, int]:
    rows = db.execute(
        select(Article.workspace_id, func.count())
        .where(Article.workspace_id.in_(workspace_ids))
        .where(Article.is_archived.is_(False))
        .group_by(Article.workspace_id)
    ).all()
    return {workspace_id: count for workspace_id, count in rows}


def list_user_workspaces(
    db: Session,
    *,
    user_id: UUID,
    search: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[WorkspaceSummary], int]:
    """列出用户所属且未归档的工作空间（新到旧）。"""
    stmt = (
        select(Workspace, WorkspaceMember)
        .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
        .where(WorkspaceMember.user_id == user_id)
        .where(Workspace.is_archived.is_(False))
    )
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Workspace.name.ilike(pattern), Workspace.description.ilike(pattern)))

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    stmt = stmt.order_by(Workspace.created_at.desc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = db.execute(stmt).all()

    ids = [workspace.id for workspace, _ in rows]
    member_counts = _member_counts(db, ids) if ids else {}
    article_counts = _article_counts(db, ids) if ids else {}
    items = [
        WorkspaceSummary(
            workspace=workspace,
            role=membership.role,
            joined_at=membership.joined_at,
            member_count=member_counts.get(workspace.id, 0),
            article_count=article_counts.get(workspace.id, 0),
        )
        for workspace, membership in rows
    ]
    return items, total


def list_members(db: Session, *, workspace_id: UUID) -> list[tuple[WorkspaceMember, User]]:
    return db.execute(
        select(WorkspaceMember, User)
        .join(User, User.id == WorkspaceMember.user_id)
        .where(WorkspaceMember.workspace_id == workspace_id)
        .order_by(WorkspaceMember.joined_at.asc())
    ).all()


def update_workspace(
    db: Session,
    workspace: Workspace,
    *,
    name: str | None = None,
    description: str | None = None,
    description_set: bool = False,
) -> Workspace:
    if name:
        workspace.name = name.strip()
    if description_set:
        workspace.description = description
    db.flush()
    return workspace


def archive_workspace(db: Session, workspace: Workspace, *, actor_id: UUID) -> Workspace:
    """归档工作空间，之后所有成员门控操作一律拒绝。"""
    workspace.is_archived = True
    db.flush()
    logger.info("workspace archived workspace_id=%s actor_id=%s", workspace.id, actor_id)
    return workspace


def invite_member(db: Session, *, access: WorkspaceAccess, email: str, role: str) -> tuple[WorkspaceMember, User]:
    """按邮箱邀请已注册用户加入工作空间。"""
    if role == WorkspaceRole.OWNER and not access.has_role(WorkspaceRole.OWNER):
        raise ForbiddenError("Only workspace owners can grant the OWNER role")

    invited = db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()
    if invited is None:
        raise NotFoundError("User with this email does not exist")

    existing = db.execute(
        select(WorkspaceMember.id)
        .where(WorkspaceMember.workspace_id == access.workspace.id)
        .where(WorkspaceMember.user_id == invited.id)
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(ALREADY_MEMBER_MESSAGE, code="ALREADY_MEMBER")

    member = WorkspaceMember(workspace_id=access.workspace.id, user_id=invited.id, role=role)
    db.add(member)
    flush_or_conflict(db, ALREADY_MEMBER_MESSAGE)
    return member, invited


def _get_member(db: Session, *, workspace_id: UUID, member_id: UUID) -> WorkspaceMember:
    member = db.get(WorkspaceMember, member_id)
    if member is None or member.workspace_id != workspace_id:
        raise NotFoundError("Member not found")
    return member


def change_member_role(db: Session, *, workspace_id: UUID, member_id: UUID, role: str) -> WorkspaceMember:
    """变更成员角色；OWNER 成员不可通过此接口变更，保证工作空间始终保留 OWNER。"""
    member = _get_member(db, workspace_id=workspace_id, member_id=member_id)
    if member.role == WorkspaceRole.OWNER:
        raise BadRequestError("Cannot change role of workspace owner")
    member.role = role
    db.flush()
    return member


def remove_member(db: Session, *, workspace_id: UUID, member_id: UUID) -> None:
    member = _get_member(db, workspace_id=workspace_id, member_id=member_id)
    if member.role == WorkspaceRole.OWNER:
        raise BadRequestError("Cannot remove workspace owner")
    db.delete(member)
    db.flush()
