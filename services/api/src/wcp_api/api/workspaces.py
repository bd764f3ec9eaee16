"""工作空间管理接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import member_payload, workspace_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import WorkspaceContext, get_current_user, require_workspace_member
from wcp_api.models.article import Article
from wcp_api.models.enums import WorkspaceRole
from wcp_api.models.user import User
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.schemas.workspace import (
    MemberData,
    MemberInviteRequest,
    MemberRoleUpdateRequest,
    WorkspaceCreateRequest,
    WorkspaceData,
    WorkspaceDetailData,
    WorkspaceListItem,
    WorkspaceUpdateRequest,
)
from wcp_api.services.workspaces import (
    archive_workspace,
    change_member_role,
    create_workspace,
    invite_member,
    list_members,
    list_user_workspaces,
    remove_member,
    update_workspace,
)
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post(
    "",
    summary="创建工作空间",
    description="任何已登录用户均可创建，创建者成为工作空间 OWNER。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[WorkspaceData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def create_workspace_route(
    payload: WorkspaceCreateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """创建工作空间并初始化创建者成员关系。"""
    workspace = create_workspace(db, creator_id=user.id, name=payload.name, description=payload.description)
    db.commit()
    db.refresh(workspace)
    return success(
        request,
        workspace_payload(workspace, role=WorkspaceRole.OWNER),
        message="Workspace created successfully",
    )


@router.get(
    "",
    summary="查询工作空间列表",
    description="返回当前用户所属且未归档的工作空间。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[WorkspaceListItem],
    responses={401: {"model": ErrorResponse}},
)
def list_workspaces(
    request: Request,
    search: str | None = Query(default=None, description="按名称或描述模糊匹配。"),
    paging: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """按成员关系返回工作空间视图。"""
    items, total = list_user_workspaces(db, user_id=user.id, search=search, offset=paging.offset, limit=paging.limit)
    data = []
    for item in items:
        row = workspace_payload(item.workspace, role=item.role)
        row.update(joined_at=item.joined_at, member_count=item.member_count, article_count=item.article_count)
        data.append(row)
    return success(request, data, pagination=paging.meta(total))


@router.get(
    "/{workspace_id}",
    summary="查询工作空间详情",
    description="任一成员可查看，包含成员列表。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[WorkspaceDetailData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def get_workspace(
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member()),
    db: Session = Depends(get_db),
):
    members = list_members(db, workspace_id=ctx.workspace.id)
    article_count = db.execute(
        select(func.count())
        .select_from(Article)
        .where(Article.workspace_id == ctx.workspace.id)
        .where(Article.is_archived.is_(False))
    ).scalar_one()
    data = workspace_payload(ctx.workspace, role=ctx.role)
    data.update(
        members=[member_payload(member, user) for member, user in members],
        member_count=len(members),
        article_count=article_count,
    )
    return success(request, data)


@router.put(
    "/{workspace_id}",
    summary="更新工作空间",
    description="OWNER 与 EDITOR 可更新名称与描述。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[WorkspaceData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def update_workspace_route(
    payload: WorkspaceUpdateRequest,
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member(WorkspaceRole.OWNER, WorkspaceRole.EDITOR)),
    db: Session = Depends(get_db),
):
    workspace = update_workspace(
        db,
        ctx.workspace,
        name=payload.name,
        description=payload.description,
        description_set="description" in payload.model_fields_set,
    )
    db.commit()
    db.refresh(workspace)
    return success(request, workspace_payload(workspace, role=ctx.role), message="Workspace updated successfully")


@router.delete(
    "/{workspace_id}",
    summary="归档工作空间",
    description="仅 OWNER 可归档；归档后所有成员门控操作都会被拒绝。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def archive_workspace_route(
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member(WorkspaceRole.OWNER)),
    db: Session = Depends(get_db),
):
    archive_workspace(db, ctx.workspace, actor_id=ctx.user_id)
    db.commit()
    return success(request, None, message="Workspace archived successfully")


@router.post(
    "/{workspace_id}/invite",
    summary="邀请成员",
    description="OWNER 与 EDITOR 可按邮箱邀请已注册用户。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[MemberData],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def invite_member_route(
    payload: MemberInviteRequest,
    request: Request,
    ctx: WorkspaceContext = Depends(require_workspace_member(WorkspaceRole.OWNER, WorkspaceRole.EDITOR)),
    db: Session = Depends(get_db),
):
    member, invited = invite_member(db, access=ctx.access, email=payload.email, role=payload.role)
    db.commit()
    db.refresh(member)
    return success(request, member_payload(member, invited), message="Member invited successfully")


@router.put(
    "/{workspace_id}/members/{member_id}/role",
    summary="变更成员角色",
    description="仅 OWNER 可操作；OWNER 成员的角色不可变更。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MemberData],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def change_member_role_route(
    payload: MemberRoleUpdateRequest,
    request: Request,
    member_id: UUID = Path(description="成员关系 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(WorkspaceRole.OWNER)),
    db: Session = Depends(get_db),
):
    member = change_member_role(db, workspace_id=ctx.workspace.id, member_id=member_id, role=payload.role)
    db.commit()
    db.refresh(member)
    user = db.get(User, member.user_id)
    return success(request, member_payload(member, user), message="Member role updated successfully")


@router.delete(
    "/{workspace_id}/members/{member_id}",
    summary="移除成员",
    description="仅 OWNER 可操作；OWNER 成员不可移除。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def remove_member_route(
    request: Request,
    member_id: UUID = Path(description="成员关系 ID。"),
    ctx: WorkspaceContext = Depends(require_workspace_member(WorkspaceRole.OWNER)),
    db: Session = Depends(get_db),
):
    remove_member(db, workspace_id=ctx.workspace.id, member_id=member_id)
    db.commit()
    return success(request, None, message="Member removed successfully")
