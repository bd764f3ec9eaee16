"""平台管理接口（按全局角色等级授权）。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import user_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import require_minimum_global_role
from wcp_api.exceptions import BadRequestError, ForbiddenError, NotFoundError
from wcp_api.models.enums import GLOBAL_ROLE_RANK, GlobalRole
from wcp_api.models.user import User
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.schemas.user import UserData, UserRoleUpdateRequest, UserStatusUpdateRequest
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_target(db: Session, user_id: UUID) -> User:
    target = db.get(User, user_id)
    if target is None:
        raise NotFoundError("User not found")
    return target


@router.get(
    "/users",
    summary="查询用户列表",
    description="要求全局角色不低于 ADMIN，支持按姓名或邮箱搜索。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[UserData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def list_users(
    request: Request,
    search: str | None = Query(default=None, description="按姓名或邮箱模糊匹配。"),
    paging: PageParams = Depends(get_page_params),
    actor: User = Depends(require_minimum_global_role(GlobalRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """分页查询平台用户。"""
    stmt = select(User)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    users = (
        db.execute(stmt.order_by(User.created_at.desc()).offset(paging.offset).limit(paging.limit)).scalars().all()
    )
    return success(request, [user_payload(user) for user in users], pagination=paging.meta(total))


@router.patch(
    "/users/{user_id}/status",
    summary="启用或停用账号",
    description="要求全局角色不低于 ADMIN；不能变更自己，也不能变更等级不低于自己的账号。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_user_status(
    payload: UserStatusUpdateRequest,
    request: Request,
    user_id: UUID = Path(description="目标用户 ID。"),
    actor: User = Depends(require_minimum_global_role(GlobalRole.ADMIN)),
    db: Session = Depends(get_db),
):
    """变更账号启用状态。"""
    target = _get_target(db, user_id)
    if target.id == actor.id:
        raise BadRequestError("You cannot change your own account status")
    if GLOBAL_ROLE_RANK.get(target.global_role, 0) >= GLOBAL_ROLE_RANK.get(actor.global_role, 0):
        raise ForbiddenError("You cannot manage an account with an equal or higher role")

    target.is_active = payload.is_active
    db.commit()
    db.refresh(target)
    return success(request, user_payload(target), message="User status updated successfully")


@router.patch(
    "/users/{user_id}/role",
    summary="变更全局角色",
    description="要求全局角色为 SUPER_ADMIN；不能变更自己的角色。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_user_role(
    payload: UserRoleUpdateRequest,
    request: Request,
    user_id: UUID = Path(description="目标用户 ID。"),
    actor: User = Depends(require_minimum_global_role(GlobalRole.SUPER_ADMIN)),
    db: Session = Depends(get_db),
):
    """变更账号全局角色。"""
    target = _get_target(db, user_id)
    if target.id == actor.id:
        raise BadRequestError("You cannot change your own role")

    target.global_role = payload.global_role
    db.commit()
    db.refresh(target)
    return success(request, user_payload(target), message="User role updated successfully")
