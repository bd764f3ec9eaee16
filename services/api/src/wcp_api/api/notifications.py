"""站内通知接口（不按工作空间隔离，仅限本人）。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wcp_api.api.payloads import notification_payload
from wcp_api.db.session import get_db
from wcp_api.dependencies import get_current_user
from wcp_api.models.collaboration import Notification
from wcp_api.models.enums import NotificationType
from wcp_api.models.user import User
from wcp_api.schemas.common import ErrorResponse, PageResponse, SuccessResponse
from wcp_api.schemas.notification import MarkReadData, MarkReadRequest, NotificationData, UnreadCountData
from wcp_api.services.notifications import delete_notification, mark_all_read, mark_read, unread_count
from wcp_api.utils.pagination import PageParams, get_page_params
from wcp_api.utils.response import success

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    summary="查询通知列表",
    description="按时间倒序返回当前用户的通知，可按已读状态与类型过滤。",
    status_code=status.HTTP_200_OK,
    response_model=PageResponse[NotificationData],
    responses={401: {"model": ErrorResponse}},
)
def list_notifications(
    request: Request,
    is_read: bool | None = Query(default=None, description="按已读状态过滤。"),
    notification_type: NotificationType | None = Query(default=None, alias="type", description="按类型过滤。"),
    paging: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stmt = select(Notification).where(Notification.user_id == user.id)
    if is_read is not None:
        stmt = stmt.where(Notification.is_read.is_(is_read))
    if notification_type is not None:
        stmt = stmt.where(Notification.type == notification_type)
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    notifications = (
        db.execute(stmt.order_by(Notification.created_at.desc()).offset(paging.offset).limit(paging.limit))
        .scalars()
        .all()
    )
    return success(
        request,
        [notification_payload(notification) for notification in notifications],
        pagination=paging.meta(total),
    )


@router.post(
    "/mark-read",
    summary="批量标记已读",
    description="所有通知都属于当前用户时才执行，否则整体返回 404。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MarkReadData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def mark_read_route(
    payload: MarkReadRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = mark_read(db, user_id=user.id, notification_ids=payload.notification_ids)
    db.commit()
    return success(request, {"updated": updated}, message="Notifications marked as read")


@router.post(
    "/mark-all-read",
    summary="全部标记已读",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[MarkReadData],
    responses={401: {"model": ErrorResponse}},
)
def mark_all_read_route(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    updated = mark_all_read(db, user_id=user.id)
    db.commit()
    return success(request, {"updated": updated}, message="All notifications marked as read")


@router.get(
    "/unread-count",
    summary="查询未读数",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UnreadCountData],
    responses={401: {"model": ErrorResponse}},
)
def unread_count_route(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return success(request, {"count": unread_count(db, user_id=user.id)})


@router.delete(
    "/{notification_id}",
    summary="删除通知",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_notification_route(
    request: Request,
    notification_id: UUID = Path(description="通知 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_notification(db, user_id=user.id, notification_id=notification_id)
    db.commit()
    return success(request, None, message="Notification deleted successfully")
