"""站内通知服务。"""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from wcp_api.exceptions import NotFoundError
from wcp_api.models.collaboration import Notification

logger = logging.getLogger("wcp_api.notifications")


def notify(
    db: Session,
    *,
    recipient_id: UUID,
    actor_id: UUID,
    notification_type: str,
    reference_id: UUID | None,
) -> Notification | None:
    """写入一条通知；触发人即接收人时不通知自己。"""
    if recipient_id == actor_id:
        return None
    notification = Notification(
        user_id=recipient_id,
        type=notification_type,
        reference_id=reference_id,
        is_read=False,
    )
    db.add(notification)
    db.flush()
    logger.debug("notification queued type=%s recipient=%s ref=%s", notification_type, recipient_id, reference_id)
    return notification


def mark_read(db: Session, *, user_id: UUID, notification_ids: Sequence[UUID]) -> int:
    """批量标记已读，全部属于当前用户才执行（全有或全无）。"""
    wanted = set(notification_ids)
    owned = set(
        db.execute(
            select(Notification.id).where(Notification.id.in_(wanted)).where(Notification.user_id == user_id)
        )
        .scalars()
        .all()
    )
    if owned != wanted:
        raise NotFoundError("Some notifications not found")

    result = db.execute(
        update(Notification)
        .where(Notification.id.in_(wanted))
        .where(Notification.user_id == user_id)
        .values(is_read=True)
    )
    return result.rowcount or 0


def mark_all_read(db: Session, *, user_id: UUID) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.is_read.is_(False))
        .values(is_read=True)
    )
    return result.rowcount or 0


def unread_count(db: Session, *, user_id: UUID) -> int:
    return db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.is_read.is_(False))
    ).scalar_one()


def delete_notification(db: Session, *, user_id: UUID, notification_id: UUID) -> None:
    notification = db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification not found")
    db.delete(notification)
