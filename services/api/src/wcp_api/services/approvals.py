"""评审聚合服务。

文章聚合状态由全部已提交评审结论推导：
任一驳回即驳回；非空且全部通过即通过；其余情况保持不变。
"""

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from wcp_api.db.session import flush_or_conflict
from wcp_api.exceptions import BadRequestError, ConflictError, ForbiddenError, InvalidTransitionError, NotFoundError
from wcp_api.models.article import Approval, Article
from wcp_api.models.base import utcnow
from wcp_api.models.enums import ApprovalStatus, ArticleStatus, NotificationType
from wcp_api.services.authorization import REVIEW_ROLES, WorkspaceAccess
from wcp_api.services.lifecycle import get_active_article
from wcp_api.services.notifications import notify

logger = logging.getLogger("wcp_api.approvals")

ALREADY_REVIEWED_MESSAGE = "You have already reviewed this article"
# 评审只能给出通过或驳回。
DECISION_STATUSES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})
# 可接收新评审的文章状态：评审中，或已有结论（后续评审人仍可改变聚合结果）。
REVIEWABLE_STATUSES = frozenset({ArticleStatus.IN_REVIEW, ArticleStatus.APPROVED, ArticleStatus.REJECTED})


def aggregate_status(statuses: Iterable[str], current: str) -> str:
    """根据评审结论集合推导文章状态，与提交顺序无关。"""
    collected = list(statuses)
    if any(status == ApprovalStatus.REJECTED for status in collected):
        return ArticleStatus.REJECTED
    if collected and all(status == ApprovalStatus.APPROVED for status in collected):
        return ArticleStatus.APPROVED
    return current


def recompute_article_status(db: Session, article: Article) -> str:
    """重新计算并写回文章聚合状态。"""
    statuses = db.execute(select(Approval.status).where(Approval.article_id == article.id)).scalars().all()
    previous = article.status
    article.status = aggregate_status(statuses, previous)
    if article.status != previous:
        logger.info("article status recomputed article_id=%s %s -> %s", article.id, previous, article.status)
    db.flush()
    return article.status


def _validate_decision(status: str) -> None:
    if status not in DECISION_STATUSES:
        raise BadRequestError("Valid approval status (APPROVED or REJECTED) is required")


def record_approval(
    db: Session,
    *,
    access: WorkspaceAccess,
    article_id: UUID,
    status: str,
    feedback: str | None = None,
) -> Approval:
    """记录评审人对文章的唯一结论，并重新计算文章状态。"""
    _validate_decision(status)
    if not access.has_role(*REVIEW_ROLES):
        raise ForbiddenError("Insufficient permissions to review articles")

    article = get_active_article(db, workspace_id=access.workspace.id, article_id=article_id)
    if article.status not in REVIEWABLE_STATUSES:
        raise InvalidTransitionError(
            "Only articles in review can be approved or rejected",
            details={"from": article.status},
        )

    existing = db.execute(
        select(Approval.id).where(Approval.article_id == article.id).where(Approval.reviewer_id == access.user_id)
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(ALREADY_REVIEWED_MESSAGE, code="ALREADY_REVIEWED")

    approval = Approval(
        article_id=article.id,
        reviewer_id=access.user_id,
        status=status,
        feedback=feedback or None,
        reviewed_at=utcnow(),
    )
    db.add(approval)
    flush_or_conflict(db, ALREADY_REVIEWED_MESSAGE)
    logger.info("approval recorded article_id=%s reviewer_id=%s status=%s", article.id, access.user_id, status)

    recompute_article_status(db, article)
    notify(
        db,
        recipient_id=article.author_id,
        actor_id=access.user_id,
        notification_type=NotificationType.APPROVAL,
        reference_id=approval.id,
    )
    return approval


def get_workspace_approval(db: Session, *, workspace_id: UUID, approval_id: UUID) -> tuple[Approval, Article]:
    """读取属于该工作空间未归档文章的评审记录。"""
    row = db.execute(
        select(Approval, Article)
        .join(Article, Article.id == Approval.article_id)
        .where(Approval.id == approval_id)
        .where(Article.workspace_id == workspace_id)
        .where(Article.is_archived.is_(False))
    ).first()
    if row is None:
        raise NotFoundError("Approval not found")
    return row[0], row[1]


def update_approval(
    db: Session,
    *,
    workspace_id: UUID,
    approval_id: UUID,
    status: str,
    feedback: str | None = None,
) -> Approval:
    """修改已有评审结论并重新计算其所属文章状态，不产生通知。"""
    _validate_decision(status)
    approval, article = get_workspace_approval(db, workspace_id=workspace_id, approval_id=approval_id)
    approval.status = status
    if feedback is not None:
        approval.feedback = feedback
    approval.reviewed_at = utcnow()
    db.flush()
    recompute_article_status(db, article)
    return approval
