"""评论服务。

评论通过父评论 ID 形成邻接关系，读取时只物化一层回复。
删除一律为软删除；父评论被删除后，其未删除的回复提升为顶层条目继续展示。
"""

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from wcp_api.exceptions import BadRequestError, ForbiddenError, NotFoundError
from wcp_api.models.collaboration import Comment
from wcp_api.models.enums import NotificationType
from wcp_api.services.authorization import CONTENT_WRITE_ROLES, WorkspaceAccess
from wcp_api.services.lifecycle import get_active_article
from wcp_api.services.notifications import notify


@dataclass
class CommentThread:
    """顶层评论及其一层未删除回复。"""

    comment: Comment
    replies: list[Comment] = field(default_factory=list)


def _require_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise BadRequestError("Comment content is required")
    return content


def get_comment(db: Session, *, article_id: UUID, comment_id: UUID) -> Comment:
    """读取文章下未删除的评论。"""
    comment = db.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .where(Comment.article_id == article_id)
        .where(Comment.is_deleted.is_(False))
    ).scalar_one_or_none()
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def create_comment(
    db: Session,
    *,
    access: WorkspaceAccess,
    article_id: UUID,
    content: str,
    parent_comment_id: UUID | None = None,
) -> Comment:
    """发表评论或回复，并通知文章作者（不通知自己）。"""
    content = _require_content(content)
    article = get_active_article(db, workspace_id=access.workspace.id, article_id=article_id)

    if parent_comment_id is not None:
        parent = db.execute(
            select(Comment)
            .where(Comment.id == parent_comment_id)
            .where(Comment.article_id == article.id)
            .where(Comment.is_deleted.is_(False))
        ).scalar_one_or_none()
        if parent is None:
            raise NotFoundError("Parent comment not found")
        # 只能回复顶层条目；父评论已删除而被提升的回复也算顶层。
        if parent.parent_comment_id is not None:
            grandparent_live = db.execute(
                select(Comment.id)
                .where(Comment.id == parent.parent_comment_id)
                .where(Comment.is_deleted.is_(False))
            ).scalar_one_or_none()
            if grandparent_live is not None:
                raise BadRequestError("Replies can only be made to top-level comments", code="INVALID_PARENT")

    comment = Comment(
        article_id=article.id,
        author_id=access.user_id,
        content=content,
        parent_comment_id=parent_comment_id,
    )
    db.add(comment)
    db.flush()

    notify(
        db,
        recipient_id=article.author_id,
        actor_id=access.user_id,
        notification_type=NotificationType.COMMENT,
        reference_id=comment.id,
    )
    return comment


def _ensure_can_moderate(access: WorkspaceAccess, comment: Comment, action: str) -> None:
    if comment.author_id != access.user_id and not access.has_role(*CONTENT_WRITE_ROLES):
        raise ForbiddenError(f"Insufficient permissions to {action} this comment")


def update_comment(
    db: Session,
    *,
    access: WorkspaceAccess,
    article_id: UUID,
    comment_id: UUID,
    content: str,
) -> Comment:
    content = _require_content(content)
    get_active_article(db, workspace_id=access.workspace.id, article_id=article_id)
    comment = get_comment(db, article_id=article_id, comment_id=comment_id)
    _ensure_can_moderate(access, comment, "update")
    comment.content = content
    comment.is_edited = True
    db.flush()
    return comment


def delete_comment(db: Session, *, access: WorkspaceAccess, article_id: UUID, comment_id: UUID) -> Comment:
    get_active_article(db, workspace_id=access.workspace.id, article_id=article_id)
    comment = get_comment(db, article_id=article_id, comment_id=comment_id)
    _ensure_can_moderate(access, comment, "delete")
    comment.is_deleted = True
    db.flush()
    return comment


def list_comment_threads(
    db: Session,
    *,
    article_id: UUID,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[CommentThread], int]:
    """分页读取顶层评论（新到旧），每条附带按时间升序的一层回复。"""
    parent = aliased(Comment)
    top_level = (
        select(Comment)
        .outerjoin(parent, parent.id == Comment.parent_comment_id)
        .where(Comment.article_id == article_id)
        .where(Comment.is_deleted.is_(False))
        .where(or_(Comment.parent_comment_id.is_(None), parent.is_deleted.is_(True)))
    )
    total = db.execute(select(func.count()).select_from(top_level.subquery())).scalar_one()

    stmt = top_level.order_by(Comment.created_at.desc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    roots = db.execute(stmt).scalars().all()
    threads = {root.id: CommentThread(comment=root) for root in roots}
    if threads:
        replies = db.execute(
            select(Comment)
            .where(Comment.parent_comment_id.in_(list(threads)))
            .where(Comment.is_deleted.is_(False))
            .order_by(Comment.created_at.asc())
        ).scalars().all()
        for reply in replies:
            threads[reply.parent_comment_id].replies.append(reply)
    return list(threads.values()), total
