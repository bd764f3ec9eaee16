"""文章生命周期服务。

状态流转：DRAFT -> IN_REVIEW -> {APPROVED, REJECTED}。
APPROVED 与 REJECTED 之间可由评审聚合重新计算互相切换；
回到 IN_REVIEW 只能通过作者从 DRAFT 提交评审。
"""

import logging
import re
import time
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from wcp_api.db.session import flush_or_conflict
from wcp_api.exceptions import BadRequestError, ForbiddenError, InvalidTransitionError, NotFoundError
from wcp_api.models.article import Article, ArticleVersion
from wcp_api.models.base import utcnow
from wcp_api.models.enums import ArticleStatus, WorkspaceRole
from wcp_api.services.authorization import CONTENT_WRITE_ROLES, WorkspaceAccess
from wcp_api.services.tags import relink_article_tags

logger = logging.getLogger("wcp_api.lifecycle")

# 允许的状态迁移表。
ARTICLE_TRANSITIONS: dict[str, frozenset[str]] = {
    ArticleStatus.DRAFT: frozenset({ArticleStatus.IN_REVIEW}),
    ArticleStatus.IN_REVIEW: frozenset({ArticleStatus.APPROVED, ArticleStatus.REJECTED}),
    ArticleStatus.APPROVED: frozenset({ArticleStatus.REJECTED}),
    ArticleStatus.REJECTED: frozenset({ArticleStatus.APPROVED}),
}

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """小写化，非字母数字折叠为 `-`，去掉首尾 `-`。"""
    return _SLUG_PATTERN.sub("-", title.lower()).strip("-")


def build_article_slug(title: str, *, timestamp_ms: int | None = None) -> str:
    """标题短标识追加毫秒时间戳后缀。"""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    base = slugify(title) or "article"
    return f"{base}-{timestamp_ms}"


def can_transition(current: str, target: str) -> bool:
    return target in ARTICLE_TRANSITIONS.get(current, frozenset())


def assert_article_transition(current: str, target: str, *, message: str | None = None) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(
            message or f"Cannot move article from {current} to {target}",
            details={"from": current, "to": target},
        )


def get_active_article(db: Session, *, workspace_id: UUID, article_id: UUID) -> Article:
    """读取工作空间内未归档的文章。"""
    article = db.execute(
        select(Article)
        .where(Article.id == article_id)
        .where(Article.workspace_id == workspace_id)
        .where(Article.is_archived.is_(False))
    ).scalar_one_or_none()
    if article is None:
        raise NotFoundError("Article not found")
    return article


def next_version_number(db: Session, *, article_id: UUID) -> int:
    latest = db.execute(
        select(func.max(ArticleVersion.version_number)).where(ArticleVersion.article_id == article_id)
    ).scalar_one_or_none()
    return (latest or 0) + 1


def create_version(
    db: Session,
    article: Article,
    *,
    editor_id: UUID,
    title: str | None = None,
    content: str | None = None,
    change_summary: str | None = None,
) -> ArticleVersion:
    """追加不可变版本快照并推进文章当前版本指针。

    省略的标题与正文只回落到文章头信息（标题）与空正文，
    不读取上一个版本的内容。
    """
    version = ArticleVersion(
        article_id=article.id,
        edited_by_id=editor_id,
        version_number=next_version_number(db, article_id=article.id),
        title=title or article.title,
        content=content or "",
        change_summary=change_summary or None,
    )
    db.add(version)
    flush_or_conflict(db, "Version number already exists for this article")

    article.current_version = version.version_number
    article.last_edited_at = utcnow()
    article.last_edited_by_id = editor_id
    db.flush()
    return version


def create_article(
    db: Session,
    *,
    access: WorkspaceAccess,
    title: str,
    content: str | None = None,
    tags: Sequence[str] | None = None,
) -> Article:
    """创建草稿文章，提供正文时记录第 1 版。"""
    article = Article(
        workspace_id=access.workspace.id,
        author_id=access.user_id,
        title=title,
        slug=build_article_slug(title),
        status=ArticleStatus.DRAFT,
        current_version=1,
    )
    db.add(article)
    flush_or_conflict(db, "Article slug already exists in this workspace")

    if content:
        create_version(db, article, editor_id=access.user_id, content=content, change_summary="Initial version")
    if tags:
        relink_article_tags(
            db,
            article_id=article.id,
            workspace_id=article.workspace_id,
            names=tags,
            created_by_id=access.user_id,
        )
    return article


def _move_to_review(article: Article, *, actor_id: UUID) -> None:
    if article.author_id != actor_id:
        raise InvalidTransitionError(
            "Only the author can submit an article for review",
            details={"from": article.status, "to": ArticleStatus.IN_REVIEW},
        )
    assert_article_transition(
        article.status,
        ArticleStatus.IN_REVIEW,
        message="Only draft articles can be submitted for review",
    )
    article.status = ArticleStatus.IN_REVIEW


def submit_for_review(db: Session, *, workspace_id: UUID, article_id: UUID, actor_id: UUID) -> Article:
    """作者将草稿提交评审。"""
    article = db.execute(
        select(Article)
        .where(Article.id == article_id)
        .where(Article.workspace_id == workspace_id)
        .where(Article.is_archived.is_(False))
        .where(Article.author_id == actor_id)
    ).scalar_one_or_none()
    if article is None:
        raise NotFoundError("Article not found or you're not the author")

    _move_to_review(article, actor_id=actor_id)
    db.flush()
    logger.info("article submitted for review article_id=%s author_id=%s", article.id, actor_id)
    return article


def update_article(
    db: Session,
    *,
    access: WorkspaceAccess,
    article_id: UUID,
    title: str | None = None,
    content: str | None = None,
    status: str | None = None,
    tags: Sequence[str] | None = None,
) -> Article:
    """按编辑规则更新文章。

    - OWNER/EDITOR 可修改标题、正文与标签；正文变更追加新版本。
    - REVIEWER 只能请求状态 IN_REVIEW，不能修改任何文本内容。
    - 状态只能请求 IN_REVIEW，并走与提交评审相同的迁移表。
    """
    text_change = title is not None or content is not None or tags is not None
    if access.has_role(WorkspaceRole.REVIEWER):
        if text_change or status is None:
            raise ForbiddenError("Insufficient permissions to update this article")
    elif not access.has_role(*CONTENT_WRITE_ROLES):
        raise ForbiddenError("Insufficient permissions to update this article")

    if status is not None and status != ArticleStatus.IN_REVIEW:
        raise BadRequestError("Article status can only be set to IN_REVIEW", code="INVALID_STATUS")

    article = get_active_article(db, workspace_id=access.workspace.id, article_id=article_id)

    if content is not None and article.author_id != access.user_id and not access.has_role(*CONTENT_WRITE_ROLES):
        raise ForbiddenError("Only article author and editors can update content")

    changed = text_change
    if status is not None and article.status != ArticleStatus.IN_REVIEW:
        _move_to_review(article, actor_id=access.user_id)
        changed = True
        logger.info("article submitted for review article_id=%s author_id=%s", article.id, access.user_id)

    if title:
        article.title = title
    if content is not None:
        create_version(db, article, editor_id=access.user_id, title=title, content=content)
    if tags is not None:
        relink_article_tags(
            db,
            article_id=article.id,
            workspace_id=article.workspace_id,
            names=tags,
            created_by_id=access.user_id,
        )

    # 无实际变更时保留原最近编辑信息。
    if changed:
        article.last_edited_at = utcnow()
        article.last_edited_by_id = access.user_id
    db.flush()
    return article


def archive_article(db: Session, *, workspace_id: UUID, article_id: UUID) -> Article:
    article = get_active_article(db, workspace_id=workspace_id, article_id=article_id)
    article.is_archived = True
    db.flush()
    return article


def record_view(db: Session, article: Article) -> Article:
    """每次成功读取详情浏览数加一，不按访问者去重。"""
    db.execute(
        update(Article)
        .where(Article.id == article.id)
        .values(view_count=Article.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.refresh(article)
    return article
