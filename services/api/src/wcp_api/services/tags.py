"""标签服务：工作空间内名称唯一、文章标签重建与删除保护。"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from wcp_api.db.session import flush_or_conflict
from wcp_api.exceptions import BadRequestError, ConflictError, NotFoundError
from wcp_api.models.collaboration import ArticleTag, Tag

TAG_EXISTS_MESSAGE = "Tag with this name already exists in the workspace"


def normalize_tag_name(name: str) -> str:
    """去除首尾空白；空名称视为非法输入。"""
    normalized = (name or "").strip()
    if not normalized:
        raise BadRequestError("Tag name is required")
    return normalized


def find_tag_by_name(db: Session, *, workspace_id: UUID, name: str) -> Tag | None:
    return db.execute(select(Tag).where(Tag.workspace_id == workspace_id).where(Tag.name == name)).scalar_one_or_none()


def get_tag(db: Session, *, workspace_id: UUID, tag_id: UUID) -> Tag:
    tag = db.get(Tag, tag_id)
    if tag is None or tag.workspace_id != workspace_id:
        raise NotFoundError("Tag not found")
    return tag


def create_tag(db: Session, *, workspace_id: UUID, name: str, created_by_id: UUID) -> Tag:
    """创建标签，同名（去空白后）在同一工作空间内冲突。"""
    normalized = normalize_tag_name(name)
    if find_tag_by_name(db, workspace_id=workspace_id, name=normalized):
        raise ConflictError(TAG_EXISTS_MESSAGE)
    tag = Tag(workspace_id=workspace_id, name=normalized, created_by_id=created_by_id)
    db.add(tag)
    flush_or_conflict(db, TAG_EXISTS_MESSAGE)
    return tag


def rename_tag(db: Session, tag: Tag, *, name: str) -> Tag:
    """重命名标签，唯一性检查排除自身。"""
    normalized = normalize_tag_name(name)
    existing = find_tag_by_name(db, workspace_id=tag.workspace_id, name=normalized)
    if existing is not None and existing.id != tag.id:
        raise ConflictError(TAG_EXISTS_MESSAGE)
    tag.name = normalized
    flush_or_conflict(db, TAG_EXISTS_MESSAGE)
    return tag


def count_tag_usage(db: Session, *, tag_id: UUID) -> int:
    return db.execute(select(func.count()).select_from(ArticleTag).where(ArticleTag.tag_id == tag_id)).scalar_one()


def delete_tag(db: Session, tag: Tag) -> None:
    """删除标签；仍被文章引用时拒绝。"""
    if count_tag_usage(db, tag_id=tag.id) > 0:
        raise BadRequestError("Cannot delete tag that is being used by articles", code="TAG_IN_USE")
    db.delete(tag)
    db.flush()


def resolve_tags(db: Session, *, workspace_id: UUID, names: Iterable[str], created_by_id: UUID) -> list[Tag]:
    """按名称查找标签，不存在则创建；重复名称只保留一次。"""
    resolved: list[Tag] = []
    seen: set[str] = set()
    for raw in names:
        name = normalize_tag_name(raw)
        if name in seen:
            continue
        seen.add(name)
        tag = find_tag_by_name(db, workspace_id=workspace_id, name=name)
        if tag is None:
            tag = Tag(workspace_id=workspace_id, name=name, created_by_id=created_by_id)
            db.add(tag)
            flush_or_conflict(db, TAG_EXISTS_MESSAGE)
        resolved.append(tag)
    return resolved


def relink_article_tags(
    db: Session,
    *,
    article_id: UUID,
    workspace_id: UUID,
    names: Iterable[str],
    created_by_id: UUID,
) -> list[Tag]:
    """以给定名称列表整体替换文章的标签关联。"""
    db.execute(delete(ArticleTag).where(ArticleTag.article_id == article_id))
    tags = resolve_tags(db, workspace_id=workspace_id, names=names, created_by_id=created_by_id)
    for tag in tags:
        db.add(ArticleTag(article_id=article_id, tag_id=tag.id))
    flush_or_conflict(db, "Tag already linked to article")
    return tags


def list_article_tags(db: Session, *, article_ids: Iterable[UUID]) -> dict[UUID, list[Tag]]:
    """批量读取多篇文章的标签，避免逐篇查询。"""
    ids = list(article_ids)
    grouped: dict[UUID, list[Tag]] = {article_id: [] for article_id in ids}
    if not ids:
        return grouped
    rows = db.execute(
        select(ArticleTag.article_id, Tag)
        .join(Tag, Tag.id == ArticleTag.tag_id)
        .where(ArticleTag.article_id.in_(ids))
        .order_by(Tag.name.asc())
    ).all()
    for article_id, tag in rows:
        grouped[article_id].append(tag)
    return grouped
