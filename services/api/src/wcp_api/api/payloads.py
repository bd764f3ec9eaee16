"""路由层返回数据组装。"""

from typing import Any

from wcp_api.models.article import Approval, Article, ArticleVersion
from wcp_api.models.collaboration import Comment, Notification, Tag
from wcp_api.models.user import User
from wcp_api.models.workspace import Workspace, WorkspaceMember
from wcp_api.services.comments import CommentThread


def user_payload(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "global_role": user.global_role,
        "is_active": user.is_active,
        "last_login_at": user.last_login_at,
        "created_at": user.created_at,
    }


def user_brief(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "avatar": user.avatar}


def workspace_payload(workspace: Workspace, *, role: str | None = None) -> dict[str, Any]:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "description": workspace.description,
        "created_by_id": workspace.created_by_id,
        "is_archived": workspace.is_archived,
        "created_at": workspace.created_at,
        "updated_at": workspace.updated_at,
        "role": role,
    }


def member_payload(member: WorkspaceMember, user: User) -> dict[str, Any]:
    return {
        "id": member.id,
        "workspace_id": member.workspace_id,
        "user_id": member.user_id,
        "role": member.role,
        "joined_at": member.joined_at,
        "user": user_brief(user),
    }


def tag_brief(tag: Tag) -> dict[str, Any]:
    return {"id": tag.id, "name": tag.name}


def tag_payload(tag: Tag, *, article_count: int = 0) -> dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "workspace_id": tag.workspace_id,
        "created_by_id": tag.created_by_id,
        "created_at": tag.created_at,
        "article_count": article_count,
    }


def article_payload(article: Article, *, tags: list[Tag] | None = None) -> dict[str, Any]:
    return {
        "id": article.id,
        "workspace_id": article.workspace_id,
        "author_id": article.author_id,
        "title": article.title,
        "slug": article.slug,
        "current_version": article.current_version,
        "status": article.status,
        "view_count": article.view_count,
        "last_edited_at": article.last_edited_at,
        "last_edited_by_id": article.last_edited_by_id,
        "created_at": article.created_at,
        "updated_at": article.updated_at,
        "tags": [tag_brief(tag) for tag in tags or []],
    }


def version_payload(version: ArticleVersion) -> dict[str, Any]:
    return {
        "id": version.id,
        "article_id": version.article_id,
        "edited_by_id": version.edited_by_id,
        "version_number": version.version_number,
        "title": version.title,
        "content": version.content,
        "change_summary": version.change_summary,
        "created_at": version.created_at,
    }


def approval_payload(approval: Approval) -> dict[str, Any]:
    return {
        "id": approval.id,
        "article_id": approval.article_id,
        "reviewer_id": approval.reviewer_id,
        "status": approval.status,
        "feedback": approval.feedback,
        "reviewed_at": approval.reviewed_at,
        "created_at": approval.created_at,
    }


def comment_payload(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "article_id": comment.article_id,
        "author_id": comment.author_id,
        "content": comment.content,
        "parent_comment_id": comment.parent_comment_id,
        "is_edited": comment.is_edited,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def thread_payload(thread: CommentThread) -> dict[str, Any]:
    payload = comment_payload(thread.comment)
    payload["replies"] = [comment_payload(reply) for reply in thread.replies]
    return payload


def notification_payload(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "type": notification.type,
        "reference_id": notification.reference_id,
        "is_read": notification.is_read,
        "created_at": notification.created_at,
    }
