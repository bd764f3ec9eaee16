"""账号服务：注册与删除策略。"""

from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.orm import Session

from wcp_api.db.session import flush_or_conflict
from wcp_api.exceptions import ConflictError
from wcp_api.models.article import Approval, Article, ArticleVersion
from wcp_api.models.collaboration import Comment, Notification, Tag
from wcp_api.models.enums import GlobalRole
from wcp_api.models.user import PasswordResetToken, User
from wcp_api.models.workspace import Workspace, WorkspaceMember
from wcp_api.services.local_auth import hash_password, normalize_email

EMAIL_TAKEN_MESSAGE = "User with this email already exists"

# 用户署名的内容，存在任一即阻止删除账号。
_AUTHORED_CONTENT = (
    ("articles", Article.author_id),
    ("versions", ArticleVersion.edited_by_id),
    ("tags", Tag.created_by_id),
    ("comments", Comment.author_id),
    ("approvals", Approval.reviewer_id),
    ("workspaces", Workspace.created_by_id),
)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    """创建普通用户账号，邮箱按小写归一化后全局唯一。"""
    normalized = normalize_email(email)
    if find_user_by_email(db, normalized):
        raise ConflictError(EMAIL_TAKEN_MESSAGE, code="EMAIL_TAKEN")
    user = User(
        name=name.strip(),
        email=normalized,
        password_hash=hash_password(password),
        global_role=GlobalRole.USER,
        is_active=True,
    )
    db.add(user)
    flush_or_conflict(db, EMAIL_TAKEN_MESSAGE)
    return user


def authored_content_kinds(db: Session, *, user_id: UUID) -> list[str]:
    """返回用户仍署名的内容类型列表。"""
    return [kind for kind, column in _AUTHORED_CONTENT if db.execute(select(exists().where(column == user_id))).scalar()]


def delete_user(db: Session, user: User) -> None:
    """删除账号：署名内容存在时拒绝；成员关系、通知与重置令牌随账号一并删除，文章的最近编辑人置空。"""
    blocking = authored_content_kinds(db, user_id=user.id)
    if blocking:
        raise ConflictError(
            "Cannot delete a user who still owns content; reassign it first",
            code="USER_HAS_CONTENT",
            details={"content": blocking},
        )
    db.execute(delete(WorkspaceMember).where(WorkspaceMember.user_id == user.id))
    db.execute(delete(Notification).where(Notification.user_id == user.id))
    db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
    db.execute(update(Article).where(Article.last_edited_by_id == user.id).values(last_edited_by_id=None))
    db.delete(user)
    db.flush()
