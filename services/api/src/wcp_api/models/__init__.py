"""ORM 模型导出集合。"""

from wcp_api.models.article import Approval, Article, ArticleVersion
from wcp_api.models.collaboration import ArticleTag, Comment, Notification, Tag
from wcp_api.models.user import PasswordResetToken, User
from wcp_api.models.workspace import Workspace, WorkspaceMember

__all__ = [
    "Approval",
    "Article",
    "ArticleTag",
    "ArticleVersion",
    "Comment",
    "Notification",
    "PasswordResetToken",
    "Tag",
    "User",
    "Workspace",
    "WorkspaceMember",
]
