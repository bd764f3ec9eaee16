"""路由模块导出集合。"""

from . import (
    admin,
    approvals,
    articles,
    auth,
    comments,
    health,
    notifications,
    tags,
    users,
    versions,
    workspaces,
)

__all__ = [
    "admin",
    "approvals",
    "articles",
    "auth",
    "comments",
    "health",
    "notifications",
    "tags",
    "users",
    "versions",
    "workspaces",
]
