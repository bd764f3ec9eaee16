"""顶层路由注册。"""

from fastapi import APIRouter

from . import (
    admin,
    approvals,
    articles,
    auth,
    comments,
    notifications,
    tags,
    users,
    versions,
    workspaces,
)

api_router = APIRouter()

# 固定注册顺序，便于在线接口文档展示和问题定位。
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
api_router.include_router(workspaces.router)
api_router.include_router(articles.router)
api_router.include_router(versions.router)
api_router.include_router(approvals.router)
api_router.include_router(comments.router)
api_router.include_router(tags.router)
api_router.include_router(notifications.router)
