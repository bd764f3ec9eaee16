"""FastAPI 应用入口点。"""

from fastapi import FastAPI

from wcp_api.api import health
from wcp_api.api.router import api_router
from wcp_api.core.config import get_settings
from wcp_api.exceptions import register_exception_handlers
from wcp_api.middlewares import register_middlewares

settings = get_settings()


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        description=(
            "多工作空间内容协作平台接口。\n\n"
            "所有接口统一返回：`{success, message, request_id, data}`，列表接口附带 `pagination`。\n"
            "通过 Bearer 访问令牌进行认证，刷新令牌保存在 HttpOnly Cookie 中。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "auth", "description": "注册、登录、令牌刷新与密码重置。"},
            {"name": "users", "description": "当前用户资料与账号管理。"},
            {"name": "admin", "description": "按全局角色授权的平台管理。"},
            {"name": "workspaces", "description": "工作空间生命周期与成员管理。"},
            {"name": "articles", "description": "文章创建、编辑、归档与提交评审。"},
            {"name": "versions", "description": "文章版本历史。"},
            {"name": "approvals", "description": "评审意见与文章状态汇总。"},
            {"name": "comments", "description": "文章评论与一层回复。"},
            {"name": "tags", "description": "工作空间内标签管理。"},
            {"name": "notifications", "description": "站内通知。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    # 探针挂在根路径，便于编排系统直接访问 /health。
    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
