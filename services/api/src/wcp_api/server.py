"""服务进程启动入口。

启动顺序:
1) 初始化日志
2) 安装进程级未捕获异常钩子（记录后以退出码 1 终止，由外部守护进程负责重启）
3) 探测数据库连通性，失败直接退出
4) 启动 uvicorn
"""

import asyncio
import logging
import os
import sys

import uvicorn
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

import wcp_api.models  # noqa: F401
from wcp_api.core.config import get_settings
from wcp_api.core.logging import setup_logging
from wcp_api.db.session import engine
from wcp_api.models.base import Base

logger = logging.getLogger("wcp_api.server")


def _terminate(code: int = 1) -> None:
    logging.shutdown()
    os._exit(code)


def _excepthook(exc_type, exc_value, exc_traceback) -> None:
    """记录未捕获异常后终止进程。"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("uncaught exception, shutting down", exc_info=(exc_type, exc_value, exc_traceback))
    _terminate(1)


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """事件循环中未处理的异常同样视为致命错误。"""
    exc = context.get("exception")
    logger.critical(
        "unhandled event loop error: %s",
        context.get("message", "unknown"),
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
    )
    _terminate(1)


def probe_database() -> bool:
    """执行最小查询确认数据库可用。"""
    try:
        with engine.connect() as conn:
            conn.execute(text("select 1"))
    except SQLAlchemyError:
        logger.exception("database connectivity probe failed")
        return False
    return True


async def _serve(config: uvicorn.Config) -> None:
    asyncio.get_running_loop().set_exception_handler(_loop_exception_handler)
    await uvicorn.Server(config).serve()


def main() -> None:
    """启动接口服务。"""
    setup_logging()
    sys.excepthook = _excepthook
    settings = get_settings()

    if not probe_database():
        sys.exit(1)
    logger.info("database connection established")
    if settings.db_auto_create:
        # 仅创建缺失的表，不做结构迁移。
        Base.metadata.create_all(bind=engine)

    config = uvicorn.Config(
        "wcp_api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
    logger.info("server starting host=%s port=%s env=%s", settings.server_host, settings.server_port, settings.app_env)
    asyncio.run(_serve(config))


if __name__ == "__main__":
    main()
