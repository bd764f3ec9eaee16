"""业务异常定义与异常处理注册。

业务异常（AppError 及其子类）是可预期的“操作型错误”，
其状态码与信息会原样返回给客户端；其他异常一律记录日志后以 500 返回，
不向客户端泄露内部细节。
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wcp_api.utils.response import DEFAULT_ERROR_MESSAGE, error_payload

logger = logging.getLogger("wcp_api.errors")


class AppError(HTTPException):
    """操作型错误基类，携带状态码、错误码与可读信息。"""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "APP_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.code = code or self.default_code
        detail: dict[str, Any] = {"code": self.code, "message": message}
        if details:
            detail["details"] = details
        super().__init__(status_code=self.default_status_code, detail=detail)


class BadRequestError(AppError):
    default_status_code = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"


class UnauthenticatedError(AppError):
    default_status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHENTICATED"


class ForbiddenError(AppError):
    default_status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundError(AppError):
    default_status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    default_status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class InvalidTransitionError(AppError):
    """文章状态机拒绝的状态迁移。"""

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_TRANSITION"


def _default_http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "BAD_REQUEST"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "UNAUTHENTICATED"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "FORBIDDEN"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "NOT_FOUND"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "METHOD_NOT_ALLOWED"
    if status_code == status.HTTP_409_CONFLICT:
        return "CONFLICT"
    return "HTTP_ERROR"


def _parse_http_detail(detail: object, status_code: int) -> tuple[str, str, dict[str, Any]]:
    code = _default_http_error_code(status_code)
    message = "Request failed"
    details: dict[str, Any] = {"status_code": status_code}

    if isinstance(detail, dict):
        code = str(detail.get("code") or code)
        message = str(detail.get("message") or detail.get("detail") or message)
        raw_details = detail.get("details")
        if isinstance(raw_details, dict):
            details.update(raw_details)
        elif raw_details is not None:
            details["details"] = raw_details
        return code, message, details

    if isinstance(detail, str) and detail:
        return code, detail, details

    return code, message, details


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """将操作型错误与协议异常统一包装为标准错误结构。"""
    if exc.status_code == status.HTTP_404_NOT_FOUND and not isinstance(exc, HTTPException):
        # 未匹配任何路由时由框架抛出。
        code, message, details = "NOT_FOUND", f"Can't find {request.url.path} on this server!", {"status_code": 404}
    else:
        code, message, details = _parse_http_detail(exc.detail, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(request, code=code, message=message, details=details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """统一处理请求参数校验错误。"""
    normalized_errors = [
        {
            "field": ".".join(str(item) for item in err.get("loc", []) if item != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    first = normalized_errors[0] if normalized_errors else None
    message = f"{first['field']}: {first['message']}" if first and first["field"] else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(
            request,
            code="VALIDATION_ERROR",
            message=message,
            details={"status_code": status.HTTP_400_BAD_REQUEST, "errors": normalized_errors},
        ),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    """处理未捕获异常，记录日志并避免内部细节泄露。"""
    logger.exception(
        "unhandled error request_id=%s method=%s path=%s",
        getattr(request.state, "request_id", None),
        request.method,
        request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(
            request,
            code="INTERNAL_ERROR",
            message=DEFAULT_ERROR_MESSAGE,
            details={"status_code": status.HTTP_500_INTERNAL_SERVER_ERROR},
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """集中注册异常处理器。"""
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)
