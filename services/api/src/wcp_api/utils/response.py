"""统一响应结构工具。"""

from typing import Any

from fastapi import Request

DEFAULT_ERROR_MESSAGE = "Something went wrong"

_SUCCESS_MESSAGE_BY_METHOD = {
    "GET": "Retrieved successfully",
    "POST": "Operation completed successfully",
    "PUT": "Updated successfully",
    "PATCH": "Updated successfully",
    "DELETE": "Deleted successfully",
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def success(
    request: Request,
    data: Any = None,
    *,
    message: str | None = None,
    pagination: dict[str, int] | None = None,
) -> dict[str, Any]:
    """构造统一成功响应结构。"""
    payload: dict[str, Any] = {
        "success": True,
        "message": message or _SUCCESS_MESSAGE_BY_METHOD.get(request.method.upper(), "OK"),
        "request_id": _request_id(request),
        "data": data,
    }
    if pagination is not None:
        payload["pagination"] = pagination
    return payload


def error_payload(
    request: Request,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """构造统一错误响应结构。"""
    final_details: dict[str, Any] = {
        "method": request.method.upper(),
        "path": request.url.path,
    }
    if details:
        final_details.update(details)
    return {
        "success": False,
        "message": message,
        "request_id": _request_id(request),
        "error": {
            "code": code,
            "details": final_details,
        },
    }
