"""认证接口：注册、登录、刷新令牌、登出与密码重置。"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from wcp_api.api.payloads import user_payload
from wcp_api.core.config import get_settings
from wcp_api.core.security import REFRESH_TOKEN_TYPE, decode_token, issue_access_token, issue_refresh_token
from wcp_api.db.session import get_db
from wcp_api.dependencies import get_current_user
from wcp_api.exceptions import BadRequestError, UnauthenticatedError
from wcp_api.models.base import utcnow
from wcp_api.models.user import User
from wcp_api.schemas.auth import (
    AccessTokenData,
    AuthLoginRequest,
    AuthLogoutData,
    AuthRegisterRequest,
    AuthSessionData,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ResetTokenStatusData,
    VerifyResetTokenRequest,
)
from wcp_api.schemas.common import ErrorResponse, SuccessResponse
from wcp_api.schemas.user import UserData
from wcp_api.services.accounts import find_user_by_email, register_user
from wcp_api.services.local_auth import (
    find_valid_reset_token,
    issue_password_reset_token,
    reset_password,
    send_email,
    verify_password,
)
from wcp_api.utils.response import success

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: Response, user: User) -> None:
    settings = get_settings()
    refresh = issue_refresh_token(user.id)
    response.set_cookie(
        key=settings.auth_refresh_cookie_name,
        value=refresh.token,
        max_age=settings.auth_refresh_token_ttl_seconds,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )


def _session_data(user: User) -> dict:
    access = issue_access_token(user.id, email=user.email)
    return {
        "access_token": access.token,
        "token_type": "bearer",
        "expires_at": access.expires_at,
        "expires_in": access.expires_in,
        "user": user_payload(user),
    }


@router.post(
    "/register",
    summary="注册本地账号",
    description="创建本地账号（邮箱+密码），返回访问令牌并写入刷新令牌 Cookie。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AuthSessionData],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register(
    payload: AuthRegisterRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """注册本地账号。"""
    user = register_user(db, name=payload.name, email=payload.email, password=payload.password)
    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)

    _set_refresh_cookie(response, user)
    return success(request, _session_data(user), message="User registered successfully")


@router.post(
    "/login",
    summary="本地账号登录",
    description="使用邮箱密码登录，返回 Bearer 访问令牌并写入刷新令牌 Cookie。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthSessionData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def login(
    payload: AuthLoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """本地账号登录并签发访问令牌。"""
    user = find_user_by_email(db, payload.email)
    # 邮箱不存在与口令错误返回相同信息，避免账号枚举。
    if user is None or not verify_password(payload.password, user.password_hash):
        raise BadRequestError("Invalid credentials", code="INVALID_CREDENTIALS")
    if not user.is_active:
        raise UnauthenticatedError("Your account has been deactivated")

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)

    _set_refresh_cookie(response, user)
    return success(request, _session_data(user), message="Logged in successfully")


@router.get(
    "/refresh",
    summary="刷新访问令牌",
    description="读取刷新令牌 Cookie，签发新的访问令牌并轮换刷新令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AccessTokenData],
    responses={401: {"model": ErrorResponse}},
)
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    """使用刷新令牌换取新的访问令牌。"""
    settings = get_settings()
    token = request.cookies.get(settings.auth_refresh_cookie_name)
    if not token:
        raise UnauthenticatedError("Refresh token not found")
    user_id = decode_token(token, token_type=REFRESH_TOKEN_TYPE)

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthenticatedError("Invalid refresh token")

    _set_refresh_cookie(response, user)
    access = issue_access_token(user.id, email=user.email)
    return success(
        request,
        {
            "access_token": access.token,
            "token_type": "bearer",
            "expires_at": access.expires_at,
            "expires_in": access.expires_in,
        },
        message="Token refreshed successfully",
    )


@router.post(
    "/logout",
    summary="登出",
    description="清除刷新令牌 Cookie。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthLogoutData],
    responses={401: {"model": ErrorResponse}},
)
def logout(request: Request, response: Response, user: User = Depends(get_current_user)):
    """登出当前会话。"""
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_refresh_cookie_name,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite="strict",
    )
    return success(request, {"logged_out": True}, message="Logged out successfully")


@router.get(
    "/me",
    summary="查询当前登录用户",
    description="返回当前访问令牌对应的用户资料。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[UserData],
    responses={401: {"model": ErrorResponse}},
)
def me(request: Request, user: User = Depends(get_current_user)):
    """返回当前用户公开资料。"""
    return success(request, user_payload(user))


@router.post(
    "/forgot-password",
    summary="申请重置密码",
    description="无论邮箱是否存在都返回成功；账号存在时通过邮件发送重置令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={400: {"model": ErrorResponse}},
)
def forgot_password(payload: ForgotPasswordRequest, request: Request, db: Session = Depends(get_db)):
    """生成重置令牌并发送邮件。"""
    user = find_user_by_email(db, payload.email)
    if user is not None and user.is_active:
        raw_token = issue_password_reset_token(db, user)
        db.commit()
        send_email(
            to=user.email,
            subject="Password reset request",
            body=f"Use this token to reset your password: {raw_token}",
        )
    return success(request, None, message="If that email is registered, a reset link has been sent")


@router.post(
    "/verify-reset-token",
    summary="校验重置令牌",
    description="令牌存在、未使用且未过期时返回成功，否则返回 400。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[ResetTokenStatusData],
    responses={400: {"model": ErrorResponse}},
)
def verify_reset_token(payload: VerifyResetTokenRequest, request: Request, db: Session = Depends(get_db)):
    find_valid_reset_token(db, payload.token)
    return success(request, {"valid": True}, message="Token is valid")


@router.post(
    "/reset-password",
    summary="重置密码",
    description="使用重置令牌设置新密码，令牌随即失效。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[None],
    responses={400: {"model": ErrorResponse}},
)
def reset_password_route(payload: ResetPasswordRequest, request: Request, db: Session = Depends(get_db)):
    reset_password(db, raw_token=payload.token, new_password=payload.password)
    db.commit()
    return success(request, None, message="Password has been reset successfully")
