"""令牌签发与校验工具。

访问令牌与刷新令牌使用不同密钥签名，并通过 `type` 声明区分用途，
任何解析失败统一视为未认证。
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Any
from uuid import UUID, uuid4

import jwt
from jwt import InvalidTokenError

from wcp_api.core.config import get_settings
from wcp_api.exceptions import UnauthenticatedError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass
class IssuedToken:
    """已签发令牌。"""

    token: str
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        return max(0, int((self.expires_at - datetime.now(timezone.utc)).total_seconds()))


def _secret_for(token_type: str) -> str:
    settings = get_settings()
    if token_type == REFRESH_TOKEN_TYPE:
        return settings.auth_refresh_secret
    return settings.auth_jwt_secret


def _issue(user_id: UUID, *, token_type: str, ttl_seconds: int, extra: dict[str, Any] | None = None) -> IssuedToken:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=ttl_seconds)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": str(uuid4()),
    }
    if extra:
        claims.update(extra)
    token = jwt.encode(claims, _secret_for(token_type), algorithm=settings.auth_jwt_algorithm)
    return IssuedToken(token=token, expires_at=expires_at)


def issue_access_token(user_id: UUID, *, email: str | None = None) -> IssuedToken:
    """签发访问令牌（默认 15 分钟）。"""
    settings = get_settings()
    extra = {"email": email} if email else None
    return _issue(
        user_id,
        token_type=ACCESS_TOKEN_TYPE,
        ttl_seconds=settings.auth_access_token_ttl_seconds,
        extra=extra,
    )


def issue_refresh_token(user_id: UUID) -> IssuedToken:
    """签发刷新令牌（默认 7 天）。"""
    settings = get_settings()
    return _issue(user_id, token_type=REFRESH_TOKEN_TYPE, ttl_seconds=settings.auth_refresh_token_ttl_seconds)


def decode_token(token: str, *, token_type: str) -> UUID:
    """校验令牌签名、有效期与用途，返回用户 ID。"""
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            key=_secret_for(token_type),
            algorithms=[settings.auth_jwt_algorithm],
            leeway=settings.auth_jwt_leeway_seconds,
            options={"require": ["sub", "exp"]},
        )
    except InvalidTokenError as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc

    if claims.get("type") != token_type:
        raise UnauthenticatedError("Invalid or expired token")
    try:
        return UUID(str(claims["sub"]))
    except ValueError as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc


def extract_bearer_token(authorization: str | None) -> str:
    """从 Authorization 头中提取 Bearer token，兼容重复头被逗号拼接的场景。"""
    if not authorization:
        raise UnauthenticatedError("You are not logged in")
    tokens = re.findall(r"Bearer\s+([^,\s]+)", authorization, flags=re.IGNORECASE)
    if not tokens:
        raise UnauthenticatedError("You are not logged in")
    # 取最后一个，与网关追加头的顺序保持一致。
    return tokens[-1].strip()
