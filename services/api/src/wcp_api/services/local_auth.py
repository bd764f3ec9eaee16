"""本地账号认证服务：口令哈希、重置密码令牌与邮件发送桩。"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from wcp_api.core.config import get_settings
from wcp_api.exceptions import BadRequestError
from wcp_api.models.base import utcnow
from wcp_api.models.user import PasswordResetToken, User

logger = logging.getLogger("wcp_api.auth")

INVALID_RESET_TOKEN_MESSAGE = "Password reset token is invalid or has expired"


def normalize_email(email: str) -> str:
    """统一邮箱格式，避免大小写导致重复账号。"""
    return email.strip().lower()


def hash_password(password: str) -> str:
    """使用 PBKDF2-SHA256 生成口令哈希。"""
    settings = get_settings()
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        settings.auth_password_hash_iterations,
    )
    salt_b64 = base64.b64encode(salt).decode("ascii")
    digest_b64 = base64.b64encode(digest).decode("ascii")
    return f"pbkdf2_sha256${settings.auth_password_hash_iterations}${salt_b64}${digest_b64}"


def verify_password(password: str, password_hash: str) -> bool:
    """校验口令是否匹配。"""
    try:
        algorithm, iterations_text, salt_b64, expected_digest_b64 = password_hash.split("$", 3)
        if algorithm != "pbkdf2_sha256":
            return False
        iterations = int(iterations_text)
        salt = base64.b64decode(salt_b64.encode("ascii"))
        expected_digest = base64.b64decode(expected_digest_b64.encode("ascii"))
    except (ValueError, TypeError, binascii.Error):
        return False

    actual_digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual_digest, expected_digest)


def _digest_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _as_aware(value: datetime) -> datetime:
    # 部分驱动（如 SQLite）读回的时间不带时区。
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def issue_password_reset_token(db: Session, user: User) -> str:
    """生成重置令牌，仅落库摘要，并使该用户之前未使用的令牌失效。"""
    settings = get_settings()
    now = utcnow()
    db.execute(
        update(PasswordResetToken)
        .where(PasswordResetToken.user_id == user.id)
        .where(PasswordResetToken.used_at.is_(None))
        .values(used_at=now)
    )
    raw_token = secrets.token_urlsafe(32)
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token_hash=_digest_token(raw_token),
            expires_at=now + timedelta(seconds=settings.password_reset_ttl_seconds),
        )
    )
    db.flush()
    return raw_token


def find_valid_reset_token(db: Session, raw_token: str) -> PasswordResetToken:
    """查找未使用且未过期的重置令牌。"""
    record = db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == _digest_token(raw_token))
    ).scalar_one_or_none()
    if record is None or record.used_at is not None or _as_aware(record.expires_at) <= utcnow():
        raise BadRequestError(INVALID_RESET_TOKEN_MESSAGE, code="INVALID_RESET_TOKEN")
    return record


def reset_password(db: Session, *, raw_token: str, new_password: str) -> User:
    """消费重置令牌并设置新口令。"""
    record = find_valid_reset_token(db, raw_token)
    user = db.get(User, record.user_id)
    if user is None or not user.is_active:
        raise BadRequestError(INVALID_RESET_TOKEN_MESSAGE, code="INVALID_RESET_TOKEN")
    user.password_hash = hash_password(new_password)
    record.used_at = utcnow()
    db.flush()
    return user


def send_email(*, to: str, subject: str, body: str) -> None:
    """邮件发送桩：仅记录日志，不对外投递。"""
    settings = get_settings()
    logger.info("email queued from=%s to=%s subject=%s", settings.mail_from, to, subject)
    logger.debug("email body to=%s body=%s", to, body)
