import hashlib
import hmac
import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import pyotp
from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException
from jose import jwt, JWTError
from passlib.hash import argon2

from app.core.config import settings

logger = logging.getLogger(__name__)

_DEV_SESSION_SECRET = "dev_only_secret_32_chars_minimum_length"

INPUT_LIMITS = {
    "email": 255,
    "password": 128,
    "name": 100,
    "card_title": 200,
    "card_notes": 10000,
    "comment_content": 5000,
    "column_title": 100,
    "tag_name": 50,
    "template_name": 100,
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": "; ".join([
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline'",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: https:",
        "font-src 'self'",
        "connect-src 'self' https://api.openai.com",
        "frame-ancestors 'none'",
        "base-uri 'self'",
        "form-action 'self'",
    ]),
}



# ---------- passwords ----------
def hash_password(plain: str) -> str:
    return argon2.using(time_cost=2, memory_cost=102400, parallelism=8).hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return argon2.verify(plain, hashed)
    except ValueError:
        return False


# 존재하지 않는 이메일도 같은 비용으로 검증 (응답 시간 차이 제거)
_DUMMY_HASH = None


def dummy_verify(plain: str) -> None:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password(secrets.token_hex(16))
    verify_password(plain, _DUMMY_HASH)


def validate_password(password: str) -> Optional[str]:
    """Return an error message, or None when the password is strong enough."""
    if len(password) < 8:
        return "Password must be at least 8 characters"
    if len(password) > INPUT_LIMITS["password"]:
        return f"Password must be {INPUT_LIMITS['password']} characters or less"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number"
    return None


def is_valid_email(email: str) -> bool:
    if not email or len(email) > INPUT_LIMITS["email"]:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_length(value: Optional[str], limit_key: str, field_name: str) -> None:
    limit = INPUT_LIMITS[limit_key]
    if value and len(value) > limit:
        raise HTTPException(status_code=400, detail=f"{field_name} must be {limit} characters or less")


def sanitize_error(exc: BaseException) -> str:
    if settings.is_production:
        return "An unexpected error occurred"
    return str(exc) or "An unexpected error occurred"


# ---------- session / mfa tokens (JWT) ----------
def session_secret() -> str:
    secret = settings.SESSION_SECRET
    if not secret:
        if settings.is_production:
            raise RuntimeError("SESSION_SECRET environment variable is required in production")
        logger.warning("Using default session secret. Set SESSION_SECRET for production.")
        return _DEV_SESSION_SECRET
    if len(secret) < 32:
        raise RuntimeError("SESSION_SECRET must be at least 32 characters")
    return secret


def _encode(claims: dict, ttl_seconds: int) -> str:
    now = datetime.now(timezone.utc)
    payload = dict(claims, iat=now, exp=now + timedelta(seconds=ttl_seconds))
    return jwt.encode(payload, session_secret(), algorithm=settings.SESSION_ALG)


def _decode(token: str, typ: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, session_secret(), algorithms=[settings.SESSION_ALG])
    except JWTError:
        return None
    if payload.get("typ") != typ or not payload.get("sub"):
        return None
    return payload


def create_session_token(user_id: str, email: str, name: str) -> str:
    return _encode(
        {"sub": user_id, "email": email, "name": name, "typ": "session"},
        settings.SESSION_MAX_AGE_SECONDS,
    )


def decode_session_token(token: str) -> Optional[dict]:
    return _decode(token, "session")


def create_mfa_pending_token(user_id: str) -> str:
    return _encode({"sub": user_id, "typ": "mfa"}, settings.MFA_PENDING_TTL_SECONDS)


def decode_mfa_pending_token(token: str) -> Optional[dict]:
    return _decode(token, "mfa")


# ---------- one-time tokens ----------
def generate_token() -> str:
    return secrets.token_hex(32)


# ---------- admin approval (HMAC) ----------
def generate_approval_token(user_id: str, action: str) -> str:
    secret = settings.approval_secret
    if not secret:
        raise RuntimeError("ADMIN_APPROVAL_SECRET or SESSION_SECRET must be configured")
    data = f"{user_id}:{action}".encode()
    return hmac.new(secret.encode(), data, hashlib.sha256).hexdigest()


def verify_approval_token(user_id: str, action: str, token: str) -> bool:
    if not settings.approval_secret:
        return False
    expected = generate_approval_token(user_id, action)
    return hmac.compare_digest(token.encode(), expected.encode())


# ---------- TOTP ----------
def generate_mfa_secret(email: str) -> dict:
    secret = pyotp.random_base32()
    uri = pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=settings.MFA_ISSUER)
    return {"secret": secret, "otpauth_url": uri}


def verify_totp(secret: str, code: str) -> bool:
    code = (code or "").strip().replace(" ", "")
    if not code.isdigit():
        return False
    try:
        return pyotp.TOTP(secret).verify(code, valid_window=1)
    except (ValueError, TypeError):
        logger.warning("TOTP verification failed for malformed secret")
        return False

