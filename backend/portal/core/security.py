# portal/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from portal.core.config import settings

# Fixed "strong" argon2 cost. Changing these only affects newly created hashes.
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 64 * 1024  # KiB
ARGON2_PARALLELISM = 4

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=ARGON2_TIME_COST,
    argon2__memory_cost=ARGON2_MEMORY_COST,
    argon2__parallelism=ARGON2_PARALLELISM,
)

SESSION_PURPOSE = "session"


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Compare a plaintext password against a stored hash.

    Returns False (instead of raising) for empty or unrecognised hashes.
    """
    if not password or not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


# -------------------------
# Session token helpers
# -------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_session_secret() -> None:
    if not settings.SESSION_SECRET or not settings.SESSION_SECRET.strip():
        raise RuntimeError("SESSION_SECRET must be set (session provider is enabled).")


def create_session_token(subject: str) -> str:
    """
    Signed session token for the credentials provider.

    subject = user's id. The role is deliberately not embedded: it is re-read
    from the user record on every request.
    """
    _require_session_secret()

    now = _now_utc()
    exp = now + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)

    payload = {
        "sub": subject,
        "purpose": SESSION_PURPOSE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }

    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=settings.SESSION_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    _require_session_secret()
    # Let callers decide how to handle JWTError
    return jwt.decode(token, settings.SESSION_SECRET, algorithms=[settings.SESSION_ALGORITHM])


def verify_session_token(token: str) -> dict[str, Any]:
    try:
        payload = decode_token(token)
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("purpose") != SESSION_PURPOSE:
        raise ValueError("Invalid token purpose")
    if not payload.get("sub"):
        raise ValueError("Token missing 'sub'")

    return payload
