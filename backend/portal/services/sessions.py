from __future__ import annotations

from fastapi import Request, Response

from portal.core.config import settings
from portal.core.security import create_session_token


# -----------------------------
# Session cookie settings
# -----------------------------
def session_max_age_seconds() -> int:
    minutes = int(getattr(settings, "SESSION_EXPIRE_MINUTES", 60))
    return minutes * 60


def cookie_name() -> str:
    return str(getattr(settings, "SESSION_COOKIE_NAME", "portal_session")).strip() or "portal_session"


def cookie_samesite() -> str:
    v = str(getattr(settings, "SESSION_COOKIE_SAMESITE", "lax")).lower().strip()
    if v not in {"lax", "strict", "none"}:
        return "lax"
    return v


def issue_session(resp: Response, user_id: str) -> str:
    """Sign a session token for ``user_id``, set it as an HttpOnly cookie and return it."""
    token = create_session_token(subject=user_id)
    resp.set_cookie(
        key=cookie_name(),
        value=token,
        httponly=True,
        secure=bool(settings.SESSION_COOKIE_SECURE),
        samesite=cookie_samesite(),
        max_age=session_max_age_seconds(),
        path="/",
    )
    return token


def clear_session_cookie(resp: Response) -> None:
    resp.delete_cookie(key=cookie_name(), path="/")


def read_request_token(req: Request) -> str | None:
    """
    Credential carried by the request: ``Authorization: Bearer`` wins over the
    session cookie. Used by both identity providers.
    """
    auth_header = req.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token

    val = req.cookies.get(cookie_name())
    if not val:
        return None
    val = val.strip()
    return val or None
