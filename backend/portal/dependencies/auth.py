from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from portal.auth.identity import Identity
from portal.auth.providers import IdentityProvider


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_identity(request: Request) -> Identity:
    """Identity resolved by the access middleware (unauthenticated if absent)."""
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, Identity):
        return identity
    return Identity.unauthenticated()


def require_identity(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_authenticated or not identity.user_id:
        raise _unauthorized()
    return identity
