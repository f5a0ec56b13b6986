# portal/auth/providers.py
"""
Identity provider adapters.

The access middleware depends only on ``IdentityProvider``: turn a request
into an ``Identity`` and, for the role-selection flow, write a role for the
caller. Two adapters exist:

- ``SessionTokenProvider``: our own signed session tokens, users and roles in
  the users collection.
- ``CognitoIdentityProvider``: Cognito access tokens, role kept as a Cognito
  user attribute.

Neither adapter caches roles between requests; every call re-reads the
provider's current view of the caller.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from fastapi import Request
from sqlalchemy.orm import Session

from portal.auth.cognito import (
    CognitoInvalidTokenError,
    CognitoTokenExpiredError,
    CognitoVerificationError,
    verify_cognito_access_token,
)
from portal.auth.identity import Identity
from portal.auth.roles import Role, require_role
from portal.core.config import settings
from portal.core.database import SessionLocal
from portal.core.errors import IdentityProviderError
from portal.core.security import verify_session_token
from portal.services import users as user_service
from portal.services.cognito_client import (
    CognitoClientError,
    cognito_admin_set_attribute,
    cognito_get_user,
)
from portal.services.sessions import read_request_token

logger = logging.getLogger(__name__)

# Cognito error codes that mean "this token no longer identifies anyone".
_COGNITO_SESSION_GONE = frozenset({"NotAuthorizedException", "UserNotFoundException"})


class IdentityProvider(ABC):
    name: str = ""

    @abstractmethod
    def authenticate(self, request: Request) -> Identity:
        """
        Resolve the caller. Missing/invalid credentials give
        ``Identity.unauthenticated()``; provider outages raise
        ``IdentityProviderError`` (or ``StorageUnavailableError``).
        """

    @abstractmethod
    def set_role(self, identity: Identity, role: Role | str) -> Role:
        """Persist ``role`` for the caller identified by ``identity``."""


class SessionTokenProvider(IdentityProvider):
    name = "session"

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def authenticate(self, request: Request) -> Identity:
        token = read_request_token(request)
        if not token:
            return Identity.unauthenticated()

        try:
            claims = verify_session_token(token)
        except ValueError as exc:
            logger.info("Rejected session token: %s", exc)
            return Identity.unauthenticated()

        db = self._session_factory()
        try:
            user = user_service.find_user_by_id(db, str(claims["sub"]))
        finally:
            db.close()

        if user is None:
            logger.info("Session token subject %s has no user record", claims["sub"])
            return Identity.unauthenticated()

        return Identity.from_session(user.id, role=user.role, email=user.email, raw_claims=claims)

    def set_role(self, identity: Identity, role: Role | str) -> Role:
        parsed = require_role(role)
        db = self._session_factory()
        try:
            user_service.update_user_role(db, identity.user_id, parsed)
        finally:
            db.close()
        return parsed


class CognitoIdentityProvider(IdentityProvider):
    name = "cognito"

    def __init__(self, role_attribute: str | None = None) -> None:
        self.role_attribute = role_attribute or settings.COGNITO_ROLE_ATTRIBUTE

    def authenticate(self, request: Request) -> Identity:
        token = read_request_token(request)
        if not token:
            return Identity.unauthenticated()

        try:
            claims = verify_cognito_access_token(token)
        except CognitoTokenExpiredError:
            logger.info("Cognito access token expired")
            return Identity.unauthenticated()
        except CognitoInvalidTokenError as exc:
            logger.warning("Rejected invalid Cognito token: %s", exc)
            return Identity.unauthenticated()
        except CognitoVerificationError as exc:
            logger.error("Cognito verification unavailable: %s", exc)
            raise IdentityProviderError() from exc

        # Access tokens don't carry custom attributes; read the live profile.
        try:
            attributes = cognito_get_user(token)
        except CognitoClientError as exc:
            if exc.code in _COGNITO_SESSION_GONE:
                logger.info("Cognito session no longer valid for %s: %s", claims["sub"], exc.code)
                return Identity.unauthenticated()
            logger.error("Cannot fetch Cognito profile for %s: %s", claims["sub"], exc)
            raise IdentityProviderError() from exc

        return Identity.from_cognito(
            claims["sub"],
            role=attributes.get(self.role_attribute),
            email=attributes.get("email"),
            raw_claims=claims,
        )

    def set_role(self, identity: Identity, role: Role | str) -> Role:
        parsed = require_role(role)
        username = identity.raw_claims.get("username") or identity.external_subject
        try:
            cognito_admin_set_attribute(username=username, name=self.role_attribute, value=parsed.value)
        except CognitoClientError as exc:
            logger.error("Failed to update role attribute for %s: %s", identity.external_subject, exc)
            raise IdentityProviderError() from exc
        logger.info("Updated Cognito role: sub=%s, role=%s", identity.external_subject, parsed.value)
        return parsed


def build_identity_provider(name: str | None = None) -> IdentityProvider:
    name = (name or settings.IDENTITY_PROVIDER).strip().lower()
    if name == "session":
        return SessionTokenProvider()
    if name == "cognito":
        return CognitoIdentityProvider()
    raise RuntimeError(f"Unknown identity provider: {name}")
