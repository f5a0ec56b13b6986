# portal/auth/identity.py
"""
Canonical claim set for a request.

Whichever identity provider is configured, the access middleware and the
routes only ever see an ``Identity``: who the caller is (if anyone) and which
role they currently hold (if any). Nothing downstream inspects raw tokens or
provider payloads.

The Identity object is INTERNAL ONLY and should not be returned directly
to clients; use ``to_debug_dict`` for anything user-facing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from portal.auth.roles import Role, parse_role


@dataclass(frozen=True)
class Identity:
    """
    Attributes:
        user_id: Identifier the rest of the app uses for this caller. For the
                 session provider it is the user record id; for Cognito it is
                 the ``sub`` claim.
        auth_provider: ``"session"``, ``"cognito"`` or ``None`` if unauthenticated.
        external_subject: The provider's subject claim.
        email: Email address if the provider exposed one.
        role: Current role, or ``None`` when the caller has not picked one yet.
        is_authenticated: True if the request carried a valid credential.
        raw_claims: Verified token claims, for audit/debug only.
    """

    user_id: str | None = None
    auth_provider: str | None = None
    external_subject: str | None = None
    email: str | None = None
    role: Role | None = None
    is_authenticated: bool = False
    raw_claims: dict[str, Any] = field(default_factory=dict)

    @property
    def has_role(self) -> bool:
        return self.is_authenticated and self.role is not None

    @classmethod
    def unauthenticated(cls) -> Identity:
        """Create an identity representing an unauthenticated request."""
        return cls()

    @classmethod
    def from_session(
        cls,
        user_id: str,
        *,
        role: Any = None,
        email: str | None = None,
        raw_claims: dict[str, Any] | None = None,
    ) -> Identity:
        return cls(
            user_id=user_id,
            auth_provider="session",
            external_subject=user_id,
            email=email,
            role=parse_role(role),
            is_authenticated=True,
            raw_claims=raw_claims or {},
        )

    @classmethod
    def from_cognito(
        cls,
        sub: str,
        *,
        role: Any = None,
        email: str | None = None,
        raw_claims: dict[str, Any] | None = None,
    ) -> Identity:
        # Unknown role attribute values count as "no role yet".
        return cls(
            user_id=sub,
            auth_provider="cognito",
            external_subject=sub,
            email=email,
            role=parse_role(role),
            is_authenticated=True,
            raw_claims=raw_claims or {},
        )

    def to_debug_dict(self) -> dict[str, Any]:
        """
        Return a safe subset of identity info.

        Does NOT include raw_claims to avoid leaking sensitive data.
        """
        return {
            "user_id": self.user_id,
            "auth_provider": self.auth_provider,
            "external_subject": self.external_subject,
            "email": self.email,
            "role": self.role.value if self.role else None,
            "is_authenticated": self.is_authenticated,
        }
