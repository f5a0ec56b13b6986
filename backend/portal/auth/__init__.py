# portal/auth/__init__.py
"""
Authentication and authorization for the job portal.

This package contains:
- identity.py: Canonical claim set (provider agnostic)
- roles.py: The role enum and role-specific dashboard roots
- policy.py: Path classification and the routing decision table
- providers.py: Session-token and Cognito identity provider adapters
- cognito.py: Cognito access-token verification
"""
from portal.auth.identity import Identity
from portal.auth.roles import Role

__all__ = ["Identity", "Role"]
