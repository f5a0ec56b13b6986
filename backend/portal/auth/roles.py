# portal/auth/roles.py
from __future__ import annotations

from enum import Enum
from typing import Any

from portal.core.errors import ValidationError


class Role(str, Enum):
    JOB_SEEKER = "job_seeker"
    EMPLOYER = "employer"


ROLE_VALUES = frozenset(r.value for r in Role)

INVALID_ROLE_MESSAGE = "Invalid role. Must be either job_seeker or employer"

DASHBOARD_ROOTS: dict[Role, str] = {
    Role.JOB_SEEKER: "/dashboard/job-seeker",
    Role.EMPLOYER: "/dashboard/employer",
}


def parse_role(value: Any) -> Role | None:
    """Return the Role for a raw claim/body value, or None when absent or unknown."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str) or value not in ROLE_VALUES:
        return None
    return Role(value)


def dashboard_root(role: Role) -> str:
    return DASHBOARD_ROOTS[role]


def require_role(value: Any) -> Role:
    """Like ``parse_role`` but raises ValidationError for absent/unknown values."""
    role = parse_role(value)
    if role is None:
        raise ValidationError(INVALID_ROLE_MESSAGE, field="role")
    return role
