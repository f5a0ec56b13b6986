from __future__ import annotations

from typing import List

from portal.core.config import settings
from portal.core.errors import ValidationError


def evaluate_password(password: str | None) -> List[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    pw = password or ""
    violations: list[str] = []
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 6) or 0), 1)
    max_length = int(getattr(settings, "PASSWORD_MAX_LENGTH", 128) or 0)

    if len(pw) < min_length:
        violations.append("min_length")
    if max_length and len(pw) > max_length:
        violations.append("max_length")

    return violations


def ensure_strong_password(password: str | None) -> None:
    violations = evaluate_password(password)
    if "min_length" in violations:
        raise ValidationError(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long",
            field="password",
        )
    if "max_length" in violations:
        raise ValidationError(
            f"Password must be at most {settings.PASSWORD_MAX_LENGTH} characters long",
            field="password",
        )
