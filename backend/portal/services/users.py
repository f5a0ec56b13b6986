# portal/services/users.py
"""
Credential service.

Responsibilities:
- Creating user records with a hashed password and a role
- Raw lookup (includes password_hash, for authentication only) and sanitized
  lookup (UserOut, safe to return to clients)
- Password verification and role updates

This is the only module that reads or writes ``User.password_hash``.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from portal.auth.roles import Role, require_role
from portal.core.collection import DuplicateKeyError, UserCollection
from portal.core.errors import (
    AuthenticationFailure,
    DuplicateUserError,
    UserNotFoundError,
    ValidationError,
)
from portal.core.password_policy import ensure_strong_password
from portal.core.security import hash_password, verify_password
from portal.models.user import User
from portal.schemas.user import UserOut

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def validate_registration(
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    role: str | Role | None,
) -> Role:
    """
    Field-level checks for a registration request.

    Raises ValidationError naming the first offending field; returns the parsed role.
    """
    for field, value in (("name", name), ("email", email), ("password", password), ("role", role)):
        if not value or (isinstance(value, str) and not value.strip()):
            raise ValidationError("All fields are required", field=field)

    parsed_role = require_role(role)

    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format", field="email")

    ensure_strong_password(password)
    return parsed_role


def sanitize(user: User) -> UserOut:
    return UserOut.model_validate(user)


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    """Raw lookup, including password_hash. For authentication only."""
    if not email:
        return None
    return UserCollection(db).find_one(email=email)


def find_public_user_by_email(db: Session, email: str) -> Optional[UserOut]:
    user = find_user_by_email(db, email)
    return sanitize(user) if user else None


def find_user_by_id(db: Session, user_id: str) -> Optional[UserOut]:
    if not user_id:
        return None
    user = UserCollection(db).find_one(id=user_id)
    return sanitize(user) if user else None


def create_user(
    db: Session,
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    role: str | Role | None,
) -> UserOut:
    """
    Create a user record and return its sanitized form.

    The duplicate check runs before the insert; the unique index on email
    catches a concurrent insert that slips between the two.

    Raises:
        ValidationError: missing/invalid fields
        DuplicateUserError: email already registered
        StorageUnavailableError: the store could not be reached
    """
    parsed_role = validate_registration(name=name, email=email, password=password, role=role)

    users = UserCollection(db)
    if users.find_one(email=email) is not None:
        raise DuplicateUserError()

    now = _now_utc()
    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=parsed_role.value,
        created_at=now,
        updated_at=now,
    )

    try:
        user = users.insert_one(user)
    except DuplicateKeyError:
        logger.info("Concurrent registration rejected by unique index (email=%s)", email)
        raise DuplicateUserError()

    logger.info("Created user: id=%s, role=%s", user.id, user.role)
    return sanitize(user)


def authenticate_user(db: Session, email: str | None, password: str | None) -> User:
    """
    Return the stored user for valid credentials.

    Missing fields raise ValidationError; every other failure raises the same
    AuthenticationFailure so callers cannot tell which part was wrong.
    """
    for field, value in (("email", email), ("password", password)):
        if not value:
            raise ValidationError("Email and password are required", field=field)

    user = find_user_by_email(db, email)
    if user is None or not user.password_hash:
        raise AuthenticationFailure()

    if not verify_password(password, user.password_hash):
        raise AuthenticationFailure()

    return user


def update_user_role(db: Session, user_id: str, role: str | Role | None) -> UserOut:
    parsed_role = require_role(role)

    users = UserCollection(db)
    user = users.find_one(id=user_id)
    if user is None:
        raise UserNotFoundError()

    user = users.update_one(user, role=parsed_role.value, updated_at=_now_utc())
    logger.info("Updated role: id=%s, role=%s", user.id, user.role)
    return sanitize(user)
