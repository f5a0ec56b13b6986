# portal/core/collection.py
"""
Document-style access to the users table.

Services talk to ``UserCollection`` instead of building queries, which keeps
the storage contract small (find_one / insert_one / update_one) and puts the
translation of driver faults into domain errors in a single place. Pooling,
timeouts and retries stay with the SQLAlchemy engine.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.errors import StorageUnavailableError
from portal.models.user import User

logger = logging.getLogger(__name__)


class DuplicateKeyError(Exception):
    """Raised when an insert collides with a unique index (email)."""


class UserCollection:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_one(self, **criteria: Any) -> Optional[User]:
        """Return the first user whose columns equal ``criteria``, or None."""
        try:
            return self.db.query(User).filter_by(**criteria).first()
        except SQLAlchemyError as exc:
            logger.exception("User lookup failed (fields=%s)", sorted(criteria))
            raise StorageUnavailableError() from exc

    def insert_one(self, user: User) -> User:
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateKeyError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("User insert failed")
            raise StorageUnavailableError() from exc
        self.db.refresh(user)
        return user

    def update_one(self, user: User, **changes: Any) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        self.db.add(user)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("User update failed (id=%s)", user.id)
            raise StorageUnavailableError() from exc
        self.db.refresh(user)
        return user
