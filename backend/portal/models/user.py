# portal/models/user.py
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String, func

from portal.core.base import Base


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IS NULL OR role IN ('job_seeker', 'employer')",
            name="ck_users_role",
        ),
    )

    id = Column(String(32), primary_key=True, default=_new_user_id)

    # Stored exactly as submitted; lookups are case-sensitive.
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=True)
    # Absent for identities managed entirely by an external provider.
    password_hash = Column(String(255), nullable=True)
    # job_seeker | employer; NULL until role selection completes.
    role = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
