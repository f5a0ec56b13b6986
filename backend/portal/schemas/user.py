from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    """Sanitized user record. Never carries password material."""

    id: str
    name: str | None = None
    email: str
    role: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UpdateRoleIn(BaseModel):
    role: str | None = None


class UpdateRoleOut(BaseModel):
    message: str
    role: str


class IdentityOut(BaseModel):
    user_id: str | None = None
    auth_provider: str | None = None
    external_subject: str | None = None
    email: str | None = None
    role: str | None = None
    is_authenticated: bool = False
