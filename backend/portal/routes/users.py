from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.auth.identity import Identity
from portal.auth.providers import IdentityProvider
from portal.core.database import get_db
from portal.core.errors import UserNotFoundError
from portal.dependencies.auth import get_identity_provider, require_identity
from portal.schemas.user import IdentityOut, UpdateRoleIn, UpdateRoleOut, UserOut
from portal.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["users"])


@router.post("/update-role", response_model=UpdateRoleOut)
def update_role(
    payload: UpdateRoleIn,
    identity: Identity = Depends(require_identity),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    # Always the caller's own identity; the body carries no user id.
    role = provider.set_role(identity, payload.role)
    return {"message": "Role updated successfully", "role": role.value}


@router.get("/me", response_model=UserOut | IdentityOut)
def get_me(identity: Identity = Depends(require_identity), db: Session = Depends(get_db)):
    if identity.auth_provider != "session":
        return IdentityOut(**identity.to_debug_dict())

    user = user_service.find_user_by_id(db, identity.user_id)
    if user is None:
        raise UserNotFoundError()
    return user
