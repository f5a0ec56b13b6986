# portal/routes/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from portal.auth.providers import IdentityProvider, SessionTokenProvider
from portal.core.database import get_db
from portal.dependencies.auth import get_identity_provider
from portal.schemas.auth import LoginIn, MessageOut, RegisterIn, RegisterOut, SessionOut
from portal.services import users as user_service
from portal.services.sessions import clear_session_cookie, issue_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    user = user_service.create_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return {"message": "User created successfully", "user": user}


@router.post("/login", response_model=SessionOut)
def login(
    payload: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
):
    # Hosted providers run their own sign-in; only the session provider issues tokens here.
    if not isinstance(provider, SessionTokenProvider):
        raise HTTPException(status_code=404, detail="Not found")

    user = user_service.authenticate_user(db, payload.email, payload.password)
    token = issue_session(response, user.id)
    logger.info("User signed in: id=%s", user.id)

    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user_service.sanitize(user),
    }


@router.post("/logout", response_model=MessageOut)
def logout(response: Response):
    clear_session_cookie(response)
    return {"message": "Logged out"}
