# portal/schemas/auth.py
from pydantic import BaseModel

from portal.schemas.user import UserOut


# Fields are optional here on purpose: missing/invalid values are reported by
# the credential service with field-level 400s instead of FastAPI's 422.
class RegisterIn(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginIn(BaseModel):
    email: str | None = None
    password: str | None = None


class RegisterOut(BaseModel):
    message: str
    user: UserOut


class SessionOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class MessageOut(BaseModel):
    message: str
