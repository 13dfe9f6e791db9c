"""Account and session schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from commung.core.constants import LOGIN_NAME_MAX_LENGTH, PASSWORD_MIN_LENGTH


class SignupRequest(BaseModel):
    """Schema for creating a console account."""

    login_name: str = Field(..., min_length=1, max_length=LOGIN_NAME_MAX_LENGTH)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    email: str | None = Field(None, max_length=320)


class LoginRequest(BaseModel):
    login_name: str = Field(..., min_length=1, max_length=LOGIN_NAME_MAX_LENGTH)
    password: str = Field(..., min_length=1)
    community_id: str | None = Field(
        None,
        description="Scope the session to one community (tenant login pages).",
    )


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)


class UserOut(BaseModel):
    """Account information returned by the API."""

    id: str
    login_name: str
    email: str | None
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    session_token: str = Field(..., description="Bearer token for the Authorization header")
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


class BlockedUserOut(BaseModel):
    """An account the caller has blocked."""

    id: str
    login_name: str
    blocked_at: datetime
