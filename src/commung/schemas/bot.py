"""Bot and bot token schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from commung.services.validation import ensure_utc, validate_username


class BotCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    profile_name: str = Field(..., min_length=1, max_length=50)
    profile_username: str

    @field_validator("profile_username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)


class BotUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)


class BotResponse(BaseModel):
    id: str
    community_id: str
    profile_id: str
    profile_name: str
    profile_username: str
    name: str
    description: str | None
    created_by_id: str
    created_at: datetime


class BotTokenCreate(BaseModel):
    name: str | None = Field(None, max_length=100)
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class BotTokenResponse(BaseModel):
    """Token metadata; the secret itself is never listed."""

    id: str
    name: str | None
    token_hint: str
    created_at: datetime
    expires_at: datetime | None
    revoked_at: datetime | None
    last_used_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class BotTokenIssued(BotTokenResponse):
    """Returned once, at creation time, with the plaintext token."""

    token: str
