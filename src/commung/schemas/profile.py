"""Profile schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from commung.services.validation import validate_username


class ProfileCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    username: str
    bio: str | None = Field(None, max_length=500)
    picture_image_id: str | None = None

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    username: str | None = None
    bio: str | None = Field(None, max_length=500)
    picture_image_id: str | None = None

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str | None) -> str | None:
        return None if value is None else validate_username(value)


class ProfileResponse(BaseModel):
    """Schema for profile information returned by the API."""

    id: str
    community_id: str
    name: str
    username: str
    bio: str | None
    picture_url: str | None
    is_primary: bool
    is_bot: bool
    is_muted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
