"""Board schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from commung.services.validation import validate_slug


class BoardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=63)
    description: str | None = Field(None, max_length=1000)
    allow_comments: bool = True

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        return validate_slug(value)


class BoardUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, min_length=1, max_length=63)
    description: str | None = Field(None, max_length=1000)
    allow_comments: bool | None = None

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str | None) -> str | None:
        return None if value is None else validate_slug(value)


class BoardResponse(BaseModel):
    id: str
    community_id: str
    name: str
    slug: str
    description: str | None
    allow_comments: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BoardPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=20000)
    image_id: str | None = None


class BoardPostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1, max_length=20000)
    image_id: str | None = None


class BoardReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    in_reply_to_id: str | None = None
