# src/commung/schemas/post.py
"""Post-related Pydantic schemas."""

from pydantic import BaseModel, Field, field_validator

from commung.services.validation import validate_emoji


class PostCreate(BaseModel):
    """Schema for creating a timeline post or a reply."""

    content: str = Field("", max_length=5000)
    content_warning: str | None = Field(None, max_length=200)
    in_reply_to_id: str | None = Field(None, description="Parent post ID for replies")
    image_ids: list[str] = Field(default_factory=list, max_length=4)
    announcement: bool = False


class PostUpdate(BaseModel):
    content: str = Field(..., max_length=5000)
    content_warning: str | None = Field(None, max_length=200)


class ReactionCreate(BaseModel):
    """An emoji reaction on a post or message."""

    emoji: str

    @field_validator("emoji")
    @classmethod
    def _check_emoji(cls, value: str) -> str:
        return validate_emoji(value)
