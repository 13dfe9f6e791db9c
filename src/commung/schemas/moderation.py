"""Moderation schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ModerationReason(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class ModerationLogResponse(BaseModel):
    id: str
    action: str
    description: str
    moderator_id: str
    target_user_id: str | None
    target_profile_id: str | None
    target_post_id: str | None
    extra_data: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
