"""Direct message and group chat schemas."""

from pydantic import BaseModel, Field


class DirectMessageCreate(BaseModel):
    """Schema for sending a direct message."""

    receiver_id: str = Field(..., description="Profile ID of the receiver")
    content: str = Field("", max_length=5000)
    image_ids: list[str] = Field(default_factory=list, max_length=4)


class GroupChatCreate(BaseModel):
    """Schema for creating a group chat; the acting profile is added automatically."""

    name: str = Field(..., min_length=1, max_length=100)
    member_profile_ids: list[str] = Field(..., min_length=1, max_length=100)


class GroupChatMessageCreate(BaseModel):
    content: str = Field("", max_length=5000)
    image_ids: list[str] = Field(default_factory=list, max_length=4)
