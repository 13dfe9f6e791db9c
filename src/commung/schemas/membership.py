"""Membership, role and application schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from commung.services.validation import validate_username

RoleName = Literal["owner", "moderator", "member"]


class RoleUpdate(BaseModel):
    role: RoleName


class MemberResponse(BaseModel):
    """A community member as listed for staff."""

    id: str
    user_id: str
    login_name: str
    role: str
    created_at: datetime
    profiles: list[dict[str, object]] = Field(default_factory=list)
    assignable_roles: list[str] = Field(
        default_factory=list,
        description="Roles the caller may assign to this member; empty means read-only.",
    )


class ApplicationCreate(BaseModel):
    """Schema for applying to join a community."""

    profile_name: str = Field(..., min_length=1, max_length=50)
    profile_username: str
    message: str | None = Field(None, max_length=2000)

    @field_validator("profile_username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)


class ApplicationUpdate(BaseModel):
    """Edits an applicant may make while the application is still pending."""

    profile_name: str | None = Field(None, min_length=1, max_length=50)
    profile_username: str | None = None
    message: str | None = Field(None, max_length=2000)

    @field_validator("profile_username")
    @classmethod
    def _check_username(cls, value: str | None) -> str | None:
        return None if value is None else validate_username(value)


class ApplicationReject(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class ApplicationResponse(BaseModel):
    id: str
    community_id: str
    user_id: str
    status: str
    message: str | None
    profile_name: str
    profile_username: str
    rejection_reason: str | None
    reviewed_by_id: str | None
    reviewed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
