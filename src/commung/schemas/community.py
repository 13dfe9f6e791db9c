"""Community-related Pydantic schemas."""

from datetime import datetime

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator, model_validator

from commung.services.validation import (
    ensure_utc,
    validate_date_range,
    validate_slug,
    validate_username,
)

# Columns that cannot be cleared through a partial update
_REQUIRED_ON_UPDATE = ("name", "starts_at", "ends_at", "is_recruiting", "mute_new_members")


def _clean_hashtags(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lstrip("#").strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class CommunityCreate(BaseModel):
    """Schema for creating a new community together with its owner profile."""

    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=63)
    description: str | None = None
    starts_at: datetime
    ends_at: datetime
    is_recruiting: bool = False
    recruiting_starts_at: datetime | None = None
    recruiting_ends_at: datetime | None = None
    minimum_birth_year: int | None = Field(None, ge=1900, le=2100)
    custom_domain: str | None = None
    banner_image_id: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    mute_new_members: bool = False
    profile_name: str = Field(..., min_length=1, max_length=50)
    profile_username: str

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        return validate_slug(value)

    @field_validator("profile_username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)

    @field_validator("hashtags")
    @classmethod
    def _check_hashtags(cls, value: list[str]) -> list[str]:
        return _clean_hashtags(value)

    @field_validator(
        "starts_at", "ends_at", "recruiting_starts_at", "recruiting_ends_at"
    )
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_windows(self) -> "CommunityCreate":
        validate_date_range(self.starts_at, self.ends_at, label="커뮤 기간")
        validate_date_range(
            self.recruiting_starts_at, self.recruiting_ends_at, label="모집 기간"
        )
        return self


class CommunityUpdate(BaseModel):
    """Partial update; the merged schedule is re-validated by the service."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    is_recruiting: bool | None = None
    recruiting_starts_at: datetime | None = None
    recruiting_ends_at: datetime | None = None
    minimum_birth_year: int | None = Field(None, ge=1900, le=2100)
    custom_domain: str | None = None
    banner_image_id: str | None = None
    hashtags: list[str] | None = None
    mute_new_members: bool | None = None

    @field_validator("hashtags")
    @classmethod
    def _hashtags(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _clean_hashtags(value)

    @field_validator(
        "starts_at", "ends_at", "recruiting_starts_at", "recruiting_ends_at"
    )
    @classmethod
    def _to_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _reject_nulls(self) -> "CommunityUpdate":
        for key in _REQUIRED_ON_UPDATE:
            if key in self.model_fields_set and getattr(self, key) is None:
                raise ValueError(f"{key} 값은 비울 수 없습니다")
        return self

    @model_validator(mode="after")
    def _check_windows(self) -> "CommunityUpdate":
        validate_date_range(self.starts_at, self.ends_at, label="커뮤 기간")
        validate_date_range(
            self.recruiting_starts_at, self.recruiting_ends_at, label="모집 기간"
        )
        return self


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: str
    name: str
    slug: str
    description: str | None
    starts_at: datetime
    ends_at: datetime
    is_recruiting: bool
    recruiting_starts_at: datetime | None
    recruiting_ends_at: datetime | None
    minimum_birth_year: int | None
    mute_new_members: bool
    custom_domain: str | None
    banner_image_url: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    owner_id: str
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _flatten_relations(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        extracted: dict[str, object | None] = {
            field_name: getattr(data, field_name, None)
            for field_name in cls.model_fields
            if field_name not in {"hashtags", "banner_image_url"}
        }
        extracted["hashtags"] = [tag.tag for tag in getattr(data, "hashtags", [])]
        banner = getattr(data, "banner_image", None)
        extracted["banner_image_url"] = banner.url if banner is not None else None
        return extracted

    model_config = ConfigDict(from_attributes=True)


class MyCommunityResponse(CommunityResponse):
    """A community listed for the caller, with the caller's role."""

    role: str


class CommunityLinkCreate(BaseModel):
    """A titled external link; both fields are required on create and update."""

    title: str = Field(..., min_length=1, max_length=100)
    url: AnyHttpUrl

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("제목은 비울 수 없습니다")
        return value


class CommunityLinkResponse(BaseModel):
    id: str
    title: str
    url: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApplicationStats(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total: int = 0


class MemberStats(BaseModel):
    total: int = 0


class CommunityStatsResponse(BaseModel):
    """Staff dashboard counters for one community."""

    community: CommunityResponse
    applications: ApplicationStats
    members: MemberStats
