# tests/test_validation.py
"""Tests for the shared input validation rules."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from commung.schemas.community import CommunityCreate, CommunityUpdate
from commung.schemas.profile import ProfileCreate
from commung.services.validation import (
    ensure_utc,
    validate_date_range,
    validate_emoji,
    validate_image_upload,
    validate_slug,
    validate_username,
)


@pytest.mark.parametrize("username", ["a", "user_1", "ABC_def_123", "x" * 50])
def test_valid_usernames(username: str) -> None:
    assert validate_username(username) == username


@pytest.mark.parametrize("username", ["", "x" * 51, "has space", "한글", "dash-ed", "dot.ted"])
def test_invalid_usernames(username: str) -> None:
    with pytest.raises(ValueError):
        validate_username(username)


def test_profile_schema_rejects_bad_username() -> None:
    with pytest.raises(ValidationError):
        ProfileCreate(name="이름", username="no way")


def test_slug_rules() -> None:
    assert validate_slug("my-commu-2") == "my-commu-2"
    for bad in ("Upper", "double--dash", "-lead", "trail-", "under_score"):
        with pytest.raises(ValueError):
            validate_slug(bad)


class TestDateRange:
    def test_end_after_start_is_accepted(self) -> None:
        start = datetime(2026, 1, 1, tzinfo=UTC)
        validate_date_range(start, start + timedelta(seconds=1))

    def test_equal_bounds_are_rejected(self) -> None:
        moment = datetime(2026, 1, 1, tzinfo=UTC)
        with pytest.raises(ValueError):
            validate_date_range(moment, moment)

    def test_end_before_start_is_rejected(self) -> None:
        start = datetime(2026, 1, 2, tzinfo=UTC)
        with pytest.raises(ValueError, match="모집 기간"):
            validate_date_range(start, start - timedelta(days=1), label="모집 기간")

    def test_open_ended_windows_are_accepted(self) -> None:
        validate_date_range(None, datetime(2026, 1, 1, tzinfo=UTC))
        validate_date_range(datetime(2026, 1, 1, tzinfo=UTC), None)

    def test_naive_values_are_treated_as_utc(self) -> None:
        naive = datetime(2026, 1, 1, 9, 0)
        assert ensure_utc(naive) == datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def test_community_schedule_is_checked_in_schema(self) -> None:
        with pytest.raises(ValidationError):
            CommunityCreate(
                name="커뮤",
                slug="commu",
                starts_at=datetime(2026, 2, 1, tzinfo=UTC),
                ends_at=datetime(2026, 1, 1, tzinfo=UTC),
                profile_name="주인",
                profile_username="owner",
            )

    def test_recruiting_window_is_checked_in_update(self) -> None:
        with pytest.raises(ValidationError):
            CommunityUpdate(
                recruiting_starts_at=datetime(2026, 1, 5, tzinfo=UTC),
                recruiting_ends_at=datetime(2026, 1, 5, tzinfo=UTC),
            )


class TestImageUpload:
    @pytest.mark.parametrize(
        "content_type",
        ["image/jpeg", "image/png", "image/gif", "image/webp", "IMAGE/PNG; charset=binary"],
    )
    def test_allowed_types(self, content_type: str) -> None:
        assert validate_image_upload(content_type, 1024).startswith("image/")

    @pytest.mark.parametrize("content_type", ["image/svg+xml", "application/pdf", "text/plain", None])
    def test_rejected_types(self, content_type: str | None) -> None:
        with pytest.raises(ValueError):
            validate_image_upload(content_type, 1024)

    def test_size_limit_is_ten_megabytes(self) -> None:
        limit = 10 * 1024 * 1024
        assert validate_image_upload("image/png", limit) == "image/png"
        with pytest.raises(ValueError, match="10MB"):
            validate_image_upload("image/png", limit + 1)

    def test_empty_file_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            validate_image_upload("image/png", 0)


def test_emoji_length() -> None:
    assert validate_emoji(" 👍 ") == "👍"
    with pytest.raises(ValueError):
        validate_emoji("")
    with pytest.raises(ValueError):
        validate_emoji("x" * 11)
