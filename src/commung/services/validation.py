"""Input validation rules shared by schemas and services.

Each ``validate_*`` function returns the normalised value or raises
``ValueError`` with a user-facing message, so it can be used both from
pydantic validators and from service code.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from commung.core.constants import (
    ALLOWED_IMAGE_TYPES,
    EMOJI_MAX_LENGTH,
    SLUG_PATTERN,
    USERNAME_PATTERN,
)
from commung.core.settings import settings

_USERNAME_RE = re.compile(USERNAME_PATTERN)
_SLUG_RE = re.compile(SLUG_PATTERN)


def validate_username(username: str) -> str:
    """Accept 1-50 characters of ASCII letters, digits and underscores."""
    if not username:
        raise ValueError("사용자명을 입력해주세요")
    if not _USERNAME_RE.fullmatch(username):
        raise ValueError("사용자명은 1~50자의 영문, 숫자, 밑줄(_)만 사용할 수 있습니다")
    return username


def validate_slug(slug: str) -> str:
    """Accept lowercase words joined by single hyphens."""
    if not _SLUG_RE.fullmatch(slug):
        raise ValueError("커뮤 ID는 영문 소문자, 숫자, 하이픈(-)만 사용할 수 있습니다")
    return slug


def validate_date_range(
    starts_at: datetime | None,
    ends_at: datetime | None,
    *,
    label: str = "기간",
) -> None:
    """Reject windows whose end is not strictly after their start."""
    if starts_at is None or ends_at is None:
        return
    if ensure_utc(ends_at) <= ensure_utc(starts_at):  # type: ignore[operator]
        raise ValueError(f"{label}의 종료 시각은 시작 시각보다 뒤여야 합니다")


def validate_image_upload(content_type: str | None, size_bytes: int) -> str:
    """Check an upload's MIME type and size; return the normalised type."""
    normalized = (content_type or "").split(";", 1)[0].strip().lower()
    if normalized not in ALLOWED_IMAGE_TYPES:
        raise ValueError("JPEG, PNG, GIF, WebP 이미지만 업로드할 수 있습니다")
    if size_bytes <= 0:
        raise ValueError("빈 파일은 업로드할 수 없습니다")
    if size_bytes > settings.max_image_bytes:
        limit_mb = settings.max_image_bytes // (1024 * 1024)
        raise ValueError(f"이미지 크기는 {limit_mb}MB를 넘을 수 없습니다")
    return normalized


def validate_emoji(emoji: str) -> str:
    emoji = emoji.strip()
    if not emoji or len(emoji) > EMOJI_MAX_LENGTH:
        raise ValueError("이모지는 1~10자여야 합니다")
    return emoji


def ensure_utc(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
