"""Domain constants shared by models, schemas and services."""

from __future__ import annotations

from typing import Final

# Membership roles, highest privilege first.
ROLE_OWNER: Final[str] = "owner"
ROLE_MODERATOR: Final[str] = "moderator"
ROLE_MEMBER: Final[str] = "member"
ROLES: Final[tuple[str, ...]] = (ROLE_OWNER, ROLE_MODERATOR, ROLE_MEMBER)

# Application lifecycle: pending -> approved | rejected, never back.
APPLICATION_PENDING: Final[str] = "pending"
APPLICATION_APPROVED: Final[str] = "approved"
APPLICATION_REJECTED: Final[str] = "rejected"
APPLICATION_STATUSES: Final[tuple[str, ...]] = (
    APPLICATION_PENDING,
    APPLICATION_APPROVED,
    APPLICATION_REJECTED,
)

NOTIFICATION_REPLY: Final[str] = "reply"
NOTIFICATION_MENTION: Final[str] = "mention"
NOTIFICATION_REACTION: Final[str] = "reaction"
NOTIFICATION_MESSAGE: Final[str] = "message"

MODERATION_DELETE_POST: Final[str] = "delete_post"
MODERATION_MUTE_PROFILE: Final[str] = "mute_profile"
MODERATION_UNMUTE_PROFILE: Final[str] = "unmute_profile"

ALLOWED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)
IMAGE_EXTENSIONS: Final[dict[str, str]] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# Pagination defaults per listing.
DEFAULT_POSTS_LIMIT: Final[int] = 20
DEFAULT_CONVERSATIONS_LIMIT: Final[int] = 20
DEFAULT_PROFILES_LIMIT: Final[int] = 20
DEFAULT_MESSAGES_LIMIT: Final[int] = 100
MAX_PAGE_LIMIT: Final[int] = 100

USERNAME_PATTERN: Final[str] = r"^[a-zA-Z0-9_]{1,50}$"
SLUG_PATTERN: Final[str] = r"^[a-z0-9]+(-[a-z0-9]+)*$"
MENTION_PATTERN: Final[str] = r"@([a-zA-Z0-9_]+)"

USERNAME_MAX_LENGTH: Final[int] = 50
LOGIN_NAME_MAX_LENGTH: Final[int] = 100
PASSWORD_MIN_LENGTH: Final[int] = 8
EMOJI_MAX_LENGTH: Final[int] = 10
