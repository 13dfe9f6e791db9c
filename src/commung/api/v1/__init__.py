# src/commung/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    account_router,
    applications_router,
    blocks_router,
    boards_router,
    bookmarks_router,
    bot_api_router,
    bots_router,
    communities_router,
    console_boards_router,
    group_chats_router,
    instance_router,
    links_router,
    members_router,
    messages_router,
    moderation_router,
    notifications_router,
    posts_router,
    profiles_router,
    uploads_router,
)

__all__ = [
    "account_router",
    "communities_router",
    "links_router",
    "members_router",
    "applications_router",
    "console_boards_router",
    "bots_router",
    "uploads_router",
    "blocks_router",
    "instance_router",
    "profiles_router",
    "posts_router",
    "bookmarks_router",
    "boards_router",
    "messages_router",
    "group_chats_router",
    "notifications_router",
    "moderation_router",
    "bot_api_router",
]
