# src/commung/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .account import router as account_router
from .applications import router as applications_router
from .blocks import router as blocks_router
from .boards import router as boards_router
from .bookmarks import router as bookmarks_router
from .bot_api import router as bot_api_router
from .bots import router as bots_router
from .communities import router as communities_router
from .console_boards import router as console_boards_router
from .group_chats import router as group_chats_router
from .instance import router as instance_router
from .links import router as links_router
from .members import router as members_router
from .messages import router as messages_router
from .moderation import router as moderation_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .profiles import router as profiles_router
from .uploads import router as uploads_router

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
