# src/commung/models/__init__.py
"""SQLAlchemy models for the Commung application."""

from .board import Board, BoardPost, BoardPostReply
from .bot import Bot, BotToken
from .community import Community, CommunityHashtag, CommunityLink
from .image import Image
from .membership import CommunityApplication, Membership
from .message import (
    DirectMessage,
    DirectMessageImage,
    DirectMessageReaction,
    GroupChat,
    GroupChatMembership,
    GroupChatMessage,
    GroupChatMessageImage,
    GroupChatMessageReaction,
    GroupChatMessageRead,
)
from .moderation import ModerationLog
from .notification import Notification
from .post import (
    Mention,
    Post,
    PostBookmark,
    PostHistory,
    PostHistoryImage,
    PostImage,
    PostReaction,
)
from .profile import Profile
from .user import User, UserBlock, UserSession

__all__ = [
    "Board", "BoardPost", "BoardPostReply",
    "Bot", "BotToken",
    "Community", "CommunityHashtag", "CommunityLink",
    "Image",
    "CommunityApplication", "Membership",
    "DirectMessage", "DirectMessageImage", "DirectMessageReaction",
    "GroupChat", "GroupChatMembership", "GroupChatMessage",
    "GroupChatMessageImage", "GroupChatMessageReaction", "GroupChatMessageRead",
    "ModerationLog",
    "Notification",
    "Mention", "Post", "PostBookmark", "PostHistory", "PostHistoryImage",
    "PostImage", "PostReaction",
    "Profile",
    "User", "UserBlock", "UserSession",
]
