"""Group chat endpoints for the app surface."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import (
    ActingProfileDep,
    CommunityDep,
    CurrentUserDep,
    SessionDep,
)
from commung.core.constants import DEFAULT_MESSAGES_LIMIT, MAX_PAGE_LIMIT
from commung.schemas.message import GroupChatCreate, GroupChatMessageCreate
from commung.schemas.post import ReactionCreate
from commung.services import message_service

router = APIRouter(prefix="/app/group-chats", tags=["group-chats"])


@router.get("")
async def list_group_chats(
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    return {"data": message_service.list_group_chats(db, community, profile)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_group_chat(
    data: GroupChatCreate,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    """Create a chat with the acting profile and the listed members."""
    chat = message_service.create_group_chat(db, community, profile, data)
    return {"data": message_service.serialize_group_chat(chat)}


@router.get("/{chat_id}")
async def get_group_chat(
    chat_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    unread = message_service.group_chat_unread_count(db, chat, profile)
    return {"data": message_service.serialize_group_chat(chat, unread, include_members=True)}


@router.get("/{chat_id}/messages")
async def list_group_messages(
    chat_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    limit: int = Query(DEFAULT_MESSAGES_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None),
) -> dict[str, Any]:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    messages, next_cursor, has_more = message_service.list_group_messages(db, chat, limit, cursor)
    reactions = message_service.group_message_reactions(db, [message.id for message in messages])
    return {
        "data": [
            message_service.serialize_group_message(message, profile, reactions.get(message.id))
            for message in messages
        ],
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }


@router.post("/{chat_id}/messages", status_code=status.HTTP_201_CREATED)
async def send_group_message(
    chat_id: str,
    data: GroupChatMessageCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    message = message_service.send_group_message(db, user, chat, profile, data)
    return {"data": message_service.serialize_group_message(message, profile)}


@router.post("/{chat_id}/read")
async def mark_group_chat_read(
    chat_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    return {"data": {"updated": message_service.mark_group_chat_read(db, chat, profile)}}


@router.post("/{chat_id}/messages/{message_id}/reactions", status_code=status.HTTP_201_CREATED)
async def add_group_message_reaction(
    chat_id: str,
    message_id: str,
    data: ReactionCreate,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    reaction = message_service.add_group_message_reaction(db, chat, profile, message_id, data.emoji)
    return {"data": {"id": reaction.id, "emoji": reaction.emoji, "message_id": message_id}}


@router.delete(
    "/{chat_id}/messages/{message_id}/reactions",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_group_message_reaction(
    chat_id: str,
    message_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    emoji: str = Query(..., min_length=1),
) -> None:
    chat = message_service.get_group_chat(db, community, chat_id, profile)
    message_service.remove_group_message_reaction(db, chat, profile, message_id, emoji)
