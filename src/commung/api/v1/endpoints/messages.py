"""Direct message endpoints for the app surface."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import (
    ActingProfileDep,
    CommunityDep,
    CurrentUserDep,
    SessionDep,
)
from commung.core.constants import (
    DEFAULT_CONVERSATIONS_LIMIT,
    DEFAULT_MESSAGES_LIMIT,
    MAX_PAGE_LIMIT,
)
from commung.schemas.message import DirectMessageCreate
from commung.schemas.post import ReactionCreate
from commung.services import message_service

router = APIRouter(prefix="/app/messages", tags=["messages"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    data: DirectMessageCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    message = message_service.send_direct_message(db, user, community, profile, data)
    return {"data": message_service.serialize_direct_message(message, profile)}


@router.get("/conversations")
async def list_conversations(
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    limit: int = Query(DEFAULT_CONVERSATIONS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    """List conversation partners with the last message and unread count."""
    conversations, total = message_service.list_conversations(
        db, community, profile, limit, offset
    )
    return {"data": conversations, "limit": limit, "offset": offset, "total": total}


@router.get("/unread-count")
async def get_unread_count(
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    count = message_service.direct_message_unread_count(db, community, profile)
    return {"data": {"count": count}}


@router.post("/read-all")
async def mark_all_read(
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    updated = message_service.mark_all_direct_messages_read(db, community, profile)
    return {"data": {"updated": updated}}


@router.get("/conversations/{other_profile_id}")
async def get_conversation(
    other_profile_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    limit: int = Query(DEFAULT_MESSAGES_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    messages, total = message_service.get_conversation_thread(
        db, community, profile, other_profile_id, limit, offset
    )
    reactions = message_service.direct_message_reactions(db, [message.id for message in messages])
    return {
        "data": [
            message_service.serialize_direct_message(message, profile, reactions.get(message.id))
            for message in messages
        ],
        "limit": limit,
        "offset": offset,
        "total": total,
    }


@router.post("/conversations/{other_profile_id}/read")
async def mark_conversation_read(
    other_profile_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    updated = message_service.mark_conversation_read(db, community, profile, other_profile_id)
    return {"data": {"updated": updated}}


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> None:
    message_service.delete_direct_message(db, community, profile, message_id)


@router.post("/{message_id}/reactions", status_code=status.HTTP_201_CREATED)
async def add_reaction(
    message_id: str,
    data: ReactionCreate,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    reaction = message_service.add_direct_message_reaction(
        db, community, profile, message_id, data.emoji
    )
    return {"data": {"id": reaction.id, "emoji": reaction.emoji, "message_id": message_id}}


@router.delete("/{message_id}/reactions", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reaction(
    message_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    emoji: str = Query(..., min_length=1),
) -> None:
    message_service.remove_direct_message_reaction(db, community, profile, message_id, emoji)
