"""Direct messages and group chats between profiles of one community.

Read state is tracked per participant: a direct message has a single
``read_at`` on the row, while group chat messages get one
``GroupChatMessageRead`` row per reader. Every mark-read operation only
touches rows that are still unread, so clients may repeat it freely while
polling.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from commung.core.constants import NOTIFICATION_MESSAGE
from commung.core.exceptions import BadRequest, Forbidden, NotFound
from commung.db.time import utcnow
from commung.models import (
    Community,
    DirectMessage,
    DirectMessageImage,
    DirectMessageReaction,
    GroupChat,
    GroupChatMembership,
    GroupChatMessage,
    GroupChatMessageImage,
    GroupChatMessageReaction,
    GroupChatMessageRead,
    Profile,
    User,
)
from commung.schemas.message import DirectMessageCreate, GroupChatCreate, GroupChatMessageCreate
from commung.services import block_service, notification_service, pagination
from commung.services.image_service import require_images
from commung.services.profile_service import profile_summary

logger = logging.getLogger(__name__)


def _require_content(content: str, image_ids: list[str]) -> None:
    if not content.strip() and not image_ids:
        raise BadRequest("메시지 내용 또는 이미지를 제공해야 합니다")


def _group_reactions(rows: list[Any]) -> dict[str, dict[str, list[dict[str, Any]]]]:
    grouped: dict[str, dict[str, list[dict[str, Any]]]] = defaultdict(lambda: defaultdict(list))
    for reaction in rows:
        grouped[reaction.message_id][reaction.emoji].append(profile_summary(reaction.profile))
    return {message_id: dict(emojis) for message_id, emojis in grouped.items()}


# ---------------------------------------------------------------------------
# Direct messages
# ---------------------------------------------------------------------------


def _live_direct_messages(db: Session, community: Community):
    return db.query(DirectMessage).filter(
        DirectMessage.community_id == community.id,
        DirectMessage.deleted_at.is_(None),
    )


def _between(profile_id: str, other_id: str):
    return or_(
        and_(DirectMessage.sender_id == profile_id, DirectMessage.receiver_id == other_id),
        and_(DirectMessage.sender_id == other_id, DirectMessage.receiver_id == profile_id),
    )


def _find_live_profile(db: Session, community: Community, profile_id: str) -> Profile | None:
    return (
        db.query(Profile)
        .filter(
            Profile.id == profile_id,
            Profile.community_id == community.id,
            Profile.activated_at.is_not(None),
            Profile.deleted_at.is_(None),
        )
        .first()
    )


def direct_message_reactions(db: Session, message_ids: list[str]) -> dict[str, dict[str, list[dict[str, Any]]]]:
    if not message_ids:
        return {}
    rows = (
        db.query(DirectMessageReaction)
        .filter(DirectMessageReaction.message_id.in_(message_ids))
        .order_by(DirectMessageReaction.created_at)
        .all()
    )
    return _group_reactions(rows)


def serialize_direct_message(
    message: DirectMessage,
    viewer: Profile,
    reactions: dict[str, list[dict[str, Any]]] | None = None,
) -> dict[str, Any]:
    return {
        "id": message.id,
        "content": message.content,
        "created_at": message.created_at,
        "read_at": message.read_at,
        "is_sender": message.sender_id == viewer.id,
        "sender": profile_summary(message.sender),
        "receiver_id": message.receiver_id,
        "images": [{"id": image.id, "url": image.url} for image in message.images],
        "reactions": reactions or {},
    }


def send_direct_message(
    db: Session,
    user: User,
    community: Community,
    sender: Profile,
    data: DirectMessageCreate,
) -> DirectMessage:
    """Send a message from ``sender`` to another profile of the same community."""
    receiver = _find_live_profile(db, community, data.receiver_id)
    if receiver is None:
        raise NotFound("수신자 프로필을 찾을 수 없습니다")
    if receiver.id == sender.id:
        raise BadRequest("자신에게 메시지를 보낼 수 없습니다")
    if block_service.is_blocked(db, receiver.user_id, sender.user_id):
        raise Forbidden("이 프로필에게 메시지를 보낼 수 없습니다")
    _require_content(data.content, data.image_ids)
    images = require_images(db, data.image_ids)

    message = DirectMessage(
        community_id=community.id,
        sender_id=sender.id,
        receiver_id=receiver.id,
        created_by_user_id=user.id,
        content=data.content,
    )
    db.add(message)
    db.flush()
    for position, image in enumerate(images):
        db.add(DirectMessageImage(message_id=message.id, image_id=image.id, position=position))

    notification_service.notify(
        db,
        type_=NOTIFICATION_MESSAGE,
        recipient=receiver,
        actor=sender,
        title="새로운 메시지",
        message=f"{sender.name}님이 메시지를 보냈습니다",
        direct_message_id=message.id,
    )
    db.commit()
    db.refresh(message)
    return message


def get_direct_message(db: Session, community: Community, message_id: str) -> DirectMessage:
    message = _live_direct_messages(db, community).filter(DirectMessage.id == message_id).first()
    if message is None:
        raise NotFound("메시지를 찾을 수 없습니다")
    return message


def delete_direct_message(db: Session, community: Community, profile: Profile, message_id: str) -> None:
    message = get_direct_message(db, community, message_id)
    if message.sender_id != profile.id:
        raise Forbidden("본인이 보낸 메시지만 삭제할 수 있습니다")
    message.deleted_at = utcnow()
    db.commit()


def list_conversations(
    db: Session,
    community: Community,
    profile: Profile,
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """Return one row per conversation partner, most recent conversation first."""
    messages = (
        _live_direct_messages(db, community)
        .filter(or_(DirectMessage.sender_id == profile.id, DirectMessage.receiver_id == profile.id))
        .order_by(DirectMessage.created_at.desc(), DirectMessage.id.desc())
        .all()
    )
    last_by_peer: dict[str, DirectMessage] = {}
    for message in messages:
        peer_id = message.receiver_id if message.sender_id == profile.id else message.sender_id
        last_by_peer.setdefault(peer_id, message)

    peer_ids = list(last_by_peer)
    total = len(peer_ids)
    page_ids = peer_ids[offset:offset + limit]
    if not page_ids:
        return [], total

    peers = {peer.id: peer for peer in db.query(Profile).filter(Profile.id.in_(page_ids)).all()}
    unread_rows = (
        db.query(DirectMessage.sender_id, func.count(DirectMessage.id))
        .filter(
            DirectMessage.community_id == community.id,
            DirectMessage.receiver_id == profile.id,
            DirectMessage.sender_id.in_(page_ids),
            DirectMessage.read_at.is_(None),
            DirectMessage.deleted_at.is_(None),
        )
        .group_by(DirectMessage.sender_id)
        .all()
    )
    unread = {sender_id: count for sender_id, count in unread_rows}

    conversations = []
    for peer_id in page_ids:
        peer = peers.get(peer_id)
        if peer is None:
            continue
        last = last_by_peer[peer_id]
        conversations.append(
            {
                "other_profile": profile_summary(peer),
                "last_message": {
                    "id": last.id,
                    "content": last.content,
                    "created_at": last.created_at,
                    "is_sender": last.sender_id == profile.id,
                },
                "unread_count": unread.get(peer_id, 0),
            }
        )
    return conversations, total


def get_conversation_thread(
    db: Session,
    community: Community,
    profile: Profile,
    other_profile_id: str,
    limit: int,
    offset: int,
) -> tuple[list[DirectMessage], int]:
    """Return messages exchanged with ``other_profile_id``, newest first."""
    if _find_live_profile(db, community, other_profile_id) is None:
        raise NotFound("프로필을 찾을 수 없습니다")
    query = _live_direct_messages(db, community).filter(_between(profile.id, other_profile_id))
    total = query.count()
    rows = (
        pagination.newest_first(query, DirectMessage)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, total


def mark_conversation_read(
    db: Session,
    community: Community,
    profile: Profile,
    other_profile_id: str,
) -> int:
    updated = (
        _live_direct_messages(db, community)
        .filter(
            DirectMessage.sender_id == other_profile_id,
            DirectMessage.receiver_id == profile.id,
            DirectMessage.read_at.is_(None),
        )
        .update({DirectMessage.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def mark_all_direct_messages_read(db: Session, community: Community, profile: Profile) -> int:
    updated = (
        _live_direct_messages(db, community)
        .filter(DirectMessage.receiver_id == profile.id, DirectMessage.read_at.is_(None))
        .update({DirectMessage.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated


def direct_message_unread_count(db: Session, community: Community, profile: Profile) -> int:
    return (
        _live_direct_messages(db, community)
        .filter(DirectMessage.receiver_id == profile.id, DirectMessage.read_at.is_(None))
        .count()
    )


def _require_participant(message: DirectMessage, profile: Profile) -> None:
    if profile.id not in (message.sender_id, message.receiver_id):
        raise Forbidden("이 대화에 참여하지 않은 프로필입니다")


def add_direct_message_reaction(
    db: Session,
    community: Community,
    profile: Profile,
    message_id: str,
    emoji: str,
) -> DirectMessageReaction:
    message = get_direct_message(db, community, message_id)
    _require_participant(message, profile)
    existing = (
        db.query(DirectMessageReaction)
        .filter(
            DirectMessageReaction.message_id == message.id,
            DirectMessageReaction.profile_id == profile.id,
            DirectMessageReaction.emoji == emoji,
        )
        .first()
    )
    if existing is not None:
        raise BadRequest("반응이 이미 존재합니다")
    reaction = DirectMessageReaction(message_id=message.id, profile_id=profile.id, emoji=emoji)
    db.add(reaction)
    db.commit()
    db.refresh(reaction)
    return reaction


def remove_direct_message_reaction(
    db: Session,
    community: Community,
    profile: Profile,
    message_id: str,
    emoji: str,
) -> None:
    message = get_direct_message(db, community, message_id)
    _require_participant(message, profile)
    reaction = (
        db.query(DirectMessageReaction)
        .filter(
            DirectMessageReaction.message_id == message.id,
            DirectMessageReaction.profile_id == profile.id,
            DirectMessageReaction.emoji == emoji,
        )
        .first()
    )
    if reaction is None:
        raise NotFound("반응을 찾을 수 없습니다")
    db.delete(reaction)
    db.commit()


# ---------------------------------------------------------------------------
# Group chats
# ---------------------------------------------------------------------------


def _unread_group_messages(db: Session, profile: Profile):
    """Messages from others that ``profile`` has no read receipt for."""
    read_ids = select(GroupChatMessageRead.message_id).where(
        GroupChatMessageRead.profile_id == profile.id
    )
    return db.query(GroupChatMessage).filter(
        GroupChatMessage.deleted_at.is_(None),
        GroupChatMessage.sender_id != profile.id,
        GroupChatMessage.id.not_in(read_ids),
    )


def serialize_group_chat(
    chat: GroupChat,
    unread_count: int = 0,
    include_members: bool = False,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": chat.id,
        "name": chat.name,
        "created_by_id": chat.created_by_id,
        "created_at": chat.created_at,
        "updated_at": chat.updated_at,
        "member_count": len(chat.memberships),
        "unread_count": unread_count,
    }
    if include_members:
        payload["members"] = [profile_summary(member.profile) for member in chat.memberships]
    return payload


def create_group_chat(
    db: Session,
    community: Community,
    creator: Profile,
    data: GroupChatCreate,
) -> GroupChat:
    """Create a chat containing ``creator`` plus each listed profile exactly once.

    Raises:
        BadRequest: If any listed profile is not a live profile of this community.
    """
    member_ids = [
        profile_id
        for profile_id in dict.fromkeys(data.member_profile_ids)
        if profile_id != creator.id
    ]
    if member_ids:
        found = (
            db.query(Profile.id)
            .filter(
                Profile.id.in_(member_ids),
                Profile.community_id == community.id,
                Profile.activated_at.is_not(None),
                Profile.deleted_at.is_(None),
            )
            .count()
        )
        if found != len(member_ids):
            raise BadRequest("한 명 이상의 멤버 프로필을 찾을 수 없습니다")

    chat = GroupChat(community_id=community.id, name=data.name, created_by_id=creator.id)
    for profile_id in [creator.id, *member_ids]:
        chat.memberships.append(GroupChatMembership(profile_id=profile_id, added_by_id=creator.id))
    db.add(chat)
    db.commit()
    db.refresh(chat)
    logger.info("Created group chat %s with %d members", chat.id, len(chat.memberships))
    return chat


def list_group_chats(db: Session, community: Community, profile: Profile) -> list[dict[str, Any]]:
    chats = (
        db.query(GroupChat)
        .join(GroupChatMembership, GroupChatMembership.group_chat_id == GroupChat.id)
        .filter(
            GroupChat.community_id == community.id,
            GroupChat.deleted_at.is_(None),
            GroupChatMembership.profile_id == profile.id,
        )
        .order_by(GroupChat.updated_at.desc(), GroupChat.id)
        .all()
    )
    chat_ids = [chat.id for chat in chats]
    unread: dict[str, int] = {}
    if chat_ids:
        rows = (
            _unread_group_messages(db, profile)
            .filter(GroupChatMessage.group_chat_id.in_(chat_ids))
            .with_entities(GroupChatMessage.group_chat_id, func.count(GroupChatMessage.id))
            .group_by(GroupChatMessage.group_chat_id)
            .all()
        )
        unread = {chat_id: count for chat_id, count in rows}
    return [serialize_group_chat(chat, unread.get(chat.id, 0)) for chat in chats]


def get_group_chat(db: Session, community: Community, chat_id: str, profile: Profile) -> GroupChat:
    """Return a chat the acting profile belongs to.

    Raises:
        NotFound: If the chat does not exist in this community.
        Forbidden: If ``profile`` is not a member.
    """
    chat = (
        db.query(GroupChat)
        .filter(
            GroupChat.id == chat_id,
            GroupChat.community_id == community.id,
            GroupChat.deleted_at.is_(None),
        )
        .first()
    )
    if chat is None:
        raise NotFound("그룹 채팅을 찾을 수 없습니다")
    if not any(member.profile_id == profile.id for member in chat.memberships):
        raise Forbidden("이 그룹 채팅에 대한 접근이 거부되었습니다")
    return chat


def group_chat_unread_count(db: Session, chat: GroupChat, profile: Profile) -> int:
    return (
        _unread_group_messages(db, profile)
        .filter(GroupChatMessage.group_chat_id == chat.id)
        .count()
    )


def group_message_reactions(db: Session, message_ids: list[str]) -> dict[str, dict[str, list[dict[str, Any]]]]:
    if not message_ids:
        return {}
    rows = (
        db.query(GroupChatMessageReaction)
        .filter(GroupChatMessageReaction.message_id.in_(message_ids))
        .order_by(GroupChatMessageReaction.created_at)
        .all()
    )
    return _group_reactions(rows)


def serialize_group_message(
    message: GroupChatMessage,
    viewer: Profile,
    reactions: dict[str, list[dict[str, Any]]] | None = None,
) -> dict[str, Any]:
    return {
        "id": message.id,
        "group_chat_id": message.group_chat_id,
        "content": message.content,
        "created_at": message.created_at,
        "is_sender": message.sender_id == viewer.id,
        "sender": profile_summary(message.sender),
        "images": [{"id": image.id, "url": image.url} for image in message.images],
        "reactions": reactions or {},
    }


def send_group_message(
    db: Session,
    user: User,
    chat: GroupChat,
    sender: Profile,
    data: GroupChatMessageCreate,
) -> GroupChatMessage:
    _require_content(data.content, data.image_ids)
    images = require_images(db, data.image_ids)
    message = GroupChatMessage(
        group_chat_id=chat.id,
        sender_id=sender.id,
        created_by_user_id=user.id,
        content=data.content,
    )
    db.add(message)
    db.flush()
    for position, image in enumerate(images):
        db.add(GroupChatMessageImage(message_id=message.id, image_id=image.id, position=position))
    chat.updated_at = utcnow()
    db.commit()
    db.refresh(message)
    return message


def list_group_messages(
    db: Session,
    chat: GroupChat,
    limit: int,
    cursor: str | None,
) -> tuple[list[GroupChatMessage], str | None, bool]:
    """Return one page of chat messages, newest first."""
    query = db.query(GroupChatMessage).filter(
        GroupChatMessage.group_chat_id == chat.id,
        GroupChatMessage.deleted_at.is_(None),
    )
    query = pagination.apply_cursor(query, GroupChatMessage, db, cursor)
    rows = pagination.newest_first(query, GroupChatMessage).limit(limit + 1).all()
    return pagination.cursor_page(rows, limit)


def _get_group_message(db: Session, chat: GroupChat, message_id: str) -> GroupChatMessage:
    message = (
        db.query(GroupChatMessage)
        .filter(
            GroupChatMessage.id == message_id,
            GroupChatMessage.group_chat_id == chat.id,
            GroupChatMessage.deleted_at.is_(None),
        )
        .first()
    )
    if message is None:
        raise NotFound("메시지를 찾을 수 없습니다")
    return message


def add_group_message_reaction(
    db: Session,
    chat: GroupChat,
    profile: Profile,
    message_id: str,
    emoji: str,
) -> GroupChatMessageReaction:
    message = _get_group_message(db, chat, message_id)
    existing = (
        db.query(GroupChatMessageReaction)
        .filter(
            GroupChatMessageReaction.message_id == message.id,
            GroupChatMessageReaction.profile_id == profile.id,
            GroupChatMessageReaction.emoji == emoji,
        )
        .first()
    )
    if existing is not None:
        raise BadRequest("반응이 이미 존재합니다")
    reaction = GroupChatMessageReaction(message_id=message.id, profile_id=profile.id, emoji=emoji)
    db.add(reaction)
    db.commit()
    db.refresh(reaction)
    return reaction


def remove_group_message_reaction(
    db: Session,
    chat: GroupChat,
    profile: Profile,
    message_id: str,
    emoji: str,
) -> None:
    message = _get_group_message(db, chat, message_id)
    reaction = (
        db.query(GroupChatMessageReaction)
        .filter(
            GroupChatMessageReaction.message_id == message.id,
            GroupChatMessageReaction.profile_id == profile.id,
            GroupChatMessageReaction.emoji == emoji,
        )
        .first()
    )
    if reaction is None:
        raise NotFound("반응을 찾을 수 없습니다")
    db.delete(reaction)
    db.commit()


def mark_group_chat_read(db: Session, chat: GroupChat, profile: Profile) -> int:
    """Insert read receipts for every message ``profile`` has not read yet."""
    unread_ids = [
        message_id
        for (message_id,) in _unread_group_messages(db, profile)
        .filter(GroupChatMessage.group_chat_id == chat.id)
        .with_entities(GroupChatMessage.id)
        .all()
    ]
    now = utcnow()
    for message_id in unread_ids:
        db.add(GroupChatMessageRead(message_id=message_id, profile_id=profile.id, read_at=now))
    db.commit()
    return len(unread_ids)
