"""Creating, listing and marking per-profile notifications."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from commung.core.exceptions import NotFound
from commung.db.time import utcnow
from commung.models import Notification, Profile
from commung.services import pagination
from commung.services.profile_service import profile_summary


def notify(
    db: Session,
    *,
    type_: str,
    recipient: Profile,
    actor: Profile,
    title: str,
    message: str,
    post_id: str | None = None,
    direct_message_id: str | None = None,
) -> Notification | None:
    """Queue a notification for ``recipient``; nothing is sent to oneself.

    The caller commits.
    """
    if recipient.id == actor.id:
        return None
    notification = Notification(
        type=type_,
        title=title,
        message=message,
        community_id=recipient.community_id,
        recipient_id=recipient.id,
        profile_id=actor.id,
        post_id=post_id,
        direct_message_id=direct_message_id,
    )
    db.add(notification)
    return notification


def serialize_notification(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "read_at": notification.read_at,
        "created_at": notification.created_at,
        "post_id": notification.post_id,
        "direct_message_id": notification.direct_message_id,
        "sender": profile_summary(notification.sender),
    }


def list_notifications(
    db: Session,
    profile: Profile,
    limit: int,
    cursor: str | None,
    unread_only: bool = False,
) -> tuple[list[Notification], str | None, bool]:
    query = db.query(Notification).filter(Notification.recipient_id == profile.id)
    if unread_only:
        query = query.filter(Notification.read_at.is_(None))
    query = pagination.apply_cursor(query, Notification, db, cursor)
    rows = pagination.newest_first(query, Notification).limit(limit + 1).all()
    return pagination.cursor_page(rows, limit)


def unread_count(db: Session, profile: Profile) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.recipient_id == profile.id, Notification.read_at.is_(None))
        .scalar()
        or 0
    )


def _require_own(db: Session, profile: Profile, notification_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == profile.id)
        .first()
    )
    if notification is None:
        raise NotFound("알림을 찾을 수 없습니다")
    return notification


def mark_read(db: Session, profile: Profile, notification_id: str) -> Notification:
    """Mark one notification read; repeating the call keeps the first read time."""
    notification = _require_own(db, profile, notification_id)
    if notification.read_at is None:
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def mark_unread(db: Session, profile: Profile, notification_id: str) -> Notification:
    notification = _require_own(db, profile, notification_id)
    if notification.read_at is not None:
        notification.read_at = None
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, profile: Profile) -> int:
    """Mark every unread notification of ``profile`` read; returns how many changed."""
    updated = (
        db.query(Notification)
        .filter(Notification.recipient_id == profile.id, Notification.read_at.is_(None))
        .update({Notification.read_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    return updated
