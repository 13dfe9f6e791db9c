"""Notification endpoints, scoped to the acting profile."""

from typing import Any

from fastapi import APIRouter, Query

from commung.api.v1.dependencies import ActingProfileDep, SessionDep
from commung.core.constants import DEFAULT_POSTS_LIMIT, MAX_PAGE_LIMIT
from commung.services import notification_service

router = APIRouter(prefix="/app/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    db: SessionDep,
    profile: ActingProfileDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None),
    unread_only: bool = Query(False),
) -> dict[str, Any]:
    notifications, next_cursor, has_more = notification_service.list_notifications(
        db, profile, limit, cursor, unread_only
    )
    return {
        "data": [notification_service.serialize_notification(item) for item in notifications],
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }


@router.get("/unread-count")
async def get_unread_count(db: SessionDep, profile: ActingProfileDep) -> dict[str, Any]:
    return {"data": {"count": notification_service.unread_count(db, profile)}}


@router.post("/read-all")
async def mark_all_read(db: SessionDep, profile: ActingProfileDep) -> dict[str, Any]:
    return {"data": {"updated": notification_service.mark_all_read(db, profile)}}


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    db: SessionDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    notification = notification_service.mark_read(db, profile, notification_id)
    return {"data": notification_service.serialize_notification(notification)}


@router.post("/{notification_id}/unread")
async def mark_unread(
    notification_id: str,
    db: SessionDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    notification = notification_service.mark_unread(db, profile, notification_id)
    return {"data": notification_service.serialize_notification(notification)}
