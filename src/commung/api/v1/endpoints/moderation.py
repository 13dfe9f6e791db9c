"""Moderation-related endpoints for the Commung API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import (
    ActingProfileDep,
    CommunityDep,
    MembershipDep,
    SessionDep,
)
from commung.core.constants import DEFAULT_POSTS_LIMIT, MAX_PAGE_LIMIT, ROLE_MODERATOR, ROLE_OWNER
from commung.schemas.moderation import ModerationLogResponse, ModerationReason
from commung.schemas.profile import ProfileResponse
from commung.services import permissions, post_service
from commung.services.moderation import ModerationService

router = APIRouter(prefix="/app/moderation", tags=["moderation"])


@router.post("/profiles/{target_profile_id}/mute")
async def mute_profile(
    target_profile_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile: ActingProfileDep,
    data: ModerationReason | None = None,
) -> dict[str, Any]:
    """Mute a profile so it can no longer post."""
    target = ModerationService.mute_profile(
        db,
        community,
        profile,
        membership.role,
        target_profile_id,
        data.reason if data is not None else None,
    )
    return {"data": ProfileResponse.model_validate(target).model_dump()}


@router.post("/profiles/{target_profile_id}/unmute")
async def unmute_profile(
    target_profile_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    target = ModerationService.unmute_profile(
        db, community, profile, membership.role, target_profile_id
    )
    return {"data": ProfileResponse.model_validate(target).model_dump()}


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile: ActingProfileDep,
) -> None:
    post = post_service.get_post(db, community, post_id)
    ModerationService.delete_post(db, community, profile, membership.role, post)


@router.get("/logs")
async def list_moderation_logs(
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None),
) -> dict[str, Any]:
    permissions.require_role(membership.role, (ROLE_OWNER, ROLE_MODERATOR))
    logs, next_cursor, has_more = ModerationService.list_logs(db, community, limit, cursor)
    return {
        "data": [ModerationLogResponse.model_validate(entry).model_dump() for entry in logs],
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }
