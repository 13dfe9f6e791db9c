"""Profile endpoints for the app surface."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import CommunityDep, CurrentUserDep, MembershipDep, SessionDep
from commung.core.constants import DEFAULT_POSTS_LIMIT, DEFAULT_PROFILES_LIMIT, MAX_PAGE_LIMIT
from commung.schemas.common import DataResponse, OffsetPage
from commung.schemas.profile import ProfileCreate, ProfileResponse, ProfileUpdate
from commung.services import post_service, profile_service

router = APIRouter(prefix="/app/profiles", tags=["profiles"])


@router.get("", response_model=OffsetPage[ProfileResponse])
async def list_profiles(
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    limit: int = Query(DEFAULT_PROFILES_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    profiles, total = profile_service.list_profiles(db, community, limit, offset)
    return {"data": profiles, "limit": limit, "offset": offset, "total": total}


@router.get("/mine", response_model=DataResponse[list[ProfileResponse]])
async def list_my_profiles(
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    """Profiles the caller can switch between in this community."""
    return {"data": profile_service.list_user_profiles(db, user, community)}


@router.post(
    "",
    response_model=DataResponse[ProfileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_profile(
    data: ProfileCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    return {"data": profile_service.add_profile(db, user, community, data)}


@router.get("/{username}", response_model=DataResponse[ProfileResponse])
async def get_profile(
    username: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    return {"data": profile_service.get_profile_by_username(db, community, username)}


@router.get("/{username}/posts")
async def list_profile_posts(
    username: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None),
) -> dict[str, Any]:
    profile = profile_service.get_profile_by_username(db, community, username)
    posts, next_cursor, has_more = post_service.list_profile_posts(
        db, community, profile, limit, cursor
    )
    return {
        "data": post_service.serialize_posts(db, posts),
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }


@router.put("/{profile_id}", response_model=DataResponse[ProfileResponse])
async def update_profile(
    profile_id: str,
    data: ProfileUpdate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    profile = profile_service.get_acting_profile(db, user, community, profile_id)
    return {"data": profile_service.update_profile(db, profile, data)}


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(
    profile_id: str,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> None:
    profile = profile_service.get_acting_profile(db, user, community, profile_id)
    profile_service.delete_profile(db, profile)


@router.post("/{profile_id}/primary", response_model=DataResponse[ProfileResponse])
async def set_primary_profile(
    profile_id: str,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    profile = profile_service.get_acting_profile(db, user, community, profile_id)
    return {"data": profile_service.set_primary_profile(db, user, community, profile)}
