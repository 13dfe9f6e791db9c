"""Console community endpoints."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse
from commung.schemas.community import (
    CommunityCreate,
    CommunityResponse,
    CommunityStatsResponse,
    CommunityUpdate,
    MyCommunityResponse,
)
from commung.services import community_service, membership_service

router = APIRouter(prefix="/console/communities", tags=["communities"])


@router.post(
    "",
    response_model=DataResponse[CommunityResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_community(
    data: CommunityCreate,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    """Create a community owned by the caller, with the owner's first profile."""
    community = community_service.create_community(db, user, data)
    return {"data": community}


@router.get("/mine", response_model=DataResponse[list[MyCommunityResponse]])
async def list_my_communities(db: SessionDep, user: CurrentUserDep) -> dict[str, Any]:
    rows = community_service.list_user_communities(db, user)
    return {
        "data": [
            {**CommunityResponse.model_validate(community).model_dump(), "role": role}
            for community, role in rows
        ]
    }


@router.get("/recruiting", response_model=DataResponse[list[CommunityResponse]])
async def list_recruiting_communities(db: SessionDep) -> dict[str, Any]:
    return {"data": community_service.list_recruiting_communities(db)}


@router.get("/{slug}", response_model=DataResponse[CommunityResponse])
async def get_community(community: ConsoleCommunityDep) -> dict[str, Any]:
    return {"data": community}


@router.put("/{slug}", response_model=DataResponse[CommunityResponse])
async def update_community(
    data: CommunityUpdate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    community = community_service.update_community(db, community, data)
    return {"data": community}


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_community(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.require_owner(db, user, community)
    community_service.delete_community(db, community)


@router.post("/{slug}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_community(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.leave_community(db, user, community)


@router.get("/{slug}/stats", response_model=DataResponse[CommunityStatsResponse])
async def get_community_stats(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    """Application and member counts for owners and moderators."""
    membership_service.require_staff(db, user, community)
    return {"data": community_service.community_stats(db, community)}
