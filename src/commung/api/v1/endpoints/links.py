"""Console endpoints for a community's external links."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse
from commung.schemas.community import CommunityLinkCreate, CommunityLinkResponse
from commung.services import community_service, membership_service

router = APIRouter(prefix="/console/communities/{slug}/links", tags=["communities"])


@router.get("", response_model=DataResponse[list[CommunityLinkResponse]])
async def list_links(community: ConsoleCommunityDep, db: SessionDep) -> dict[str, Any]:
    """List the community's links, newest first; no login required."""
    return {"data": community_service.list_links(db, community)}


@router.post(
    "",
    response_model=DataResponse[CommunityLinkResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_link(
    data: CommunityLinkCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    return {"data": community_service.create_link(db, community, data)}


@router.put("/{link_id}", response_model=DataResponse[CommunityLinkResponse])
async def update_link(
    link_id: str,
    data: CommunityLinkCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    return {"data": community_service.update_link(db, community, link_id, data)}


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.require_owner(db, user, community)
    community_service.delete_link(db, community, link_id)
