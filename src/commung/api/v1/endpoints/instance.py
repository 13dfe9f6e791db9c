"""Per-tenant context: the current community and the caller's place in it."""

from typing import Any

from fastapi import APIRouter

from commung.api.v1.dependencies import (
    CommunityDep,
    CurrentUserDep,
    HostCommunityDep,
    MembershipDep,
    SessionDep,
)
from commung.schemas.common import DataResponse
from commung.schemas.community import CommunityResponse
from commung.schemas.profile import ProfileResponse
from commung.services import community_service, permissions, profile_service

router = APIRouter(prefix="/app", tags=["instance"])


@router.get("/instance", response_model=DataResponse[CommunityResponse])
async def get_instance(community: HostCommunityDep) -> dict[str, Any]:
    """Return the community this host name belongs to."""
    return {"data": community}


@router.get("/me")
async def get_me(
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    """Return the caller's role, permissions and profile switcher entries."""
    profiles = profile_service.list_user_profiles(db, user, community)
    return {
        "data": {
            "user_id": user.id,
            "role": membership.role,
            "is_moderator": permissions.is_moderator(membership.role),
            "community_started": community_service.is_community_started(community),
            "community_ended": community_service.is_community_ended(community),
            "profiles": [
                ProfileResponse.model_validate(profile).model_dump() for profile in profiles
            ],
        }
    }
