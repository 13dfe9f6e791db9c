"""Console member management endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.core.constants import DEFAULT_PROFILES_LIMIT, MAX_PAGE_LIMIT
from commung.schemas.common import OffsetPage
from commung.schemas.membership import MemberResponse, RoleUpdate
from commung.services import membership_service, permissions

router = APIRouter(prefix="/console/communities/{slug}/members", tags=["members"])


@router.get("", response_model=OffsetPage[MemberResponse])
async def list_members(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
    limit: int = Query(DEFAULT_PROFILES_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    """List members for staff; each row carries the roles the caller may assign."""
    actor = membership_service.require_staff(db, user, community)
    members, total = membership_service.list_members(db, community, actor.role, limit, offset)
    return {"data": members, "limit": limit, "offset": offset, "total": total}


@router.put("/{membership_id}/role")
async def update_member_role(
    membership_id: str,
    data: RoleUpdate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    actor = membership_service.require_staff(db, user, community)
    target = membership_service.update_role(db, community, actor, membership_id, data.role)
    return {
        "data": {
            "id": target.id,
            "user_id": target.user_id,
            "role": target.role,
            "assignable_roles": permissions.assignable_roles(actor.role, target.role),
        }
    }


@router.delete("/{membership_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    membership_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.require_owner(db, user, community)
    membership_service.remove_member(db, community, membership_id)
