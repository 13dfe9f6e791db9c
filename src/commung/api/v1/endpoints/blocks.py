"""Console endpoints for blocking other accounts."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import CurrentUserDep, SessionDep
from commung.schemas.common import DataResponse
from commung.schemas.user import BlockedUserOut
from commung.services import block_service

router = APIRouter(prefix="/console/blocks", tags=["blocks"])


@router.get("", response_model=DataResponse[list[BlockedUserOut]])
async def list_blocked_users(db: SessionDep, user: CurrentUserDep) -> dict[str, Any]:
    return {"data": block_service.list_blocked_users(db, user)}


@router.post("/{user_id}", status_code=status.HTTP_201_CREATED)
async def block_user(user_id: str, db: SessionDep, user: CurrentUserDep) -> dict[str, Any]:
    """Block ``user_id``; their profiles can no longer message the caller's profiles."""
    block_service.block_user(db, user, user_id)
    return {"data": {"blocked": True}}


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_user(user_id: str, db: SessionDep, user: CurrentUserDep) -> None:
    block_service.unblock_user(db, user, user_id)
