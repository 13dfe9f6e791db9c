"""Console board management for owners and moderators."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.schemas.board import BoardCreate, BoardResponse, BoardUpdate
from commung.schemas.common import DataResponse
from commung.services import board_service, membership_service

router = APIRouter(prefix="/console/communities/{slug}/boards", tags=["boards"])


@router.get("", response_model=DataResponse[list[BoardResponse]])
async def list_boards(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    return {"data": board_service.list_boards(db, community)}


@router.post(
    "",
    response_model=DataResponse[BoardResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_board(
    data: BoardCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    return {"data": board_service.create_board(db, community, data)}


@router.put("/{board_id}", response_model=DataResponse[BoardResponse])
async def update_board(
    board_id: str,
    data: BoardUpdate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_staff(db, user, community)
    board = board_service.get_board(db, community, board_id)
    return {"data": board_service.update_board(db, community, board, data)}


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.require_staff(db, user, community)
    board = board_service.get_board(db, community, board_id)
    board_service.delete_board(db, board)
