"""Board, board post and board reply endpoints for the app surface."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import (
    ActingProfileDep,
    CommunityDep,
    CurrentUserDep,
    MembershipDep,
    SessionDep,
)
from commung.core.constants import DEFAULT_POSTS_LIMIT, MAX_PAGE_LIMIT
from commung.schemas.board import BoardPostCreate, BoardPostUpdate, BoardReplyCreate, BoardResponse
from commung.schemas.common import DataResponse
from commung.services import board_service

router = APIRouter(prefix="/app/boards", tags=["boards"])


@router.get("", response_model=DataResponse[list[BoardResponse]])
async def list_boards(
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    return {"data": board_service.list_boards(db, community)}


@router.get("/{board_id}/posts")
async def list_board_posts(
    board_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    board = board_service.get_board(db, community, board_id)
    posts, total = board_service.list_board_posts(db, board, limit, offset)
    return {
        "data": [board_service.serialize_board_post(post) for post in posts],
        "limit": limit,
        "offset": offset,
        "total": total,
    }


@router.post("/{board_id}/posts", status_code=status.HTTP_201_CREATED)
async def create_board_post(
    board_id: str,
    data: BoardPostCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    board = board_service.get_board(db, community, board_id)
    post = board_service.create_board_post(db, user, board, profile, data)
    return {"data": board_service.serialize_board_post(post)}


@router.get("/{board_id}/posts/{post_id}")
async def get_board_post(
    board_id: str,
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    return {"data": board_service.serialize_board_post(post)}


@router.put("/{board_id}/posts/{post_id}")
async def update_board_post(
    board_id: str,
    post_id: str,
    data: BoardPostUpdate,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    post = board_service.update_board_post(db, profile, post, data)
    return {"data": board_service.serialize_board_post(post)}


@router.delete("/{board_id}/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board_post(
    board_id: str,
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> None:
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    board_service.delete_board_post(db, profile, post)


@router.get("/{board_id}/posts/{post_id}/replies")
async def list_board_replies(
    board_id: str,
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    """Return the reply tree of a board post and its flattened display rows."""
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    return {"data": board_service.list_replies(db, post)}


@router.post("/{board_id}/posts/{post_id}/replies", status_code=status.HTTP_201_CREATED)
async def create_board_reply(
    board_id: str,
    post_id: str,
    data: BoardReplyCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    reply = board_service.create_reply(db, user, board, post, profile, data)
    return {"data": board_service.serialize_reply(reply)}


@router.delete(
    "/{board_id}/posts/{post_id}/replies/{reply_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_board_reply(
    board_id: str,
    post_id: str,
    reply_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> None:
    """Delete a reply together with every reply nested under it."""
    board = board_service.get_board(db, community, board_id)
    post = board_service.get_board_post(db, board, post_id)
    board_service.delete_reply(db, profile, post, reply_id)
