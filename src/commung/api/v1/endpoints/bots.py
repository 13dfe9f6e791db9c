"""Console bot and bot-token management (community owners only)."""

from typing import Any

from fastapi import APIRouter, status

from commung.api.v1.dependencies import ConsoleCommunityDep, CurrentUserDep, SessionDep
from commung.schemas.bot import (
    BotCreate,
    BotResponse,
    BotTokenCreate,
    BotTokenIssued,
    BotTokenResponse,
    BotUpdate,
)
from commung.schemas.common import DataResponse
from commung.services import bot_service, membership_service

router = APIRouter(prefix="/console/communities/{slug}/bots", tags=["bots"])


@router.post(
    "",
    response_model=DataResponse[BotResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_bot(
    data: BotCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    bot = bot_service.create_bot(db, community, user, data)
    return {"data": bot_service.serialize_bot(bot)}


@router.get("", response_model=DataResponse[list[BotResponse]])
async def list_bots(
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    return {"data": [bot_service.serialize_bot(bot) for bot in bot_service.list_bots(db, community)]}


@router.get("/{bot_id}", response_model=DataResponse[BotResponse])
async def get_bot(
    bot_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    return {"data": bot_service.serialize_bot(bot_service.get_bot(db, community, bot_id))}


@router.put("/{bot_id}", response_model=DataResponse[BotResponse])
async def update_bot(
    bot_id: str,
    data: BotUpdate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    bot = bot_service.update_bot(db, bot_service.get_bot(db, community, bot_id), data)
    return {"data": bot_service.serialize_bot(bot)}


@router.delete("/{bot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bot(
    bot_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> None:
    membership_service.require_owner(db, user, community)
    bot_service.delete_bot(db, bot_service.get_bot(db, community, bot_id))


@router.post(
    "/{bot_id}/tokens",
    response_model=DataResponse[BotTokenIssued],
    status_code=status.HTTP_201_CREATED,
)
async def issue_bot_token(
    bot_id: str,
    data: BotTokenCreate,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    """Issue a token; the plaintext value is only returned here."""
    membership_service.require_owner(db, user, community)
    bot = bot_service.get_bot(db, community, bot_id)
    token, secret = bot_service.issue_token(db, bot, data)
    payload = BotTokenResponse.model_validate(token).model_dump()
    return {"data": {**payload, "token": secret}}


@router.get("/{bot_id}/tokens", response_model=DataResponse[list[BotTokenResponse]])
async def list_bot_tokens(
    bot_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    bot = bot_service.get_bot(db, community, bot_id)
    return {"data": bot_service.list_tokens(db, bot)}


@router.delete("/{bot_id}/tokens/{token_id}", response_model=DataResponse[BotTokenResponse])
async def revoke_bot_token(
    bot_id: str,
    token_id: str,
    community: ConsoleCommunityDep,
    db: SessionDep,
    user: CurrentUserDep,
) -> dict[str, Any]:
    membership_service.require_owner(db, user, community)
    bot = bot_service.get_bot(db, community, bot_id)
    return {"data": bot_service.revoke_token(db, bot, token_id)}
