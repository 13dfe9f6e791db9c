"""Bot API: posting and reacting as a bot's own profile with a bot token."""

from typing import Any

from fastapi import APIRouter, Query, status

from commung.api.v1.dependencies import BotContextDep, SessionDep
from commung.core.constants import DEFAULT_POSTS_LIMIT, MAX_PAGE_LIMIT, ROLE_MEMBER
from commung.models import User
from commung.schemas.post import PostCreate, PostUpdate, ReactionCreate
from commung.services import post_service

router = APIRouter(prefix="/bot/communities/{community_id}/posts", tags=["bot"])


@router.get("")
async def list_posts(
    bot_context: BotContextDep,
    db: SessionDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None),
) -> dict[str, Any]:
    _, _, community = bot_context
    posts, next_cursor, has_more = post_service.list_timeline(db, community, limit, cursor)
    return {
        "data": post_service.serialize_posts(db, posts),
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    bot_context: BotContextDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Post as the bot's profile; bots post with member rights."""
    bot, profile, community = bot_context
    creator = db.get(User, bot.created_by_id)
    data = data.model_copy(update={"announcement": False})
    post = post_service.create_post(db, creator, community, profile, ROLE_MEMBER, data)
    return {"data": post_service.serialize_post(post)}


@router.get("/{post_id}")
async def get_post(post_id: str, bot_context: BotContextDep, db: SessionDep) -> dict[str, Any]:
    _, _, community = bot_context
    post = post_service.get_post(db, community, post_id)
    return {"data": post_service.post_detail(db, community, post)}


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    data: PostUpdate,
    bot_context: BotContextDep,
    db: SessionDep,
) -> dict[str, Any]:
    _, profile, community = bot_context
    post = post_service.get_post(db, community, post_id)
    post = post_service.update_post(db, profile, post, data)
    return {"data": post_service.serialize_posts(db, [post])[0]}


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, bot_context: BotContextDep, db: SessionDep) -> None:
    _, profile, community = bot_context
    post = post_service.get_post(db, community, post_id)
    post_service.delete_own_post(db, profile, post)


@router.post("/{post_id}/reactions", status_code=status.HTTP_201_CREATED)
async def add_reaction(
    post_id: str,
    data: ReactionCreate,
    bot_context: BotContextDep,
    db: SessionDep,
) -> dict[str, Any]:
    bot, profile, community = bot_context
    post = post_service.get_post(db, community, post_id)
    creator = db.get(User, bot.created_by_id)
    reaction = post_service.add_reaction(db, creator, profile, post, data.emoji)
    return {"data": {"id": reaction.id, "emoji": reaction.emoji, "post_id": post.id}}


@router.delete("/{post_id}/reactions", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reaction(
    post_id: str,
    bot_context: BotContextDep,
    db: SessionDep,
    emoji: str = Query(..., min_length=1),
) -> None:
    _, profile, community = bot_context
    post = post_service.get_post(db, community, post_id)
    post_service.remove_reaction(db, profile, post, emoji)
