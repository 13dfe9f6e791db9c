"""Timeline post endpoints for the app surface."""

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
from commung.schemas.post import PostCreate, PostUpdate, ReactionCreate
from commung.services import post_service
from commung.services.moderation import ModerationService

router = APIRouter(prefix="/app/posts", tags=["posts"])


@router.get("")
async def list_posts(
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None, description="Id of the last post of the previous page"),
) -> dict[str, Any]:
    """List top-level timeline posts, newest first."""
    posts, next_cursor, has_more = post_service.list_timeline(db, community, limit, cursor)
    return {
        "data": post_service.serialize_posts(db, posts),
        "nextCursor": next_cursor,
        "hasMore": has_more,
    }


@router.get("/announcements")
async def list_announcements(
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    posts = post_service.list_announcements(db, community)
    return {"data": post_service.serialize_posts(db, posts)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    """Create a post or a reply as the acting profile."""
    post = post_service.create_post(db, user, community, profile, membership.role, data)
    return {"data": post_service.serialize_post(post)}


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    """Return a post with its reply tree, display rows and parent thread."""
    post = post_service.get_post(db, community, post_id)
    return {"data": post_service.post_detail(db, community, post)}


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    data: PostUpdate,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    post = post_service.get_post(db, community, post_id)
    post = post_service.update_post(db, profile, post, data)
    return {"data": post_service.serialize_posts(db, [post])[0]}


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile: ActingProfileDep,
) -> None:
    """Delete a post; staff deleting someone else's post goes through moderation."""
    post = post_service.get_post(db, community, post_id)
    if post.author_id == profile.id:
        post_service.delete_own_post(db, profile, post)
    else:
        ModerationService.delete_post(db, community, profile, membership.role, post)


@router.post("/{post_id}/reactions", status_code=status.HTTP_201_CREATED)
async def add_reaction(
    post_id: str,
    data: ReactionCreate,
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    post = post_service.get_post(db, community, post_id)
    reaction = post_service.add_reaction(db, user, profile, post, data.emoji)
    return {"data": {"id": reaction.id, "emoji": reaction.emoji, "post_id": post.id}}


@router.delete("/{post_id}/reactions", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reaction(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    emoji: str = Query(..., min_length=1),
) -> None:
    post = post_service.get_post(db, community, post_id)
    post_service.remove_reaction(db, profile, post, emoji)


@router.get("/{post_id}/history")
async def get_post_history(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    membership: MembershipDep,
) -> dict[str, Any]:
    """Return the earlier versions of a post, most recent edit first."""
    post = post_service.get_post(db, community, post_id)
    return {"data": post_service.list_post_history(db, post)}


@router.post("/{post_id}/bookmark", status_code=status.HTTP_201_CREATED)
async def add_bookmark(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> dict[str, Any]:
    post = post_service.get_post(db, community, post_id)
    bookmark = post_service.add_bookmark(db, profile, post)
    return {"data": {"bookmark_id": bookmark.id, "post_id": post.id}}


@router.delete("/{post_id}/bookmark", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bookmark(
    post_id: str,
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
) -> None:
    post = post_service.get_post(db, community, post_id)
    post_service.remove_bookmark(db, profile, post)
