"""Bookmarked posts of the acting profile."""

from typing import Any

from fastapi import APIRouter, Query

from commung.api.v1.dependencies import ActingProfileDep, CommunityDep, SessionDep
from commung.core.constants import DEFAULT_POSTS_LIMIT, MAX_PAGE_LIMIT
from commung.services import post_service

router = APIRouter(prefix="/app/bookmarks", tags=["posts"])


@router.get("")
async def list_bookmarks(
    db: SessionDep,
    community: CommunityDep,
    profile: ActingProfileDep,
    limit: int = Query(DEFAULT_POSTS_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    cursor: str | None = Query(None, description="Id of the last bookmark of the previous page"),
) -> dict[str, Any]:
    posts, next_cursor, has_more = post_service.list_bookmarks(db, community, profile, limit, cursor)
    return {"data": posts, "nextCursor": next_cursor, "hasMore": has_more}
