"""Cursor and offset pagination helpers for newest-first listings."""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import and_, desc, false, or_
from sqlalchemy.orm import Query, Session

from commung.core.constants import MAX_PAGE_LIMIT

M = TypeVar("M")


def clamp_limit(limit: int | None, default: int) -> int:
    """Return ``limit`` bounded to ``1..MAX_PAGE_LIMIT``; ``None`` means ``default``."""
    if limit is None:
        return default
    return max(1, min(int(limit), MAX_PAGE_LIMIT))


def newest_first(query: Query[Any], model: Any) -> Query[Any]:
    """Order by creation time then id, both descending, for stable paging."""
    return query.order_by(desc(model.created_at), desc(model.id))


def apply_cursor(query: Query[Any], model: Any, db: Session, cursor: str | None) -> Query[Any]:
    """Restrict ``query`` to rows strictly older than the row whose id is ``cursor``.

    Unknown cursors yield an empty page rather than restarting from the top.
    """
    if not cursor:
        return query
    anchor = db.get(model, cursor)
    if anchor is None:
        return query.filter(false())
    return query.filter(
        or_(
            model.created_at < anchor.created_at,
            and_(model.created_at == anchor.created_at, model.id < anchor.id),
        )
    )


def cursor_page(rows: list[M], limit: int) -> tuple[list[M], str | None, bool]:
    """Split a ``limit + 1`` fetch into ``(page, next_cursor, has_more)``."""
    has_more = len(rows) > limit
    page = rows[:limit]
    next_cursor = getattr(page[-1], "id", None) if has_more and page else None
    return page, next_cursor, has_more
