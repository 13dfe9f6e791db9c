"""Boards, board posts and their threaded replies."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from commung.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from commung.core.settings import settings
from commung.db.time import utcnow
from commung.models import Board, BoardPost, BoardPostReply, Community, Profile, User
from commung.schemas.board import (
    BoardCreate,
    BoardPostCreate,
    BoardPostUpdate,
    BoardReplyCreate,
    BoardUpdate,
)
from commung.services.image_service import require_images
from commung.services.profile_service import profile_summary
from commung.services.threading import build_reply_tree, flatten_for_display, serialize_tree

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------


def _live_boards(db: Session, community: Community):
    return db.query(Board).filter(Board.community_id == community.id, Board.deleted_at.is_(None))


def _ensure_unique_slug(
    db: Session,
    community: Community,
    slug: str,
    exclude_id: str | None = None,
) -> None:
    query = _live_boards(db, community).filter(Board.slug == slug)
    if exclude_id is not None:
        query = query.filter(Board.id != exclude_id)
    if query.first() is not None:
        raise Conflict("이미 사용 중인 게시판 슬러그입니다")


def list_boards(db: Session, community: Community) -> list[Board]:
    return _live_boards(db, community).order_by(Board.created_at, Board.id).all()


def get_board(db: Session, community: Community, board_id: str) -> Board:
    board = _live_boards(db, community).filter(Board.id == board_id).first()
    if board is None:
        raise NotFound("게시판을 찾을 수 없습니다")
    return board


def create_board(db: Session, community: Community, data: BoardCreate) -> Board:
    _ensure_unique_slug(db, community, data.slug)
    board = Board(
        community_id=community.id,
        name=data.name,
        slug=data.slug,
        description=data.description,
        allow_comments=data.allow_comments,
    )
    db.add(board)
    db.commit()
    db.refresh(board)
    logger.info("Created board %s in community %s", board.slug, community.id)
    return board


def update_board(db: Session, community: Community, board: Board, data: BoardUpdate) -> Board:
    changes = data.model_dump(exclude_unset=True)
    if changes.get("slug"):
        _ensure_unique_slug(db, community, changes["slug"], exclude_id=board.id)
    for key, value in changes.items():
        if value is None and key != "description":
            continue
        setattr(board, key, value)
    db.commit()
    db.refresh(board)
    return board


def delete_board(db: Session, board: Board) -> None:
    """Soft-delete a board along with its posts and their replies."""
    now = utcnow()
    board.deleted_at = now
    post_ids = [
        post_id
        for (post_id,) in db.query(BoardPost.id).filter(BoardPost.board_id == board.id).all()
    ]
    if post_ids:
        (
            db.query(BoardPostReply)
            .filter(BoardPostReply.board_post_id.in_(post_ids), BoardPostReply.deleted_at.is_(None))
            .update({BoardPostReply.deleted_at: now}, synchronize_session=False)
        )
        (
            db.query(BoardPost)
            .filter(BoardPost.id.in_(post_ids), BoardPost.deleted_at.is_(None))
            .update({BoardPost.deleted_at: now}, synchronize_session=False)
        )
    db.commit()
    logger.info("Deleted board %s", board.id)


# ---------------------------------------------------------------------------
# Board posts
# ---------------------------------------------------------------------------


def serialize_board_post(post: BoardPost) -> dict[str, Any]:
    return {
        "id": post.id,
        "board_id": post.board_id,
        "title": post.title,
        "content": post.content,
        "image": {"id": post.image.id, "url": post.image.url} if post.image else None,
        "author": profile_summary(post.author),
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def list_board_posts(
    db: Session,
    board: Board,
    limit: int,
    offset: int,
) -> tuple[list[BoardPost], int]:
    query = db.query(BoardPost).filter(
        BoardPost.board_id == board.id,
        BoardPost.deleted_at.is_(None),
    )
    total = query.count()
    rows = (
        query.order_by(BoardPost.created_at.desc(), BoardPost.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return rows, total


def get_board_post(db: Session, board: Board, post_id: str) -> BoardPost:
    post = (
        db.query(BoardPost)
        .filter(
            BoardPost.id == post_id,
            BoardPost.board_id == board.id,
            BoardPost.deleted_at.is_(None),
        )
        .first()
    )
    if post is None:
        raise NotFound("게시물을 찾을 수 없습니다")
    return post


def create_board_post(
    db: Session,
    user: User,
    board: Board,
    profile: Profile,
    data: BoardPostCreate,
) -> BoardPost:
    if profile.is_muted:
        raise Forbidden("이 프로필은 음소거되어 게시할 수 없습니다")
    if data.image_id:
        require_images(db, [data.image_id])
    post = BoardPost(
        board_id=board.id,
        author_id=profile.id,
        created_by_user_id=user.id,
        title=data.title,
        content=data.content,
        image_id=data.image_id,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def _require_author(post: BoardPost | BoardPostReply, profile: Profile) -> None:
    if post.author_id != profile.id:
        raise Forbidden("작성자만 수정하거나 삭제할 수 있습니다")


def update_board_post(
    db: Session,
    profile: Profile,
    post: BoardPost,
    data: BoardPostUpdate,
) -> BoardPost:
    _require_author(post, profile)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("image_id"):
        require_images(db, [changes["image_id"]])
    for key, value in changes.items():
        if value is None and key != "image_id":
            continue
        setattr(post, key, value)
    db.commit()
    db.refresh(post)
    return post


def delete_board_post(db: Session, profile: Profile, post: BoardPost) -> None:
    _require_author(post, profile)
    now = utcnow()
    post.deleted_at = now
    (
        db.query(BoardPostReply)
        .filter(BoardPostReply.board_post_id == post.id, BoardPostReply.deleted_at.is_(None))
        .update({BoardPostReply.deleted_at: now}, synchronize_session=False)
    )
    db.commit()


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------


def serialize_reply(reply: BoardPostReply) -> dict[str, Any]:
    return {
        "id": reply.id,
        "board_post_id": reply.board_post_id,
        "content": reply.content,
        "in_reply_to_id": reply.in_reply_to_id,
        "root_reply_id": reply.root_reply_id,
        "depth": reply.depth,
        "author": profile_summary(reply.author),
        "created_at": reply.created_at,
        "updated_at": reply.updated_at,
    }


def _live_replies(db: Session, post: BoardPost):
    return db.query(BoardPostReply).filter(
        BoardPostReply.board_post_id == post.id,
        BoardPostReply.deleted_at.is_(None),
    )


def create_reply(
    db: Session,
    user: User,
    board: Board,
    post: BoardPost,
    profile: Profile,
    data: BoardReplyCreate,
) -> BoardPostReply:
    """Reply to a board post or to another reply on the same post."""
    if not board.allow_comments:
        raise Forbidden("이 게시판은 댓글을 허용하지 않습니다")
    if profile.is_muted:
        raise Forbidden("이 프로필은 음소거되어 게시할 수 없습니다")

    depth = 0
    root_reply_id: str | None = None
    if data.in_reply_to_id:
        parent = _live_replies(db, post).filter(BoardPostReply.id == data.in_reply_to_id).first()
        if parent is None:
            raise NotFound("상위 댓글을 찾을 수 없습니다")
        depth = parent.depth + 1
        root_reply_id = parent.root_reply_id or parent.id
        if depth > settings.max_reply_depth:
            raise BadRequest("답글을 더 이상 중첩할 수 없습니다")

    reply = BoardPostReply(
        board_post_id=post.id,
        author_id=profile.id,
        created_by_user_id=user.id,
        content=data.content,
        in_reply_to_id=data.in_reply_to_id or None,
        root_reply_id=root_reply_id,
        depth=depth,
    )
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return reply


def list_replies(db: Session, post: BoardPost) -> dict[str, Any]:
    """Return the reply tree of ``post`` together with its flattened display rows."""
    rows = _live_replies(db, post).order_by(BoardPostReply.created_at, BoardPostReply.id).all()
    roots = build_reply_tree(rows)
    max_indent = settings.reply_max_visual_indent
    return {
        "replies": serialize_tree(roots, serialize_reply, max_indent),
        "display_rows": [
            {"id": node.id, "indent": indent}
            for node, indent in flatten_for_display(roots, max_indent)
        ],
    }


def delete_reply(db: Session, profile: Profile, post: BoardPost, reply_id: str) -> int:
    """Soft-delete a reply and all of its descendants; returns how many rows changed."""
    reply = _live_replies(db, post).filter(BoardPostReply.id == reply_id).first()
    if reply is None:
        raise NotFound("댓글을 찾을 수 없습니다")
    _require_author(reply, profile)

    rows = _live_replies(db, post).all()
    children: dict[str, list[BoardPostReply]] = {}
    for row in rows:
        if row.in_reply_to_id:
            children.setdefault(row.in_reply_to_id, []).append(row)

    now = utcnow()
    stack = [reply]
    seen: set[str] = set()
    while stack:
        current = stack.pop()
        if current.id in seen:
            continue
        seen.add(current.id)
        current.deleted_at = now
        stack.extend(children.get(current.id, []))
    db.commit()
    return len(seen)
