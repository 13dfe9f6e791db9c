"""Timeline posts: creation, reply threads, mentions, reactions, bookmarks and edit history."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from commung.core.constants import (
    MENTION_PATTERN,
    NOTIFICATION_MENTION,
    NOTIFICATION_REACTION,
    NOTIFICATION_REPLY,
    ROLE_OWNER,
)
from commung.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from commung.core.settings import settings
from commung.db.time import utcnow
from commung.models import (
    Community,
    Mention,
    Post,
    PostBookmark,
    PostHistory,
    PostHistoryImage,
    PostImage,
    PostReaction,
    Profile,
    User,
)
from commung.schemas.post import PostCreate, PostUpdate
from commung.services import community_service, notification_service, pagination
from commung.services.image_service import require_images
from commung.services.profile_service import profile_summary
from commung.services.threading import build_reply_tree, flatten_for_display, serialize_tree

logger = logging.getLogger(__name__)

_MENTION_RE = re.compile(MENTION_PATTERN)
MENTION_PREVIEW_LENGTH = 100


def _live_posts(db: Session, community: Community):
    return db.query(Post).filter(Post.community_id == community.id, Post.deleted_at.is_(None))


def get_post(db: Session, community: Community, post_id: str) -> Post:
    post = _live_posts(db, community).filter(Post.id == post_id).first()
    if post is None:
        raise NotFound("게시물을 찾을 수 없습니다")
    return post


def reactions_by_post(db: Session, post_ids: list[str]) -> dict[str, dict[str, list[dict[str, Any]]]]:
    """Group reactions as ``{post_id: {emoji: [profile, ...]}}``."""
    grouped: dict[str, dict[str, list[dict[str, Any]]]] = defaultdict(lambda: defaultdict(list))
    if not post_ids:
        return {}
    rows = (
        db.query(PostReaction)
        .filter(PostReaction.post_id.in_(post_ids))
        .order_by(PostReaction.created_at)
        .all()
    )
    for reaction in rows:
        grouped[reaction.post_id][reaction.emoji].append(profile_summary(reaction.profile))
    return {post_id: dict(emojis) for post_id, emojis in grouped.items()}


def reply_counts(db: Session, post_ids: list[str]) -> dict[str, int]:
    if not post_ids:
        return {}
    rows = (
        db.query(Post.in_reply_to_id, func.count(Post.id))
        .filter(Post.in_reply_to_id.in_(post_ids), Post.deleted_at.is_(None))
        .group_by(Post.in_reply_to_id)
        .all()
    )
    return {parent_id: count for parent_id, count in rows}


def serialize_post(
    post: Post,
    reactions: dict[str, list[dict[str, Any]]] | None = None,
    reply_count: int = 0,
) -> dict[str, Any]:
    return {
        "id": post.id,
        "content": post.content,
        "content_warning": post.content_warning,
        "announcement": post.announcement,
        "in_reply_to_id": post.in_reply_to_id,
        "root_post_id": post.root_post_id,
        "depth": post.depth,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
        "author": profile_summary(post.author),
        "images": [{"id": image.id, "url": image.url} for image in post.images],
        "reactions": reactions or {},
        "reply_count": reply_count,
    }


def serialize_posts(db: Session, posts: list[Post]) -> list[dict[str, Any]]:
    ids = [post.id for post in posts]
    reactions = reactions_by_post(db, ids)
    counts = reply_counts(db, ids)
    return [serialize_post(post, reactions.get(post.id), counts.get(post.id, 0)) for post in posts]


def _notify_mentions(
    db: Session,
    post: Post,
    author: Profile,
    exclude_recipient_id: str | None,
) -> None:
    usernames = list(dict.fromkeys(_MENTION_RE.findall(post.content)))
    if not usernames:
        return
    mentioned = (
        db.query(Profile)
        .filter(
            Profile.community_id == post.community_id,
            Profile.username.in_(usernames),
            Profile.activated_at.is_not(None),
            Profile.deleted_at.is_(None),
        )
        .all()
    )
    preview = post.content
    if len(preview) > MENTION_PREVIEW_LENGTH:
        preview = preview[:MENTION_PREVIEW_LENGTH] + "..."
    for profile in mentioned:
        if profile.id == author.id:
            continue
        db.add(Mention(post_id=post.id, profile_id=profile.id))
        if profile.id == exclude_recipient_id:
            continue
        notification_service.notify(
            db,
            type_=NOTIFICATION_MENTION,
            recipient=profile,
            actor=author,
            title=f"{author.name}님이 회원님을 언급했습니다",
            message=preview,
            post_id=post.id,
        )


def create_post(
    db: Session,
    user: User,
    community: Community,
    profile: Profile,
    role: str | None,
    data: PostCreate,
) -> Post:
    """Create a top-level post or a reply and queue its notifications.

    Raises:
        NotFound: If the parent post or an image does not exist.
        Forbidden: If the profile is muted, the community is closed or a
            non-owner tries to post an announcement.
        BadRequest: If the post is empty or the reply is nested too deeply.
    """
    parent: Post | None = None
    depth = 0
    root_post_id: str | None = None
    if data.in_reply_to_id:
        parent = _live_posts(db, community).filter(Post.id == data.in_reply_to_id).first()
        if parent is None:
            raise NotFound("상위 게시물을 찾을 수 없습니다")
        depth = parent.depth + 1
        root_post_id = parent.root_post_id or parent.id
        if depth > settings.max_reply_depth:
            raise BadRequest("답글을 더 이상 중첩할 수 없습니다")

    if profile.is_muted:
        raise Forbidden("이 프로필은 음소거되어 게시할 수 없습니다")
    if not data.content.strip() and not data.image_ids:
        raise BadRequest("게시물 내용 또는 이미지를 제공해야 합니다")
    images = require_images(db, data.image_ids)
    community_service.validate_community_active(community, role)

    if data.announcement:
        if role != ROLE_OWNER:
            raise Forbidden("공지사항은 소유자만 작성할 수 있습니다")
        if parent is not None:
            raise BadRequest("답글은 공지사항으로 작성할 수 없습니다")

    post = Post(
        community_id=community.id,
        author_id=profile.id,
        created_by_user_id=user.id,
        content=data.content,
        content_warning=data.content_warning or None,
        announcement=data.announcement,
        in_reply_to_id=parent.id if parent is not None else None,
        root_post_id=root_post_id,
        depth=depth,
    )
    db.add(post)
    db.flush()
    for position, image in enumerate(images):
        db.add(PostImage(post_id=post.id, image_id=image.id, position=position))

    reply_recipient_id: str | None = None
    if parent is not None and parent.author_id != profile.id:
        reply_recipient_id = parent.author_id
        notification_service.notify(
            db,
            type_=NOTIFICATION_REPLY,
            recipient=parent.author,
            actor=profile,
            title="새로운 답글",
            message=f"{profile.name}님이 답글을 작성했습니다",
            post_id=post.id,
        )
    _notify_mentions(db, post, profile, reply_recipient_id)

    db.commit()
    db.refresh(post)
    return post


def list_timeline(
    db: Session,
    community: Community,
    limit: int,
    cursor: str | None,
) -> tuple[list[Post], str | None, bool]:
    """Return one page of top-level posts, newest first."""
    query = _live_posts(db, community).filter(Post.in_reply_to_id.is_(None))
    query = pagination.apply_cursor(query, Post, db, cursor)
    rows = pagination.newest_first(query, Post).limit(limit + 1).all()
    return pagination.cursor_page(rows, limit)


def list_announcements(db: Session, community: Community) -> list[Post]:
    query = _live_posts(db, community).filter(Post.announcement.is_(True))
    return pagination.newest_first(query, Post).all()


def list_profile_posts(
    db: Session,
    community: Community,
    profile: Profile,
    limit: int,
    cursor: str | None,
) -> tuple[list[Post], str | None, bool]:
    query = _live_posts(db, community).filter(Post.author_id == profile.id)
    query = pagination.apply_cursor(query, Post, db, cursor)
    rows = pagination.newest_first(query, Post).limit(limit + 1).all()
    return pagination.cursor_page(rows, limit)


def post_detail(db: Session, community: Community, post: Post) -> dict[str, Any]:
    """Serialize ``post`` with its reply tree, display rows and ancestor chain."""
    thread_root_id = post.root_post_id or post.id
    thread = (
        _live_posts(db, community)
        .filter((Post.root_post_id == thread_root_id) | (Post.id == thread_root_id))
        .order_by(Post.created_at, Post.id)
        .all()
    )
    by_id = {row.id: row for row in thread}
    descendants = [row for row in thread if row.id != post.id and row.in_reply_to_id is not None]

    ids = list(by_id)
    reactions = reactions_by_post(db, ids)
    counts = reply_counts(db, ids)

    def render(row: Post) -> dict[str, Any]:
        return serialize_post(row, reactions.get(row.id), counts.get(row.id, 0))

    roots = build_reply_tree(descendants, root_parent_id=post.id)
    max_indent = settings.reply_max_visual_indent

    ancestors: list[dict[str, Any]] = []
    seen = {post.id}
    parent_id = post.in_reply_to_id
    while parent_id and parent_id in by_id and parent_id not in seen:
        seen.add(parent_id)
        parent = by_id[parent_id]
        ancestors.append(render(parent))
        parent_id = parent.in_reply_to_id
    ancestors.reverse()

    payload = render(post)
    payload["replies"] = serialize_tree(roots, render, max_indent)
    payload["display_rows"] = [
        {"id": node.id, "indent": indent} for node, indent in flatten_for_display(roots, max_indent)
    ]
    payload["parent_thread"] = ancestors
    return payload


def update_post(db: Session, profile: Profile, post: Post, data: PostUpdate) -> Post:
    """Edit the content of one's own post, keeping the previous version in its history."""
    if post.author_id != profile.id:
        raise Forbidden("본인의 게시물만 수정할 수 있습니다")
    if post.announcement:
        raise BadRequest("공지사항은 수정할 수 없습니다")
    if not data.content.strip() and not post.images:
        raise BadRequest("게시물 내용 또는 이미지를 제공해야 합니다")
    history = PostHistory(
        post_id=post.id,
        content=post.content,
        content_warning=post.content_warning,
        edited_by_profile_id=profile.id,
    )
    db.add(history)
    db.flush()
    for position, image in enumerate(post.images):
        db.add(PostHistoryImage(post_history_id=history.id, image_id=image.id, position=position))

    post.content = data.content
    if "content_warning" in data.model_fields_set:
        post.content_warning = data.content_warning or None
    db.commit()
    db.refresh(post)
    return post


def soft_delete_post(post: Post) -> None:
    post.deleted_at = utcnow()


def delete_own_post(db: Session, profile: Profile, post: Post) -> None:
    if post.author_id != profile.id:
        raise Forbidden("본인의 게시물만 삭제할 수 있습니다")
    soft_delete_post(post)
    db.commit()
    logger.info("Post %s deleted by its author %s", post.id, profile.id)


def add_reaction(
    db: Session,
    user: User,
    profile: Profile,
    post: Post,
    emoji: str,
) -> PostReaction:
    """Add ``emoji`` from ``profile``; a second identical reaction is rejected."""
    existing = (
        db.query(PostReaction)
        .filter(
            PostReaction.post_id == post.id,
            PostReaction.profile_id == profile.id,
            PostReaction.emoji == emoji,
        )
        .first()
    )
    if existing is not None:
        raise BadRequest("반응이 이미 존재합니다")

    reaction = PostReaction(post_id=post.id, profile_id=profile.id, user_id=user.id, emoji=emoji)
    db.add(reaction)
    try:
        db.flush()
    except IntegrityError as err:
        db.rollback()
        raise BadRequest("반응이 이미 존재합니다") from err

    notification_service.notify(
        db,
        type_=NOTIFICATION_REACTION,
        recipient=post.author,
        actor=profile,
        title="새로운 반응",
        message=f"{profile.name}님이 게시물에 {emoji} 반응을 남겼습니다",
        post_id=post.id,
    )
    db.commit()
    db.refresh(reaction)
    return reaction


def remove_reaction(db: Session, profile: Profile, post: Post, emoji: str) -> None:
    reaction = (
        db.query(PostReaction)
        .filter(
            PostReaction.post_id == post.id,
            PostReaction.profile_id == profile.id,
            PostReaction.emoji == emoji,
        )
        .first()
    )
    if reaction is None:
        raise NotFound("반응을 찾을 수 없습니다")
    db.delete(reaction)
    db.commit()


def list_post_history(db: Session, post: Post) -> list[dict[str, Any]]:
    """Return earlier versions of ``post``, most recent edit first."""
    entries = (
        db.query(PostHistory)
        .filter(PostHistory.post_id == post.id)
        .order_by(PostHistory.edited_at.desc(), PostHistory.id.desc())
        .all()
    )
    return [
        {
            "id": entry.id,
            "content": entry.content,
            "content_warning": entry.content_warning,
            "edited_at": entry.edited_at,
            "edited_by": profile_summary(entry.edited_by),
            "images": [{"id": image.id, "url": image.url} for image in entry.images],
        }
        for entry in entries
    ]


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


def add_bookmark(db: Session, profile: Profile, post: Post) -> PostBookmark:
    existing = (
        db.query(PostBookmark)
        .filter(PostBookmark.profile_id == profile.id, PostBookmark.post_id == post.id)
        .first()
    )
    if existing is not None:
        raise Conflict("게시물이 이미 북마크되었습니다")
    bookmark = PostBookmark(profile_id=profile.id, post_id=post.id)
    db.add(bookmark)
    db.commit()
    db.refresh(bookmark)
    return bookmark


def remove_bookmark(db: Session, profile: Profile, post: Post) -> None:
    bookmark = (
        db.query(PostBookmark)
        .filter(PostBookmark.profile_id == profile.id, PostBookmark.post_id == post.id)
        .first()
    )
    if bookmark is None:
        raise NotFound("북마크를 찾을 수 없습니다")
    db.delete(bookmark)
    db.commit()


def list_bookmarks(
    db: Session,
    community: Community,
    profile: Profile,
    limit: int,
    cursor: str | None,
) -> tuple[list[dict[str, Any]], str | None, bool]:
    """Return one page of the profile's bookmarked live posts, newest bookmark first."""
    query = (
        db.query(PostBookmark)
        .join(Post, Post.id == PostBookmark.post_id)
        .filter(
            PostBookmark.profile_id == profile.id,
            Post.community_id == community.id,
            Post.deleted_at.is_(None),
        )
    )
    query = pagination.apply_cursor(query, PostBookmark, db, cursor)
    rows = pagination.newest_first(query, PostBookmark).limit(limit + 1).all()
    page, next_cursor, has_more = pagination.cursor_page(rows, limit)

    posts = serialize_posts(db, [bookmark.post for bookmark in page])
    for payload, bookmark in zip(posts, page):
        payload["bookmark_id"] = bookmark.id
        payload["bookmarked_at"] = bookmark.created_at
    return posts, next_cursor, has_more
