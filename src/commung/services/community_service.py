"""Community (tenant) lifecycle, schedule checks and host-based resolution."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from commung.core.constants import (
    APPLICATION_APPROVED,
    APPLICATION_PENDING,
    APPLICATION_REJECTED,
    ROLE_MODERATOR,
    ROLE_OWNER,
)
from commung.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from commung.core.settings import settings
from commung.db.time import utcnow
from commung.models import (
    Board,
    BoardPost,
    BoardPostReply,
    Community,
    CommunityApplication,
    CommunityHashtag,
    CommunityLink,
    Membership,
    Post,
    User,
)
from commung.schemas.community import CommunityCreate, CommunityLinkCreate, CommunityUpdate
from commung.services import profile_service
from commung.services.image_service import require_images
from commung.services.validation import validate_date_range

logger = logging.getLogger(__name__)


def is_community_started(community: Community, now: datetime | None = None) -> bool:
    return (now or utcnow()) >= community.starts_at


def is_community_ended(community: Community, now: datetime | None = None) -> bool:
    return (now or utcnow()) > community.ends_at


def validate_community_active(community: Community, role: str | None) -> None:
    """Raise 403 when posting is closed for ``role``.

    After the end date nobody may post; before the start date only staff may.
    """
    now = utcnow()
    if is_community_ended(community, now):
        raise Forbidden("커뮤가 종료되었습니다")
    if not is_community_started(community, now) and role not in (ROLE_OWNER, ROLE_MODERATOR):
        raise Forbidden("커뮤가 아직 시작되지 않았습니다")


def is_recruiting_now(community: Community, now: datetime | None = None) -> bool:
    """Return True when applications are accepted right now."""
    if not community.is_recruiting:
        return False
    now = now or utcnow()
    if community.recruiting_starts_at is not None and now < community.recruiting_starts_at:
        return False
    if community.recruiting_ends_at is not None and now > community.recruiting_ends_at:
        return False
    return True


def get_community_by_slug(db: Session, slug: str) -> Community | None:
    return (
        db.query(Community)
        .filter(Community.slug == slug, Community.deleted_at.is_(None))
        .first()
    )


def require_community_by_slug(db: Session, slug: str) -> Community:
    community = get_community_by_slug(db, slug)
    if community is None:
        raise NotFound("커뮤를 찾을 수 없습니다")
    return community


def get_community_by_custom_domain(db: Session, hostname: str) -> Community | None:
    return (
        db.query(Community)
        .filter(Community.custom_domain == hostname, Community.deleted_at.is_(None))
        .first()
    )


def resolve_community_from_host(
    db: Session,
    origin: str | None,
    host: str | None,
) -> Community:
    """Resolve the tenant of an app request from its Origin or Host header.

    A custom domain wins; otherwise the host must be ``<slug>.<console domain>``.
    """
    hostname: str | None
    if origin:
        hostname = urlparse(origin).hostname
        if not hostname:
            raise BadRequest("잘못된 origin 헤더")
    else:
        hostname = host.split(":", 1)[0] if host else None
    if not hostname:
        raise BadRequest("호스트명을 결정할 수 없습니다")
    hostname = hostname.lower()

    community = get_community_by_custom_domain(db, hostname)
    if community is not None:
        return community

    main_domain = settings.console_domain.lower()
    suffix = f".{main_domain}"
    if hostname == main_domain:
        raise NotFound("메인 도메인에 대한 커뮤가 없습니다")
    if not hostname.endswith(suffix):
        raise BadRequest("잘못된 도메인")

    community = get_community_by_slug(db, hostname[: -len(suffix)])
    if community is None:
        raise NotFound("커뮤를 찾을 수 없습니다")
    return community


def _ensure_unique_domain(db: Session, custom_domain: str | None, exclude_id: str | None) -> None:
    if not custom_domain:
        return
    query = db.query(Community).filter(Community.custom_domain == custom_domain)
    if exclude_id is not None:
        query = query.filter(Community.id != exclude_id)
    if query.first() is not None:
        raise Conflict("이미 사용 중인 도메인입니다")


def create_community(db: Session, owner: User, data: CommunityCreate) -> Community:
    """Create a community with its hashtags, owner membership and owner profile."""
    if db.query(Community).filter(Community.slug == data.slug).first() is not None:
        raise Conflict("이미 존재하는 커뮤 ID입니다")
    custom_domain = data.custom_domain.lower() if data.custom_domain else None
    _ensure_unique_domain(db, custom_domain, None)
    if data.banner_image_id:
        require_images(db, [data.banner_image_id])

    now = utcnow()
    community = Community(
        name=data.name,
        slug=data.slug,
        description=data.description,
        starts_at=data.starts_at,
        ends_at=data.ends_at,
        is_recruiting=data.is_recruiting,
        recruiting_starts_at=data.recruiting_starts_at,
        recruiting_ends_at=data.recruiting_ends_at,
        minimum_birth_year=data.minimum_birth_year,
        mute_new_members=data.mute_new_members,
        custom_domain=custom_domain,
        banner_image_id=data.banner_image_id,
        owner_id=owner.id,
    )
    community.hashtags = [CommunityHashtag(tag=tag) for tag in data.hashtags]
    db.add(community)
    db.flush()

    db.add(
        Membership(
            user_id=owner.id,
            community_id=community.id,
            role=ROLE_OWNER,
            activated_at=now,
        )
    )
    profile_service.create_profile(
        db,
        community_id=community.id,
        user_id=owner.id,
        name=data.profile_name,
        username=data.profile_username,
        is_primary=True,
    )
    db.commit()
    db.refresh(community)
    logger.info("Created community %s (%s) owned by %s", community.slug, community.id, owner.id)
    return community


def update_community(db: Session, community: Community, data: CommunityUpdate) -> Community:
    """Apply a partial update, re-validating the merged schedule."""
    changes = data.model_dump(exclude_unset=True)
    hashtags = changes.pop("hashtags", None)

    starts_at = changes.get("starts_at", community.starts_at)
    ends_at = changes.get("ends_at", community.ends_at)
    recruiting_starts_at = changes.get("recruiting_starts_at", community.recruiting_starts_at)
    recruiting_ends_at = changes.get("recruiting_ends_at", community.recruiting_ends_at)
    try:
        validate_date_range(starts_at, ends_at, label="커뮤 기간")
        validate_date_range(recruiting_starts_at, recruiting_ends_at, label="모집 기간")
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc

    if "custom_domain" in changes:
        domain = changes["custom_domain"]
        changes["custom_domain"] = domain.lower() if domain else None
        _ensure_unique_domain(db, changes["custom_domain"], community.id)
    if changes.get("banner_image_id"):
        require_images(db, [changes["banner_image_id"]])

    for key, value in changes.items():
        setattr(community, key, value)
    if hashtags is not None:
        # Flush the removals first so re-added tags do not trip the unique constraint.
        community.hashtags.clear()
        db.flush()
        community.hashtags.extend(CommunityHashtag(tag=tag) for tag in hashtags)

    db.commit()
    db.refresh(community)
    logger.info("Updated community %s", community.id)
    return community


def delete_community(db: Session, community: Community) -> None:
    """Soft-delete the community and everything posted in it."""
    now = utcnow()
    community.deleted_at = now

    board_ids = [
        board_id
        for (board_id,) in db.query(Board.id).filter(Board.community_id == community.id).all()
    ]
    if board_ids:
        post_ids = [
            post_id
            for (post_id,) in db.query(BoardPost.id).filter(BoardPost.board_id.in_(board_ids)).all()
        ]
        if post_ids:
            (
                db.query(BoardPostReply)
                .filter(
                    BoardPostReply.board_post_id.in_(post_ids),
                    BoardPostReply.deleted_at.is_(None),
                )
                .update({BoardPostReply.deleted_at: now}, synchronize_session=False)
            )
            (
                db.query(BoardPost)
                .filter(BoardPost.id.in_(post_ids), BoardPost.deleted_at.is_(None))
                .update({BoardPost.deleted_at: now}, synchronize_session=False)
            )
        (
            db.query(Board)
            .filter(Board.id.in_(board_ids), Board.deleted_at.is_(None))
            .update({Board.deleted_at: now}, synchronize_session=False)
        )
    (
        db.query(Post)
        .filter(Post.community_id == community.id, Post.deleted_at.is_(None))
        .update({Post.deleted_at: now}, synchronize_session=False)
    )
    db.commit()
    logger.info("Deleted community %s", community.id)


def list_user_communities(db: Session, user: User) -> list[tuple[Community, str]]:
    """Return ``(community, role)`` for every live community the user belongs to."""
    rows = (
        db.query(Community, Membership.role)
        .join(Membership, Membership.community_id == Community.id)
        .filter(
            Membership.user_id == user.id,
            Membership.activated_at.is_not(None),
            Community.deleted_at.is_(None),
        )
        .order_by(Community.created_at.desc())
        .all()
    )
    return [(community, role) for community, role in rows]


def list_recruiting_communities(db: Session) -> list[Community]:
    now = utcnow()
    candidates = (
        db.query(Community)
        .filter(
            Community.deleted_at.is_(None),
            Community.is_recruiting.is_(True),
            or_(Community.recruiting_ends_at.is_(None), Community.recruiting_ends_at >= now),
        )
        .order_by(Community.created_at.desc())
        .all()
    )
    return [community for community in candidates if is_recruiting_now(community, now)]


def list_links(db: Session, community: Community) -> list[CommunityLink]:
    return (
        db.query(CommunityLink)
        .filter(CommunityLink.community_id == community.id, CommunityLink.deleted_at.is_(None))
        .order_by(CommunityLink.created_at.desc(), CommunityLink.id.desc())
        .all()
    )


def _require_link(db: Session, community: Community, link_id: str) -> CommunityLink:
    link = (
        db.query(CommunityLink)
        .filter(
            CommunityLink.id == link_id,
            CommunityLink.community_id == community.id,
            CommunityLink.deleted_at.is_(None),
        )
        .first()
    )
    if link is None:
        raise NotFound("링크를 찾을 수 없습니다")
    return link


def create_link(db: Session, community: Community, data: CommunityLinkCreate) -> CommunityLink:
    link = CommunityLink(community_id=community.id, title=data.title, url=str(data.url))
    db.add(link)
    db.commit()
    db.refresh(link)
    logger.info("Added link %s to community %s", link.id, community.id)
    return link


def update_link(
    db: Session,
    community: Community,
    link_id: str,
    data: CommunityLinkCreate,
) -> CommunityLink:
    link = _require_link(db, community, link_id)
    link.title = data.title
    link.url = str(data.url)
    db.commit()
    db.refresh(link)
    return link


def delete_link(db: Session, community: Community, link_id: str) -> None:
    link = _require_link(db, community, link_id)
    link.deleted_at = utcnow()
    db.commit()


def community_stats(db: Session, community: Community) -> dict[str, Any]:
    """Count applications by status and active members for the staff dashboard."""
    applications = {
        APPLICATION_PENDING: 0,
        APPLICATION_APPROVED: 0,
        APPLICATION_REJECTED: 0,
    }
    rows = (
        db.query(CommunityApplication.status, func.count(CommunityApplication.id))
        .filter(CommunityApplication.community_id == community.id)
        .group_by(CommunityApplication.status)
        .all()
    )
    for status_name, count in rows:
        applications[status_name] = count
    members = (
        db.query(func.count(Membership.id))
        .filter(
            Membership.community_id == community.id,
            Membership.activated_at.is_not(None),
        )
        .scalar()
    )
    return {
        "community": community,
        "applications": {**applications, "total": sum(applications.values())},
        "members": {"total": members or 0},
    }
