"""CRUD-style helpers for per-community profiles."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.orm import Session

from commung.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from commung.db.time import utcnow
from commung.models import Community, Profile, User
from commung.schemas.profile import ProfileCreate, ProfileUpdate
from commung.services.image_service import require_images

logger = logging.getLogger(__name__)

__all__ = [
    "profile_summary",
    "is_username_taken",
    "create_profile",
    "get_acting_profile",
    "get_profile_in_community",
    "list_user_profiles",
    "list_profiles",
    "get_profile_by_username",
    "add_profile",
    "update_profile",
    "delete_profile",
    "set_primary_profile",
    "deactivate_user_profiles",
    "reactivate_user_profiles",
]


def profile_summary(profile: Profile | None) -> dict[str, Any] | None:
    """Return the compact profile shape embedded in other payloads."""
    if profile is None:
        return None
    return {
        "id": profile.id,
        "name": profile.name,
        "username": profile.username,
        "profile_picture_url": profile.picture_url,
    }


def is_username_taken(
    db: Session,
    community_id: str,
    username: str,
    exclude_id: str | None = None,
) -> bool:
    query = db.query(Profile).filter(
        Profile.community_id == community_id,
        Profile.username == username,
        Profile.deleted_at.is_(None),
    )
    if exclude_id is not None:
        query = query.filter(Profile.id != exclude_id)
    return query.first() is not None


def create_profile(
    db: Session,
    *,
    community_id: str,
    user_id: str,
    name: str,
    username: str,
    is_primary: bool = False,
    muted: bool = False,
    is_bot: bool = False,
    bio: str | None = None,
    picture_image_id: str | None = None,
) -> Profile:
    """Insert an activated profile; the caller commits.

    Raises:
        Conflict: If the username is already used in the community.
    """
    if is_username_taken(db, community_id, username):
        raise Conflict("이미 사용 중인 사용자명입니다")
    now = utcnow()
    profile = Profile(
        community_id=community_id,
        user_id=user_id,
        name=name,
        username=username,
        bio=bio,
        picture_image_id=picture_image_id,
        is_primary=is_primary,
        is_bot=is_bot,
        activated_at=now,
        muted_at=now if muted else None,
    )
    db.add(profile)
    db.flush()
    return profile


def get_profile_in_community(db: Session, community: Community, profile_id: str) -> Profile:
    """Return a live profile of ``community`` or raise 404."""
    profile = (
        db.query(Profile)
        .filter(
            Profile.id == profile_id,
            Profile.community_id == community.id,
            Profile.deleted_at.is_(None),
            Profile.activated_at.is_not(None),
        )
        .first()
    )
    if profile is None:
        raise NotFound("프로필을 찾을 수 없습니다")
    return profile


def get_acting_profile(db: Session, user: User, community: Community, profile_id: str) -> Profile:
    """Return the profile the caller acts as, verifying ownership and community."""
    profile = db.get(Profile, profile_id)
    if (
        profile is None
        or profile.user_id != user.id
        or profile.community_id != community.id
        or profile.deleted_at is not None
        or profile.activated_at is None
        or profile.is_bot
    ):
        raise Forbidden("프로필에 접근할 권한이 없습니다")
    return profile


def list_user_profiles(db: Session, user: User, community: Community) -> Sequence[Profile]:
    """Return the caller's profiles in ``community``, primary first."""
    return (
        db.query(Profile)
        .filter(
            Profile.user_id == user.id,
            Profile.community_id == community.id,
            Profile.deleted_at.is_(None),
            Profile.activated_at.is_not(None),
            Profile.is_bot.is_(False),
        )
        .order_by(Profile.is_primary.desc(), Profile.created_at)
        .all()
    )


def list_profiles(
    db: Session,
    community: Community,
    limit: int,
    offset: int,
) -> tuple[Sequence[Profile], int]:
    query = db.query(Profile).filter(
        Profile.community_id == community.id,
        Profile.deleted_at.is_(None),
        Profile.activated_at.is_not(None),
    )
    total = query.count()
    profiles = query.order_by(Profile.username).offset(offset).limit(limit).all()
    return profiles, total


def get_profile_by_username(db: Session, community: Community, username: str) -> Profile:
    profile = (
        db.query(Profile)
        .filter(
            Profile.community_id == community.id,
            Profile.username == username,
            Profile.deleted_at.is_(None),
            Profile.activated_at.is_not(None),
        )
        .first()
    )
    if profile is None:
        raise NotFound("프로필을 찾을 수 없습니다")
    return profile


def add_profile(db: Session, user: User, community: Community, data: ProfileCreate) -> Profile:
    """Create an additional profile for an existing member."""
    if data.picture_image_id:
        require_images(db, [data.picture_image_id])
    has_primary = any(profile.is_primary for profile in list_user_profiles(db, user, community))
    muted = community.mute_new_members
    profile = create_profile(
        db,
        community_id=community.id,
        user_id=user.id,
        name=data.name,
        username=data.username,
        bio=data.bio,
        picture_image_id=data.picture_image_id,
        is_primary=not has_primary,
        muted=muted,
    )
    db.commit()
    db.refresh(profile)
    return profile


def update_profile(db: Session, profile: Profile, data: ProfileUpdate) -> Profile:
    """Apply partial updates to an existing profile."""
    update_dict = data.model_dump(exclude_unset=True)
    username = update_dict.get("username")
    if username and is_username_taken(db, profile.community_id, username, exclude_id=profile.id):
        raise Conflict("이미 사용 중인 사용자명입니다")
    if update_dict.get("picture_image_id"):
        require_images(db, [update_dict["picture_image_id"]])
    for key, value in update_dict.items():
        if key in {"name", "username"} and value is None:
            continue
        setattr(profile, key, value)

    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def delete_profile(db: Session, profile: Profile) -> None:
    """Soft-delete a secondary profile; the primary one must stay."""
    if profile.is_primary:
        raise BadRequest("기본 프로필은 삭제할 수 없습니다")
    profile.deleted_at = utcnow()
    db.commit()


def set_primary_profile(db: Session, user: User, community: Community, profile: Profile) -> Profile:
    for other in list_user_profiles(db, user, community):
        other.is_primary = other.id == profile.id
    db.commit()
    db.refresh(profile)
    return profile


def deactivate_user_profiles(db: Session, user_id: str, community_id: str) -> None:
    """Deactivate every profile a user holds in a community (leave or removal)."""
    (
        db.query(Profile)
        .filter(
            Profile.user_id == user_id,
            Profile.community_id == community_id,
            Profile.activated_at.is_not(None),
        )
        .update({Profile.activated_at: None}, synchronize_session=False)
    )
    logger.info("Deactivated profiles of user %s in community %s", user_id, community_id)


def reactivate_user_profiles(db: Session, user_id: str, community_id: str) -> list[Profile]:
    """Reactivate a returning member's non-deleted profiles and return them."""
    profiles = (
        db.query(Profile)
        .filter(
            Profile.user_id == user_id,
            Profile.community_id == community_id,
            Profile.deleted_at.is_(None),
        )
        .all()
    )
    now = utcnow()
    for profile in profiles:
        if profile.activated_at is None:
            profile.activated_at = now
    logger.info("Reactivated %d profiles of user %s in community %s", len(profiles), user_id, community_id)
    return profiles
