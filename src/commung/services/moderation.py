# src/commung/services/moderation.py
"""Moderation services for Commung."""

import logging

from sqlalchemy.orm import Session

from commung.core.constants import (
    MODERATION_DELETE_POST,
    MODERATION_MUTE_PROFILE,
    MODERATION_UNMUTE_PROFILE,
    ROLE_MODERATOR,
    ROLE_OWNER,
)
from commung.core.exceptions import BadRequest, Conflict, Forbidden
from commung.db.time import utcnow
from commung.models import Community, ModerationLog, Post, Profile
from commung.services import pagination, permissions, post_service, profile_service

logger = logging.getLogger(__name__)

POST_PREVIEW_LENGTH = 50


class ModerationService:
    """Staff actions on profiles and posts, each recorded in the moderation log."""

    @staticmethod
    def _log(
        db: Session,
        community: Community,
        moderator: Profile,
        action: str,
        description: str,
        *,
        target_profile: Profile | None = None,
        target_post: Post | None = None,
    ) -> ModerationLog:
        entry = ModerationLog(
            community_id=community.id,
            action=action,
            description=description,
            moderator_id=moderator.id,
            target_user_id=target_profile.user_id if target_profile is not None else None,
            target_profile_id=target_profile.id if target_profile is not None else None,
            target_post_id=target_post.id if target_post is not None else None,
        )
        db.add(entry)
        return entry

    @staticmethod
    def mute_profile(
        db: Session,
        community: Community,
        moderator: Profile,
        role: str | None,
        target_profile_id: str,
        reason: str | None = None,
    ) -> Profile:
        """Mute a profile so it can no longer post.

        Raises:
            Forbidden: If the caller is not staff.
            Conflict: If the profile is already muted.
            BadRequest: If the moderator tries to mute their own profile.
        """
        permissions.require_role(role, (ROLE_OWNER, ROLE_MODERATOR))
        target = profile_service.get_profile_in_community(db, community, target_profile_id)
        if target.is_muted:
            raise Conflict("프로필이 이미 음소거되었습니다")
        if target.id == moderator.id:
            raise BadRequest("자신의 프로필을 음소거할 수 없습니다")

        target.muted_at = utcnow()
        target.muted_by_id = moderator.id
        ModerationService._log(
            db,
            community,
            moderator,
            MODERATION_MUTE_PROFILE,
            reason or f"@{target.username}의 프로필을 음소거했습니다",
            target_profile=target,
        )
        db.commit()
        db.refresh(target)
        logger.info("Profile %s muted by %s in %s", target.id, moderator.id, community.id)
        return target

    @staticmethod
    def unmute_profile(
        db: Session,
        community: Community,
        moderator: Profile,
        role: str | None,
        target_profile_id: str,
    ) -> Profile:
        permissions.require_role(role, (ROLE_OWNER, ROLE_MODERATOR))
        target = profile_service.get_profile_in_community(db, community, target_profile_id)
        if not target.is_muted:
            raise BadRequest("프로필이 음소거되지 않았습니다")

        target.muted_at = None
        target.muted_by_id = None
        ModerationService._log(
            db,
            community,
            moderator,
            MODERATION_UNMUTE_PROFILE,
            f"@{target.username}의 프로필 음소거를 해제했습니다",
            target_profile=target,
        )
        db.commit()
        db.refresh(target)
        logger.info("Profile %s unmuted by %s in %s", target.id, moderator.id, community.id)
        return target

    @staticmethod
    def delete_post(
        db: Session,
        community: Community,
        moderator: Profile,
        role: str | None,
        post: Post,
        reason: str | None = None,
    ) -> None:
        """Remove someone else's post and log it."""
        if not permissions.is_moderator(role):
            raise Forbidden("게시물 작성자, 소유자 또는 모더레이터만 게시물을 삭제할 수 있습니다")

        preview = post.content[:POST_PREVIEW_LENGTH]
        if len(post.content) > POST_PREVIEW_LENGTH:
            preview += "..."
        post_service.soft_delete_post(post)
        ModerationService._log(
            db,
            community,
            moderator,
            MODERATION_DELETE_POST,
            reason or f'@{post.author.username}의 게시물을 삭제했습니다: "{preview}"',
            target_profile=post.author,
            target_post=post,
        )
        db.commit()
        logger.info("Post %s removed by moderator %s", post.id, moderator.id)

    @staticmethod
    def list_logs(
        db: Session,
        community: Community,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[ModerationLog], str | None, bool]:
        query = db.query(ModerationLog).filter(ModerationLog.community_id == community.id)
        query = pagination.apply_cursor(query, ModerationLog, db, cursor)
        rows = pagination.newest_first(query, ModerationLog).limit(limit + 1).all()
        return pagination.cursor_page(rows, limit)
