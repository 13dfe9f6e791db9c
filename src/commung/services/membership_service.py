"""Memberships, role changes and the join-application workflow."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy.orm import Session

from commung.core.constants import (
    APPLICATION_APPROVED,
    APPLICATION_PENDING,
    APPLICATION_REJECTED,
    ROLE_MEMBER,
    ROLE_MODERATOR,
    ROLE_OWNER,
)
from commung.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from commung.db.time import utcnow
from commung.models import Community, CommunityApplication, Membership, Profile, User
from commung.schemas.membership import ApplicationCreate, ApplicationUpdate
from commung.services import community_service, permissions, profile_service

logger = logging.getLogger(__name__)


def get_membership(db: Session, user_id: str, community_id: str) -> Membership | None:
    """Return the active membership of ``user_id`` in ``community_id``, if any."""
    return (
        db.query(Membership)
        .filter(
            Membership.user_id == user_id,
            Membership.community_id == community_id,
            Membership.activated_at.is_not(None),
        )
        .first()
    )


def require_membership(db: Session, user: User, community: Community) -> Membership:
    membership = get_membership(db, user.id, community.id)
    if membership is None:
        raise Forbidden("이 커뮤의 멤버가 아닙니다")
    return membership


def require_staff(db: Session, user: User, community: Community) -> Membership:
    """Return the caller's membership if it is owner or moderator."""
    membership = require_membership(db, user, community)
    permissions.require_role(membership.role, (ROLE_OWNER, ROLE_MODERATOR))
    return membership


def require_owner(db: Session, user: User, community: Community) -> Membership:
    membership = require_membership(db, user, community)
    permissions.require_role(membership.role, (ROLE_OWNER,))
    return membership


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


def list_members(
    db: Session,
    community: Community,
    actor_role: str,
    limit: int,
    offset: int,
) -> tuple[list[dict[str, Any]], int]:
    """Return member rows for staff views together with the total count."""
    query = (
        db.query(Membership, User)
        .join(User, User.id == Membership.user_id)
        .filter(
            Membership.community_id == community.id,
            Membership.activated_at.is_not(None),
        )
    )
    total = query.count()
    rows = query.order_by(Membership.created_at, Membership.id).offset(offset).limit(limit).all()

    user_ids = [user.id for _, user in rows]
    profiles_by_user: dict[str, list[dict[str, Any]]] = {user_id: [] for user_id in user_ids}
    if user_ids:
        profiles = (
            db.query(Profile)
            .filter(
                Profile.community_id == community.id,
                Profile.user_id.in_(user_ids),
                Profile.deleted_at.is_(None),
                Profile.activated_at.is_not(None),
            )
            .order_by(Profile.is_primary.desc(), Profile.created_at)
            .all()
        )
        for profile in profiles:
            summary = profile_service.profile_summary(profile)
            summary["is_primary"] = profile.is_primary
            profiles_by_user[profile.user_id].append(summary)

    members = [
        {
            "id": membership.id,
            "user_id": user.id,
            "login_name": user.login_name,
            "role": membership.role,
            "created_at": membership.created_at,
            "profiles": profiles_by_user.get(user.id, []),
            "assignable_roles": permissions.assignable_roles(actor_role, membership.role),
        }
        for membership, user in rows
    ]
    return members, total


def _require_member_row(db: Session, community: Community, membership_id: str) -> Membership:
    membership = (
        db.query(Membership)
        .filter(
            Membership.id == membership_id,
            Membership.community_id == community.id,
            Membership.activated_at.is_not(None),
        )
        .first()
    )
    if membership is None:
        raise NotFound("멤버를 찾을 수 없습니다")
    return membership


def update_role(
    db: Session,
    community: Community,
    actor: Membership,
    membership_id: str,
    new_role: str,
) -> Membership:
    """Change a member's role; assigning ``owner`` transfers ownership.

    Raises:
        BadRequest: If the target is the owner.
        Forbidden: If the caller may not assign ``new_role``.
    """
    target = _require_member_row(db, community, membership_id)
    if target.role == ROLE_OWNER:
        raise BadRequest("소유자의 역할을 변경할 수 없습니다. 소유권을 먼저 이전하세요")
    if not permissions.can_change_role(actor.role, target.role, new_role):
        raise Forbidden("이 역할을 지정할 권한이 없습니다")

    if new_role == ROLE_OWNER:
        actor.role = ROLE_MODERATOR
        community.owner_id = target.user_id
    target.role = new_role
    db.commit()
    db.refresh(target)
    logger.info(
        "Role of membership %s in %s changed to %s by %s",
        target.id,
        community.id,
        new_role,
        actor.user_id,
    )
    return target


def remove_member(db: Session, community: Community, membership_id: str) -> None:
    """Deactivate a membership together with the member's profiles."""
    target = _require_member_row(db, community, membership_id)
    if target.role == ROLE_OWNER:
        raise BadRequest("소유자는 제거할 수 없습니다")
    target.activated_at = None
    profile_service.deactivate_user_profiles(db, target.user_id, community.id)
    db.commit()
    logger.info("Removed membership %s from community %s", target.id, community.id)


def leave_community(db: Session, user: User, community: Community) -> None:
    membership = require_membership(db, user, community)
    if membership.role == ROLE_OWNER:
        raise BadRequest("소유자는 커뮤를 떠날 수 없습니다. 소유권을 먼저 이전하세요")
    membership.activated_at = None
    profile_service.deactivate_user_profiles(db, user.id, community.id)
    db.commit()
    logger.info("User %s left community %s", user.id, community.id)


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


def _require_pending(application: CommunityApplication) -> None:
    if application.status != APPLICATION_PENDING:
        raise BadRequest("지원서가 대기 중이 아닙니다")


def apply(
    db: Session,
    user: User,
    community: Community,
    data: ApplicationCreate,
) -> CommunityApplication:
    """Submit a join application while the community is recruiting."""
    if not community_service.is_recruiting_now(community):
        raise BadRequest("현재 모집 중인 커뮤가 아닙니다")
    if get_membership(db, user.id, community.id) is not None:
        raise Conflict("이미 이 커뮤의 멤버입니다")
    pending = (
        db.query(CommunityApplication)
        .filter(
            CommunityApplication.user_id == user.id,
            CommunityApplication.community_id == community.id,
            CommunityApplication.status == APPLICATION_PENDING,
        )
        .first()
    )
    if pending is not None:
        raise Conflict("이미 대기 중인 지원서가 있습니다")

    application = CommunityApplication(
        user_id=user.id,
        community_id=community.id,
        profile_name=data.profile_name,
        profile_username=data.profile_username,
        message=data.message,
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("User %s applied to community %s", user.id, community.id)
    return application


def get_application(db: Session, community: Community, application_id: str) -> CommunityApplication:
    application = (
        db.query(CommunityApplication)
        .filter(
            CommunityApplication.id == application_id,
            CommunityApplication.community_id == community.id,
        )
        .first()
    )
    if application is None:
        raise NotFound("지원서를 찾을 수 없습니다")
    return application


def get_own_application(
    db: Session,
    user: User,
    community: Community,
    application_id: str,
) -> CommunityApplication:
    application = get_application(db, community, application_id)
    if application.user_id != user.id:
        raise NotFound("지원서를 찾을 수 없습니다")
    return application


def update_application(
    db: Session,
    application: CommunityApplication,
    data: ApplicationUpdate,
) -> CommunityApplication:
    _require_pending(application)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key != "message":
            continue
        setattr(application, key, value)
    db.commit()
    db.refresh(application)
    return application


def withdraw_application(db: Session, application: CommunityApplication) -> None:
    _require_pending(application)
    db.delete(application)
    db.commit()


def list_applications(
    db: Session,
    community: Community,
    status_filter: str | None = None,
) -> Sequence[CommunityApplication]:
    query = db.query(CommunityApplication).filter(
        CommunityApplication.community_id == community.id
    )
    if status_filter:
        query = query.filter(CommunityApplication.status == status_filter)
    return query.order_by(CommunityApplication.created_at.desc()).all()


def list_my_applications(db: Session, user: User) -> Sequence[CommunityApplication]:
    return (
        db.query(CommunityApplication)
        .filter(CommunityApplication.user_id == user.id)
        .order_by(CommunityApplication.created_at.desc())
        .all()
    )


def approve_application(
    db: Session,
    community: Community,
    reviewer: User,
    application: CommunityApplication,
) -> CommunityApplication:
    """Approve a pending application and give the applicant a membership and profile.

    Raises:
        BadRequest: If the application is no longer pending.
        Conflict: If the requested username was taken in the meantime.
    """
    _require_pending(application)
    now = utcnow()

    membership = (
        db.query(Membership)
        .filter(
            Membership.user_id == application.user_id,
            Membership.community_id == community.id,
        )
        .first()
    )
    has_primary = False
    if membership is None:
        membership = Membership(
            user_id=application.user_id,
            community_id=community.id,
            role=ROLE_MEMBER,
        )
        db.add(membership)
    else:
        # Returning member: bring back the profiles they had before leaving
        restored = profile_service.reactivate_user_profiles(
            db, application.user_id, community.id
        )
        has_primary = any(profile.is_primary and not profile.is_bot for profile in restored)
    membership.role = ROLE_MEMBER
    membership.activated_at = now
    membership.application_id = application.id

    profile_service.create_profile(
        db,
        community_id=community.id,
        user_id=application.user_id,
        name=application.profile_name,
        username=application.profile_username,
        is_primary=not has_primary,
        muted=community.mute_new_members,
    )

    application.status = APPLICATION_APPROVED
    application.reviewed_by_id = reviewer.id
    application.reviewed_at = now
    db.commit()
    db.refresh(application)
    logger.info("Application %s approved by %s", application.id, reviewer.id)
    return application


def reject_application(
    db: Session,
    reviewer: User,
    application: CommunityApplication,
    reason: str | None,
) -> CommunityApplication:
    _require_pending(application)
    application.status = APPLICATION_REJECTED
    application.rejection_reason = reason
    application.reviewed_by_id = reviewer.id
    application.reviewed_at = utcnow()
    db.commit()
    db.refresh(application)
    logger.info("Application %s rejected by %s", application.id, reviewer.id)
    return application
