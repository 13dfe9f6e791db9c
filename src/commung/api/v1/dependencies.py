"""Shared API dependencies for authentication, tenant resolution and acting profiles."""

from typing import Annotated

from fastapi import Depends, Header, Path, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from commung.core.exceptions import Forbidden, Unauthorized
from commung.db.session import get_db
from commung.models import Bot, Community, Membership, Profile, User, UserSession
from commung.services import auth_service, bot_service, community_service, profile_service
from commung.services.membership_service import require_membership

# Missing credentials are reported by us as 401 with the usual error body
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    return credentials.credentials


def get_current_session(credentials: CredentialsDep, db: SessionDep) -> tuple[User, UserSession]:
    """Resolve the bearer session token to its user and session row.

    Raises:
        Unauthorized: If the token is missing or invalid, or the session is no longer live.
    """
    return auth_service.resolve_session(db, _bearer_token(credentials))


CurrentAuthDep = Annotated[tuple[User, UserSession], Depends(get_current_session)]


def get_current_user(auth: CurrentAuthDep) -> User:
    return auth[0]


def get_current_user_session(auth: CurrentAuthDep) -> UserSession:
    return auth[1]


CurrentUserDep = Annotated[User, Depends(get_current_user)]
CurrentSessionDep = Annotated[UserSession, Depends(get_current_user_session)]


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------


def get_console_community(
    db: SessionDep,
    slug: Annotated[str, Path(description="Community slug")],
) -> Community:
    return community_service.require_community_by_slug(db, slug)


ConsoleCommunityDep = Annotated[Community, Depends(get_console_community)]


# ---------------------------------------------------------------------------
# App (tenant) surface
# ---------------------------------------------------------------------------


def get_host_community(
    db: SessionDep,
    origin: Annotated[str | None, Header()] = None,
    host: Annotated[str | None, Header()] = None,
) -> Community:
    """Resolve the tenant from the ``Origin`` header, falling back to ``Host``."""
    return community_service.resolve_community_from_host(db, origin, host)


HostCommunityDep = Annotated[Community, Depends(get_host_community)]


def get_app_community(community: HostCommunityDep, session: CurrentSessionDep) -> Community:
    """Return the request's community, rejecting sessions scoped to another one."""
    if session.community_id is not None and session.community_id != community.id:
        raise Forbidden("이 세션은 다른 커뮤를 위한 세션입니다")
    return community


CommunityDep = Annotated[Community, Depends(get_app_community)]


def get_app_membership(db: SessionDep, user: CurrentUserDep, community: CommunityDep) -> Membership:
    return require_membership(db, user, community)


MembershipDep = Annotated[Membership, Depends(get_app_membership)]


def get_acting_profile(
    db: SessionDep,
    user: CurrentUserDep,
    community: CommunityDep,
    membership: MembershipDep,
    profile_id: Annotated[str, Query(description="The profile the caller acts as")],
) -> Profile:
    """Return the caller's acting profile for this request."""
    return profile_service.get_acting_profile(db, user, community, profile_id)


ActingProfileDep = Annotated[Profile, Depends(get_acting_profile)]


# ---------------------------------------------------------------------------
# Bot API
# ---------------------------------------------------------------------------


def get_bot_context(
    credentials: CredentialsDep,
    db: SessionDep,
    community_id: Annotated[str, Path(description="Community ID")],
) -> tuple[Bot, Profile, Community]:
    """Authenticate a bot token and check it belongs to the path community."""
    bot, profile, community = bot_service.authenticate_token(db, _bearer_token(credentials))
    if community.id != community_id:
        raise Forbidden("이 봇은 해당 커뮤에 접근할 수 없습니다")
    return bot, profile, community


BotContextDep = Annotated[tuple[Bot, Profile, Community], Depends(get_bot_context)]
