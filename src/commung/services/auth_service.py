"""Console account management: signup, login sessions and password changes."""

from __future__ import annotations

import logging

from jose import JWTError
from sqlalchemy.orm import Session

from commung.core import security
from commung.core.exceptions import BadRequest, Conflict, Unauthorized
from commung.db.time import utcnow
from commung.models import Community, User, UserSession
from commung.schemas.user import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

__all__ = [
    "signup",
    "login",
    "resolve_session",
    "logout",
    "change_password",
    "delete_account",
]


def signup(db: Session, data: SignupRequest) -> User:
    """Create an account with an argon2id password hash."""
    login_name = data.login_name.strip()
    if not login_name:
        raise BadRequest("아이디를 입력해주세요")
    existing = (
        db.query(User)
        .filter(User.login_name == login_name)
        .first()
    )
    if existing is not None:
        raise Conflict("이미 사용 중인 아이디입니다")
    if data.email:
        email_owner = db.query(User).filter(User.email == data.email).first()
        if email_owner is not None:
            raise Conflict("이미 사용 중인 이메일입니다")

    user = User(
        login_name=login_name,
        email=data.email or None,
        password_hash=security.hash_password(data.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created account %s", user.id)
    return user


def login(db: Session, data: LoginRequest) -> tuple[str, UserSession, User]:
    """Verify credentials and open a session; returns ``(token, session, user)``."""
    user = (
        db.query(User)
        .filter(User.login_name == data.login_name.strip(), User.deleted_at.is_(None))
        .first()
    )
    if user is None or not security.verify_password(user.password_hash, data.password):
        raise Unauthorized("아이디 또는 비밀번호가 올바르지 않습니다")

    if data.community_id is not None:
        community = db.get(Community, data.community_id)
        if community is None or community.deleted_at is not None:
            raise BadRequest("커뮤를 찾을 수 없습니다")

    now = utcnow()
    session = UserSession(
        user_id=user.id,
        community_id=data.community_id,
        created_at=now,
        expires_at=security.session_expiry(now),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    token = security.create_session_token(user.id, session.id, session.expires_at)
    logger.info("Opened session %s for user %s", session.id, user.id)
    return token, session, user


def resolve_session(db: Session, token: str) -> tuple[User, UserSession]:
    """Return the user and live session behind a bearer token.

    Raises:
        Unauthorized: If the token is malformed, expired, revoked or its user is gone.
    """
    try:
        payload = security.decode_session_token(token)
    except JWTError as err:
        raise Unauthorized("인증 정보가 유효하지 않습니다") from err

    session_id = payload.get("sid")
    user_id = payload.get("sub")
    if not session_id or not user_id:
        raise Unauthorized("인증 정보가 유효하지 않습니다")

    session = db.get(UserSession, session_id)
    if (
        session is None
        or session.user_id != user_id
        or session.revoked_at is not None
        or session.expires_at <= utcnow()
    ):
        raise Unauthorized("세션이 만료되었습니다. 다시 로그인해주세요")

    user = db.get(User, user_id)
    if user is None or user.deleted_at is not None:
        raise Unauthorized("사용자를 찾을 수 없습니다")
    return user, session


def logout(db: Session, session: UserSession) -> None:
    session.revoked_at = utcnow()
    db.commit()


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not security.verify_password(user.password_hash, current_password):
        raise BadRequest("현재 비밀번호가 올바르지 않습니다")
    user.password_hash = security.hash_password(new_password)
    db.commit()
    logger.info("Password changed for user %s", user.id)


def delete_account(db: Session, user: User) -> None:
    """Soft-delete the account and revoke every open session."""
    now = utcnow()
    user.deleted_at = now
    (
        db.query(UserSession)
        .filter(UserSession.user_id == user.id, UserSession.revoked_at.is_(None))
        .update({UserSession.revoked_at: now}, synchronize_session=False)
    )
    db.commit()
    logger.info("Deleted account %s", user.id)
