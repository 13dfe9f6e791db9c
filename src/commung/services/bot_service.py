"""Community bots and their API tokens.

Bot tokens are shown to the owner once, when they are issued. Only their
BLAKE3 digest is stored, so a lookup hashes the presented token and
compares digests.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from commung.core import security
from commung.core.exceptions import NotFound, Unauthorized
from commung.db.time import utcnow
from commung.models import Bot, BotToken, Community, Profile, User
from commung.schemas.bot import BotCreate, BotTokenCreate, BotUpdate
from commung.services import profile_service

logger = logging.getLogger(__name__)

TOKEN_HINT_LENGTH = 4


def serialize_bot(bot: Bot) -> dict[str, Any]:
    return {
        "id": bot.id,
        "community_id": bot.community_id,
        "profile_id": bot.profile_id,
        "profile_name": bot.profile.name,
        "profile_username": bot.profile.username,
        "name": bot.name,
        "description": bot.description,
        "created_by_id": bot.created_by_id,
        "created_at": bot.created_at,
    }


def create_bot(db: Session, community: Community, owner: User, data: BotCreate) -> Bot:
    """Create a bot together with the profile it posts as."""
    profile = profile_service.create_profile(
        db,
        community_id=community.id,
        user_id=owner.id,
        name=data.profile_name,
        username=data.profile_username,
        is_bot=True,
    )
    bot = Bot(
        community_id=community.id,
        profile_id=profile.id,
        name=data.name,
        description=data.description,
        created_by_id=owner.id,
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    logger.info("Created bot %s in community %s", bot.id, community.id)
    return bot


def list_bots(db: Session, community: Community) -> list[Bot]:
    return (
        db.query(Bot)
        .filter(Bot.community_id == community.id, Bot.deleted_at.is_(None))
        .order_by(Bot.created_at.desc())
        .all()
    )


def get_bot(db: Session, community: Community, bot_id: str) -> Bot:
    bot = (
        db.query(Bot)
        .filter(Bot.id == bot_id, Bot.community_id == community.id, Bot.deleted_at.is_(None))
        .first()
    )
    if bot is None:
        raise NotFound("봇을 찾을 수 없습니다")
    return bot


def update_bot(db: Session, bot: Bot, data: BotUpdate) -> Bot:
    bot.name = data.name
    bot.description = data.description
    db.commit()
    db.refresh(bot)
    return bot


def delete_bot(db: Session, bot: Bot) -> None:
    """Soft-delete the bot and revoke every token it still has."""
    now = utcnow()
    bot.deleted_at = now
    (
        db.query(BotToken)
        .filter(BotToken.bot_id == bot.id, BotToken.revoked_at.is_(None))
        .update({BotToken.revoked_at: now}, synchronize_session=False)
    )
    db.commit()
    logger.info("Deleted bot %s and revoked its tokens", bot.id)


def issue_token(db: Session, bot: Bot, data: BotTokenCreate) -> tuple[BotToken, str]:
    """Create a token; returns the row and the plaintext secret, which is not stored."""
    secret = security.generate_bot_token()
    token = BotToken(
        bot_id=bot.id,
        name=data.name,
        token_digest=security.token_digest(secret),
        token_hint=secret[-TOKEN_HINT_LENGTH:],
        expires_at=data.expires_at,
    )
    db.add(token)
    db.commit()
    db.refresh(token)
    logger.info("Issued token %s for bot %s", token.id, bot.id)
    return token, secret


def list_tokens(db: Session, bot: Bot) -> list[BotToken]:
    return (
        db.query(BotToken)
        .filter(BotToken.bot_id == bot.id)
        .order_by(BotToken.created_at.desc())
        .all()
    )


def revoke_token(db: Session, bot: Bot, token_id: str) -> BotToken:
    token = (
        db.query(BotToken)
        .filter(BotToken.id == token_id, BotToken.bot_id == bot.id)
        .first()
    )
    if token is None:
        raise NotFound("토큰을 찾을 수 없습니다")
    if token.revoked_at is None:
        token.revoked_at = utcnow()
        db.commit()
        db.refresh(token)
        logger.info("Revoked token %s of bot %s", token.id, bot.id)
    return token


def authenticate_token(db: Session, secret: str) -> tuple[Bot, Profile, Community]:
    """Resolve a presented bot token to its bot, profile and community.

    Raises:
        Unauthorized: If the token is unknown, revoked or expired, or its bot is deleted.
    """
    now = utcnow()
    token = (
        db.query(BotToken)
        .filter(BotToken.token_digest == security.token_digest(secret))
        .first()
    )
    if (
        token is None
        or token.revoked_at is not None
        or (token.expires_at is not None and token.expires_at <= now)
    ):
        raise Unauthorized("유효하지 않거나 만료된 봇 토큰입니다")

    bot = db.get(Bot, token.bot_id)
    if bot is None or bot.deleted_at is not None:
        raise Unauthorized("유효하지 않거나 만료된 봇 토큰입니다")
    community = db.get(Community, bot.community_id)
    if community is None or community.deleted_at is not None:
        raise NotFound("커뮤를 찾을 수 없습니다")

    token.last_used_at = now
    db.commit()
    return bot, bot.profile, community
