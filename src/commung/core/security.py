"""Password hashing, session tokens and API token digests."""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Any

import nacl.pwhash
from blake3 import blake3
from jose import jwt
from nacl.exceptions import InvalidkeyError

from commung.core.settings import settings

# Bot tokens carry a recognisable prefix so they are never mistaken for sessions.
BOT_TOKEN_PREFIX = "cmb_"


def hash_password(password: str) -> str:
    """Return an argon2id hash string for ``password``."""
    hashed = nacl.pwhash.argon2id.str(
        password.encode("utf-8"),
        opslimit=nacl.pwhash.argon2id.OPSLIMIT_INTERACTIVE,
        memlimit=nacl.pwhash.argon2id.MEMLIMIT_INTERACTIVE,
    )
    return hashed.decode("ascii")


def verify_password(password_hash: str, password: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    try:
        return nacl.pwhash.verify(password_hash.encode("ascii"), password.encode("utf-8"))
    except InvalidkeyError:
        return False


def create_session_token(user_id: str, session_id: str, expires_at: datetime) -> str:
    """Encode a signed bearer token referencing a server-side session row."""
    payload: dict[str, Any] = {
        "sub": user_id,
        "sid": session_id,
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> dict[str, Any]:
    """Decode and verify a bearer token; raises ``jose.JWTError`` when invalid."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def session_expiry(now: datetime) -> datetime:
    """Return when a session created at ``now`` stops being valid."""
    return now + timedelta(days=settings.session_expire_days)


def generate_bot_token() -> str:
    """Return a fresh random bot API token."""
    return BOT_TOKEN_PREFIX + secrets.token_urlsafe(32)


def token_digest(token: str) -> str:
    """Return the BLAKE3 hex digest stored in place of a bot token."""
    return blake3(token.encode("utf-8")).hexdigest()
