"""Account-level blocks between console users."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from commung.core.exceptions import BadRequest, Conflict, NotFound
from commung.models import User, UserBlock

logger = logging.getLogger(__name__)


def _find_block(db: Session, blocker_id: str, blocked_id: str) -> UserBlock | None:
    return (
        db.query(UserBlock)
        .filter(UserBlock.blocker_id == blocker_id, UserBlock.blocked_id == blocked_id)
        .first()
    )


def is_blocked(db: Session, blocker_id: str, blocked_id: str) -> bool:
    """Return True when ``blocker_id`` has blocked ``blocked_id``."""
    return _find_block(db, blocker_id, blocked_id) is not None


def block_user(db: Session, blocker: User, blocked_id: str) -> UserBlock:
    """Block another account.

    Raises:
        BadRequest: If the caller tries to block themself.
        NotFound: If the target account does not exist.
        Conflict: If the target is already blocked.
    """
    if blocked_id == blocker.id:
        raise BadRequest("자기 자신을 차단할 수 없습니다")
    target = db.get(User, blocked_id)
    if target is None or target.deleted_at is not None:
        raise NotFound("사용자를 찾을 수 없습니다")
    if _find_block(db, blocker.id, blocked_id) is not None:
        raise Conflict("이미 차단한 사용자입니다")

    block = UserBlock(blocker_id=blocker.id, blocked_id=blocked_id)
    db.add(block)
    db.commit()
    db.refresh(block)
    logger.info("User %s blocked %s", blocker.id, blocked_id)
    return block


def unblock_user(db: Session, blocker: User, blocked_id: str) -> None:
    block = _find_block(db, blocker.id, blocked_id)
    if block is None:
        raise NotFound("차단하지 않은 사용자입니다")
    db.delete(block)
    db.commit()


def list_blocked_users(db: Session, blocker: User) -> list[dict[str, Any]]:
    blocks = (
        db.query(UserBlock)
        .filter(UserBlock.blocker_id == blocker.id)
        .order_by(UserBlock.created_at.desc(), UserBlock.id.desc())
        .all()
    )
    return [
        {"id": block.blocked.id, "login_name": block.blocked.login_name, "blocked_at": block.created_at}
        for block in blocks
    ]
