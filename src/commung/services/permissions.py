"""Role-based authorization shared by every management surface.

Membership roles are ordered owner > moderator > member. All checks that a
view or endpoint needs (staff access, role changes) are derived here from the
caller's role string instead of being re-implemented per route.
"""

from __future__ import annotations

from collections.abc import Iterable

from commung.core.constants import ROLE_MEMBER, ROLE_MODERATOR, ROLE_OWNER, ROLES
from commung.core.exceptions import Forbidden

_RANK = {ROLE_OWNER: 3, ROLE_MODERATOR: 2, ROLE_MEMBER: 1}


def is_owner(role: str | None) -> bool:
    return role == ROLE_OWNER


def is_moderator(role: str | None) -> bool:
    """Return True for staff roles (owner or moderator)."""
    return role in (ROLE_OWNER, ROLE_MODERATOR)


def has_access(role: str | None, required: Iterable[str]) -> bool:
    """Return True when ``role`` is one of ``required``."""
    return role is not None and role in set(required)


def require_role(role: str | None, required: Iterable[str]) -> None:
    """Raise 403 unless ``role`` is one of ``required``."""
    if not has_access(role, required):
        raise Forbidden("이 작업을 수행할 권한이 없습니다")


def assignable_roles(actor_role: str | None, target_role: str) -> list[str]:
    """Return the roles ``actor_role`` may assign to a member holding ``target_role``.

    An owner's role is never changeable (ownership must be transferred by
    promoting someone else), members may not change roles at all, and a
    moderator can never hand out the owner role.
    """
    if target_role == ROLE_OWNER or not is_moderator(actor_role):
        return []
    if actor_role == ROLE_OWNER:
        return list(ROLES)
    return [role for role in ROLES if _RANK[role] <= _RANK[ROLE_MODERATOR]]


def can_change_role(actor_role: str | None, target_role: str, new_role: str) -> bool:
    return new_role in assignable_roles(actor_role, target_role)
