from __future__ import annotations

from typing import Union

from ..models.user import Role

# Higher outranks lower. Outreach contacts sit below guests.
ROLE_RANK = {
    Role.ADMIN: 3,
    Role.VOLUNTEER: 2,
    Role.PARTICIPANT: 1,
    Role.GUEST: 0,
    Role.OUTREACH: -1,
}


def _coerce(role: Union[Role, str]) -> Role:
    if isinstance(role, Role):
        return role
    return Role(str(role).strip().lower())


def rank(role: Union[Role, str]) -> int:
    return ROLE_RANK[_coerce(role)]


def has_at_least(role: Union[Role, str], minimum: Union[Role, str]) -> bool:
    return rank(role) >= rank(minimum)


def can_edit(
    actor_role: Union[Role, str],
    target_role: Union[Role, str],
    actor_id: int,
    target_id: int,
) -> bool:
    """
    Edit permission between two directory entries.

    Rules:
    - Anyone may edit themselves.
    - Admin may edit anyone.
    - Volunteer may edit only entries ranked below volunteer.
    - Participants, guests and outreach entries edit nobody else.
    """
    if actor_id == target_id:
        return True

    actor = _coerce(actor_role)
    if actor == Role.ADMIN:
        return True

    if actor == Role.VOLUNTEER:
        return rank(target_role) < rank(Role.VOLUNTEER)

    return False
