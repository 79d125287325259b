from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from sqlmodel import Session, select

from ..errors import NotFoundError, ValidationError
from ..models.outreach_contact import OutreachContact
from ..models.program import Program, ProgramMembership
from ..models.user import CALLER_ROLES, Role, User


def get_program(db: Session, program_id: int) -> Program:
    program = db.get(Program, program_id)
    if not program:
        raise NotFoundError("Program not found")
    return program


def get_admin(db: Session, admin_id: int) -> User:
    admin = db.get(User, admin_id)
    if not admin or admin.role != Role.ADMIN:
        raise NotFoundError("Admin not found")
    return admin


def outreach_contacts_for_admin(db: Session, admin_id: int) -> List[OutreachContact]:
    """
    The admin's outreach contacts in creation order (oldest first, id breaks ties).
    """
    return list(
        db.exec(
            select(OutreachContact)
            .where(OutreachContact.admin_user_id == admin_id)
            .order_by(OutreachContact.created_at, OutreachContact.id)
        ).all()
    )


def program_members(db: Session, program_id: int, role: Role) -> List[User]:
    """
    Active members of a program holding `role`, in user creation order.
    """
    return list(
        db.exec(
            select(User)
            .join(ProgramMembership, ProgramMembership.user_id == User.id)
            .where(
                ProgramMembership.program_id == program_id,
                User.role == role,
                User.is_active == True,  # noqa: E712
            )
            .order_by(User.created_at, User.id)
        ).all()
    )


def program_ids_for_admin(db: Session, admin_id: int) -> List[int]:
    rows = db.exec(select(Program.id).where(Program.created_by_user_id == admin_id)).all()
    return [int(r) for r in rows if r is not None]


def volunteers_in_programs(
    db: Session,
    program_ids: Iterable[int],
    *,
    roles: Sequence[Role] = CALLER_ROLES,
) -> List[User]:
    """
    Active users with one of `roles` enrolled in any of the programs (each user once).
    """
    ids = sorted({int(p) for p in program_ids})
    if not ids:
        return []

    enrolled = select(ProgramMembership.user_id).where(ProgramMembership.program_id.in_(ids))
    return list(
        db.exec(
            select(User)
            .where(
                User.id.in_(enrolled),
                User.role.in_(list(roles)),
                User.is_active == True,  # noqa: E712
            )
            .order_by(User.name, User.id)
        ).all()
    )


def volunteers_for_admin(db: Session, admin_id: int) -> List[User]:
    """
    Volunteers enrolled in any program the admin created.
    """
    get_admin(db, admin_id)
    return volunteers_in_programs(db, program_ids_for_admin(db, admin_id), roles=(Role.VOLUNTEER,))


def load_volunteers(db: Session, volunteer_ids: Sequence[int]) -> List[User]:
    """
    Resolve the ordered volunteer list for a follow-up list.

    Every id must be an active volunteer or admin; order is preserved.
    """
    if not volunteer_ids:
        raise ValidationError("At least one volunteer is required")

    ids = [int(v) for v in volunteer_ids]
    if len(set(ids)) != len(ids):
        raise ValidationError("Volunteer ids must be unique")

    found: Dict[int, User] = {
        int(u.id): u for u in db.exec(select(User).where(User.id.in_(ids))).all() if u.id is not None
    }

    missing = [i for i in ids if i not in found or not found[i].can_take_calls()]
    if missing:
        raise NotFoundError("Volunteer not found", details={"volunteer_ids": missing})

    return [found[i] for i in ids]


def names_by_id(db: Session, user_ids: Iterable[int]) -> Dict[int, str]:
    ids = sorted({int(i) for i in user_ids if i is not None})
    if not ids:
        return {}
    rows = db.exec(select(User.id, User.name).where(User.id.in_(ids))).all()
    return {int(uid): name for uid, name in rows}
