from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ..models.followup import CallStatus, FollowUpUserType, OutreachFollowUp, ProgramFollowUp
from ..models.outreach_contact import OutreachContact
from ..models.program_session import ProgramSession
from ..models.user import User, utcnow
from . import directory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    """
    A ledger row plus the display fields the call screens need.
    """

    row: object
    contact_id: int
    contact_name: str
    contact_phone: Optional[str]
    assigned_volunteer_name: Optional[str] = None
    called_by_name: Optional[str] = None


@dataclass(frozen=True)
class ListDeletion:
    deleted_assignments: int
    deleted_sessions: int


@dataclass
class VolunteerWorkload:
    volunteer_id: int
    name: str
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)

    @property
    def pending(self) -> int:
        return self.by_status.get(CallStatus.NOT_CALLED.value, 0)

    @property
    def called(self) -> int:
        return self.total - self.pending

    @property
    def completion_rate(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.called * 100 / self.total)


def _with_names(db: Session, pairs: list, *, contact_of) -> List[LedgerEntry]:  # noqa: ANN001
    user_ids = set()
    for row, _ in pairs:
        if row.assigned_volunteer_id is not None:
            user_ids.add(row.assigned_volunteer_id)
        if row.called_by_id is not None:
            user_ids.add(row.called_by_id)
    names = directory.names_by_id(db, user_ids)

    out: List[LedgerEntry] = []
    for row, contact in pairs:
        out.append(
            LedgerEntry(
                row=row,
                contact_id=contact_of(row),
                contact_name=contact.name,
                contact_phone=contact.phone,
                assigned_volunteer_name=names.get(row.assigned_volunteer_id),
                called_by_name=names.get(row.called_by_id),
            )
        )
    return out


def entry_for(db: Session, row: object) -> LedgerEntry:
    if isinstance(row, OutreachFollowUp):
        contact = db.get(OutreachContact, row.outreach_contact_id)
        return _with_names(db, [(row, contact)], contact_of=lambda r: r.outreach_contact_id)[0]
    contact = db.get(User, row.user_id)
    return _with_names(db, [(row, contact)], contact_of=lambda r: r.user_id)[0]


# -------------------------
# Reads
# -------------------------

def list_program_followups(
    db: Session,
    *,
    program_id: int,
    day: date,
    volunteer_id: Optional[int] = None,
    status: Optional[CallStatus] = None,
    user_type: Optional[FollowUpUserType] = None,
) -> List[LedgerEntry]:
    """
    Live follow-up rows of a program for one date, by contact name.
    """
    directory.get_program(db, program_id)

    q = (
        select(ProgramFollowUp, User)
        .join(User, User.id == ProgramFollowUp.user_id)
        .where(
            ProgramFollowUp.program_id == program_id,
            ProgramFollowUp.follow_up_date == day,
            ProgramFollowUp.is_deleted == False,  # noqa: E712
        )
        .order_by(func.lower(User.name), ProgramFollowUp.id)
    )
    if volunteer_id is not None:
        q = q.where(ProgramFollowUp.assigned_volunteer_id == volunteer_id)
    if status is not None:
        q = q.where(ProgramFollowUp.status == status)
    if user_type is not None:
        q = q.where(ProgramFollowUp.user_type == user_type)

    pairs = list(db.exec(q).all())
    return _with_names(db, pairs, contact_of=lambda r: r.user_id)


def list_outreach_followups(
    db: Session,
    *,
    admin_id: int,
    day: date,
    volunteer_id: Optional[int] = None,
    status: Optional[CallStatus] = None,
) -> List[LedgerEntry]:
    """
    Outreach follow-up rows of an admin's contacts for one date, by contact name.
    """
    directory.get_admin(db, admin_id)

    q = (
        select(OutreachFollowUp, OutreachContact)
        .join(OutreachContact, OutreachContact.id == OutreachFollowUp.outreach_contact_id)
        .where(
            OutreachContact.admin_user_id == admin_id,
            OutreachFollowUp.follow_up_date == day,
        )
        .order_by(func.lower(OutreachContact.name), OutreachFollowUp.id)
    )
    if volunteer_id is not None:
        q = q.where(OutreachFollowUp.assigned_volunteer_id == volunteer_id)
    if status is not None:
        q = q.where(OutreachFollowUp.status == status)

    pairs = list(db.exec(q).all())
    return _with_names(db, pairs, contact_of=lambda r: r.outreach_contact_id)


# -------------------------
# Deletes
# -------------------------

def delete_program_list(db: Session, *, program_id: int, day: date) -> ListDeletion:
    """
    Delete every follow-up row of the program on `day` and retire the matching
    session, in one transaction.
    """
    directory.get_program(db, program_id)

    rows = db.exec(
        select(ProgramFollowUp).where(
            ProgramFollowUp.program_id == program_id,
            ProgramFollowUp.follow_up_date == day,
        )
    ).all()
    for row in rows:
        db.delete(row)

    sessions = db.exec(
        select(ProgramSession).where(
            ProgramSession.program_id == program_id,
            ProgramSession.session_date == day,
            ProgramSession.is_deleted == False,  # noqa: E712
        )
    ).all()
    now = utcnow()
    for s in sessions:
        s.is_deleted = True
        s.updated_at = now
        db.add(s)

    db.commit()
    logger.info(
        "deleted program list program=%s date=%s followups=%d sessions=%d",
        program_id,
        day,
        len(rows),
        len(sessions),
    )
    return ListDeletion(deleted_assignments=len(rows), deleted_sessions=len(sessions))


def delete_outreach_list(db: Session, *, admin_id: int, day: date) -> ListDeletion:
    directory.get_admin(db, admin_id)

    rows = db.exec(
        select(OutreachFollowUp)
        .join(OutreachContact, OutreachContact.id == OutreachFollowUp.outreach_contact_id)
        .where(
            OutreachContact.admin_user_id == admin_id,
            OutreachFollowUp.follow_up_date == day,
        )
    ).all()
    for row in rows:
        db.delete(row)

    db.commit()
    logger.info("deleted outreach list admin=%s date=%s followups=%d", admin_id, day, len(rows))
    return ListDeletion(deleted_assignments=len(rows), deleted_sessions=0)


# -------------------------
# Stats
# -------------------------

def volunteer_stats(db: Session, *, program_id: int, day: Optional[date] = None) -> List[VolunteerWorkload]:
    """
    Per-volunteer workload over a program's live follow-ups (optionally one date),
    most pending first. Program volunteers with nothing assigned are listed with zeros.
    """
    directory.get_program(db, program_id)

    q = select(ProgramFollowUp.assigned_volunteer_id, ProgramFollowUp.status, func.count(ProgramFollowUp.id)).where(
        ProgramFollowUp.program_id == program_id,
        ProgramFollowUp.is_deleted == False,  # noqa: E712
        ProgramFollowUp.assigned_volunteer_id != None,  # noqa: E711
    )
    if day is not None:
        q = q.where(ProgramFollowUp.follow_up_date == day)
    q = q.group_by(ProgramFollowUp.assigned_volunteer_id, ProgramFollowUp.status)

    workloads: Dict[int, VolunteerWorkload] = {}
    for v in directory.volunteers_in_programs(db, [program_id]):
        workloads[int(v.id)] = VolunteerWorkload(volunteer_id=int(v.id), name=v.name)

    counted = list(db.exec(q).all())
    names = directory.names_by_id(db, [vid for vid, _, _ in counted])
    for volunteer_id, status, count in counted:
        vid = int(volunteer_id)
        w = workloads.get(vid)
        if w is None:
            w = VolunteerWorkload(volunteer_id=vid, name=names.get(vid, ""))
            workloads[vid] = w
        key = CallStatus(status).value
        w.by_status[key] = w.by_status.get(key, 0) + int(count)
        w.total += int(count)

    return sorted(workloads.values(), key=lambda w: (-w.pending, w.name.lower(), w.volunteer_id))
