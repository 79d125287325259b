"""
Follow-up list creation.

A list for a date takes the eligible contacts in creation order and cuts them
into contiguous buckets, one per volunteer in the order the volunteers were
given. Bucket sizes are ceil(n / v) or floor(n / v) and earlier volunteers
take the larger ones, so the last ones may get a smaller (or, when n < v, an
empty) bucket. The same inputs always give the same assignment.

Creation is all-or-nothing: an existing row for any contact on that date
aborts before writing, and the (contact, date) unique constraint catches the
race where two creations pass that check together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import ConflictError, ValidationError
from ..models.followup import CallStatus, FollowUpUserType, OutreachFollowUp, ProgramFollowUp
from ..models.user import Role
from . import directory
from .session_materializer import ensure_session

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ListCreation:
    created_count: int
    follow_up_date: date
    # (volunteer_id, bucket size) in volunteer order
    distribution: List[Tuple[int, int]] = field(default_factory=list)
    session_id: Optional[int] = None


def bucket_sizes(n: int, v: int) -> List[int]:
    """
    Sizes of the v contiguous buckets for n contacts: the first n % v volunteers
    get ceil(n / v), the rest floor(n / v).
    """
    if v < 1:
        raise ValidationError("At least one volunteer is required")
    if n <= 0:
        return [0] * v
    base, extra = divmod(n, v)
    return [base + 1 if i < extra else base for i in range(v)]


def partition(contacts: Sequence[T], volunteer_ids: Sequence[int]) -> List[Tuple[int, List[T]]]:
    """
    Split `contacts` into contiguous buckets, one per volunteer, preserving both orders.

    >>> partition(list("abcdefg"), [1, 2, 3])
    [(1, ['a', 'b', 'c']), (2, ['d', 'e']), (3, ['f', 'g'])]
    """
    if not volunteer_ids:
        raise ValidationError("At least one volunteer is required")
    if len(set(volunteer_ids)) != len(volunteer_ids):
        raise ValidationError("Volunteer ids must be unique")

    buckets: List[Tuple[int, List[T]]] = []
    start = 0
    for volunteer_id, size in zip(volunteer_ids, bucket_sizes(len(contacts), len(volunteer_ids))):
        buckets.append((volunteer_id, list(contacts[start:start + size])))
        start += size
    return buckets


def _commit_list(db: Session, what: str, day: date) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("concurrent %s list creation for %s lost the race", what, day)
        raise ConflictError(_already_exists_message(day))


def _already_exists_message(day: date) -> str:
    return (
        f"Follow-up list already exists for {day.isoformat()}. "
        "Delete the existing list first or choose a different date."
    )


def create_outreach_list(
    db: Session,
    *,
    admin_id: int,
    volunteer_ids: Sequence[int],
    day: date,
    created_by_id: Optional[int] = None,
) -> ListCreation:
    """
    Create the outreach follow-up list of `admin_id` for `day`.
    """
    directory.get_admin(db, admin_id)
    volunteers = directory.load_volunteers(db, volunteer_ids)
    ordered_ids = [int(v.id) for v in volunteers]

    contacts = directory.outreach_contacts_for_admin(db, admin_id)
    if not contacts:
        logger.info("outreach list for admin=%s on %s: no contacts", admin_id, day)
        return ListCreation(created_count=0, follow_up_date=day, distribution=[(v, 0) for v in ordered_ids])

    contact_ids = [int(c.id) for c in contacts]
    existing = db.exec(
        select(func.count(OutreachFollowUp.id)).where(
            OutreachFollowUp.outreach_contact_id.in_(contact_ids),
            OutreachFollowUp.follow_up_date == day,
        )
    ).one()
    if int(existing or 0) > 0:
        raise ConflictError(_already_exists_message(day))

    distribution: List[Tuple[int, int]] = []
    created = 0
    for volunteer_id, bucket in partition(contact_ids, ordered_ids):
        for contact_id in bucket:
            db.add(
                OutreachFollowUp(
                    outreach_contact_id=contact_id,
                    assigned_volunteer_id=volunteer_id,
                    follow_up_date=day,
                    status=CallStatus.NOT_CALLED,
                    remarks="",
                    created_by_id=created_by_id,
                )
            )
        distribution.append((volunteer_id, len(bucket)))
        created += len(bucket)

    _commit_list(db, "outreach", day)
    logger.info(
        "created outreach list admin=%s date=%s contacts=%d volunteers=%d",
        admin_id,
        day,
        created,
        len(ordered_ids),
    )
    return ListCreation(created_count=created, follow_up_date=day, distribution=distribution)


def create_program_list(
    db: Session,
    *,
    program_id: int,
    volunteer_ids: Sequence[int],
    day: date,
    created_by_id: Optional[int] = None,
    user_type: FollowUpUserType = FollowUpUserType.PARTICIPANT,
    topic: Optional[str] = None,
    speaker_name: Optional[str] = None,
) -> ListCreation:
    """
    Create the follow-up list of a program's participants (or guests) for `day`,
    and make sure the session for that day exists in the same transaction.
    """
    directory.get_program(db, program_id)
    volunteers = directory.load_volunteers(db, volunteer_ids)
    ordered_ids = [int(v.id) for v in volunteers]

    members = directory.program_members(db, program_id, Role(user_type.value))
    if not members:
        logger.info("program list program=%s on %s: no %s members", program_id, day, user_type.value)
        return ListCreation(created_count=0, follow_up_date=day, distribution=[(v, 0) for v in ordered_ids])

    member_ids = [int(u.id) for u in members]
    existing = db.exec(
        select(func.count(ProgramFollowUp.id)).where(
            ProgramFollowUp.program_id == program_id,
            ProgramFollowUp.user_id.in_(member_ids),
            ProgramFollowUp.follow_up_date == day,
        )
    ).one()
    if int(existing or 0) > 0:
        raise ConflictError(_already_exists_message(day))

    distribution: List[Tuple[int, int]] = []
    created = 0
    # ensure_session queries; nothing may flush before _commit_list.
    with db.no_autoflush:
        for volunteer_id, bucket in partition(member_ids, ordered_ids):
            for user_id in bucket:
                db.add(
                    ProgramFollowUp(
                        program_id=program_id,
                        user_id=user_id,
                        user_type=user_type,
                        assigned_volunteer_id=volunteer_id,
                        follow_up_date=day,
                        status=CallStatus.NOT_CALLED,
                        remarks="",
                        created_by_id=created_by_id,
                    )
                )
            distribution.append((volunteer_id, len(bucket)))
            created += len(bucket)

        session_row = ensure_session(
            db,
            program_id=program_id,
            day=day,
            topic=topic,
            speaker_name=speaker_name,
            created_by_id=created_by_id,
        )

    _commit_list(db, "program", day)
    logger.info(
        "created program list program=%s date=%s contacts=%d volunteers=%d",
        program_id,
        day,
        created,
        len(ordered_ids),
    )
    return ListCreation(
        created_count=created,
        follow_up_date=day,
        distribution=distribution,
        session_id=session_row.id,
    )
