"""
Program sessions derived from follow-up activity.

A session exists for every calendar date that has at least one live program
follow-up row. `reconcile_sessions` is the read path used by the sessions
screen and it WRITES: any follow-up date without a live session gets one with
placeholder topic/speaker. Running it again changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import ConflictError, NotFoundError
from ..models.attendance import Attendance, AttendanceStatus
from ..models.followup import ProgramFollowUp
from ..models.program import ProgramMembership
from ..models.program_session import PLACEHOLDER_SPEAKER, PLACEHOLDER_TOPIC, ProgramSession
from ..models.user import Role, User, utcnow
from . import directory
from .dates import day_bounds

logger = logging.getLogger(__name__)

RECONCILE_ATTEMPTS = 3


@dataclass
class SessionAttendance:
    session: ProgramSession
    present: List[User] = field(default_factory=list)
    absent: List[User] = field(default_factory=list)


def _clean(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    out = str(s).strip()
    return out or None


def live_sessions(db: Session, program_id: int) -> List[ProgramSession]:
    """
    Non-deleted sessions of a program, most recent first.
    """
    return list(
        db.exec(
            select(ProgramSession)
            .where(
                ProgramSession.program_id == program_id,
                ProgramSession.is_deleted == False,  # noqa: E712
            )
            .order_by(ProgramSession.session_date.desc(), ProgramSession.id.desc())
        ).all()
    )


def ensure_session(
    db: Session,
    *,
    program_id: int,
    day: date,
    topic: Optional[str] = None,
    speaker_name: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> ProgramSession:
    """
    Return the live session of `program_id` on `day`, adding one if missing.

    Does not commit; the caller owns the transaction. A supplied topic/speaker
    overwrites the existing values.
    """
    topic = _clean(topic)
    speaker_name = _clean(speaker_name)

    row = db.exec(
        select(ProgramSession).where(
            ProgramSession.program_id == program_id,
            ProgramSession.session_date == day,
            ProgramSession.is_deleted == False,  # noqa: E712
        )
    ).first()

    if row is None:
        row = ProgramSession(
            program_id=program_id,
            session_date=day,
            topic=topic or PLACEHOLDER_TOPIC,
            speaker_name=speaker_name or PLACEHOLDER_SPEAKER,
            created_by_id=created_by_id,
        )
        db.add(row)
        return row

    if topic or speaker_name:
        row.topic = topic or row.topic
        row.speaker_name = speaker_name or row.speaker_name
        row.updated_at = utcnow()
        db.add(row)
    return row


def followup_dates(db: Session, program_id: int) -> List[date]:
    rows = db.exec(
        select(ProgramFollowUp.follow_up_date)
        .where(
            ProgramFollowUp.program_id == program_id,
            ProgramFollowUp.is_deleted == False,  # noqa: E712
        )
        .distinct()
    ).all()
    return sorted({d for d in rows if d is not None})


def reconcile_sessions(db: Session, program_id: int) -> List[ProgramSession]:
    """
    Backfill one placeholder session per follow-up date that has none, then
    return the program's live sessions (most recent first).
    """
    directory.get_program(db, program_id)

    for attempt in range(1, RECONCILE_ATTEMPTS + 1):
        have = {s.session_date for s in live_sessions(db, program_id)}
        missing = [d for d in followup_dates(db, program_id) if d not in have]
        if not missing:
            break

        for day in missing:
            db.add(
                ProgramSession(
                    program_id=program_id,
                    session_date=day,
                    topic=PLACEHOLDER_TOPIC,
                    speaker_name=PLACEHOLDER_SPEAKER,
                )
            )
        try:
            db.commit()
        except IntegrityError:
            # Another request inserted some of these dates first. Its rows are now
            # visible, so the next pass only adds what is still missing.
            db.rollback()
            logger.info(
                "session backfill for program=%s raced another request (attempt %d)", program_id, attempt
            )
            continue

        logger.info("backfilled %d session(s) for program=%s", len(missing), program_id)
        break
    else:
        raise ConflictError("Sessions are being updated by another request, try again")

    return live_sessions(db, program_id)


def get_live_session(db: Session, program_id: int, session_id: int) -> ProgramSession:
    row = db.get(ProgramSession, session_id)
    if not row or row.is_deleted or row.program_id != program_id:
        raise NotFoundError("Session not found")
    return row


def session_attendance(db: Session, program_id: int, session_id: int) -> SessionAttendance:
    """
    The session plus the program's volunteers and participants, split by whether
    they were marked present on the session's calendar day.
    """
    directory.get_program(db, program_id)
    row = get_live_session(db, program_id, session_id)

    members = list(
        db.exec(
            select(User)
            .join(ProgramMembership, ProgramMembership.user_id == User.id)
            .where(
                ProgramMembership.program_id == program_id,
                User.role.in_([Role.VOLUNTEER, Role.PARTICIPANT]),
            )
            .order_by(User.name, User.id)
        ).all()
    )

    start, end = day_bounds(row.session_date)
    present_ids = set(
        db.exec(
            select(Attendance.user_id).where(
                Attendance.program_id == program_id,
                Attendance.date >= start,
                Attendance.date < end,
                Attendance.status == AttendanceStatus.PRESENT,
            )
        ).all()
    )

    result = SessionAttendance(session=row)
    for member in members:
        if member.id in present_ids:
            result.present.append(member)
        else:
            result.absent.append(member)
    return result
