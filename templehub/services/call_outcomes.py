from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

from sqlmodel import Session, select

from ..errors import NotFoundError
from ..models.followup import CallStatus, OutreachFollowUp, ProgramFollowUp
from ..models.user import utcnow

logger = logging.getLogger(__name__)

FollowUpRow = Union[OutreachFollowUp, ProgramFollowUp]

# Sentinel for "field not sent" (None would be ambiguous for remarks).
UNSET = object()


def _next_call_time(previous: Optional[datetime]) -> datetime:
    """
    now, but never at or before the previous call so called_at strictly advances.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def record_outcome(
    row: FollowUpRow,
    *,
    caller_id: int,
    status: Optional[CallStatus] = None,
    remarks: object = UNSET,
) -> FollowUpRow:
    """
    Apply a call outcome to an existing ledger row (in memory; caller commits).

    - status: replaced only when given
    - remarks: replaced whenever sent, "" included
    - called_by / called_at: always the latest caller and time
    """
    if status is not None:
        row.status = CallStatus(status)
    if remarks is not UNSET:
        row.remarks = "" if remarks is None else str(remarks)
    row.called_by_id = caller_id
    row.called_at = _next_call_time(row.called_at)
    return row


def record_outreach_outcome(
    db: Session,
    *,
    contact_id: int,
    day: date,
    caller_id: int,
    status: Optional[CallStatus] = None,
    remarks: object = UNSET,
) -> OutreachFollowUp:
    """
    Record a call to an outreach contact on the list for `day`.
    Never creates a row: the list has to exist first.
    """
    row = db.exec(
        select(OutreachFollowUp).where(
            OutreachFollowUp.outreach_contact_id == contact_id,
            OutreachFollowUp.follow_up_date == day,
        )
    ).first()
    if not row:
        raise NotFoundError("Follow-up not found for this date. Please create a list first.")

    record_outcome(row, caller_id=caller_id, status=status, remarks=remarks)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("outreach call recorded contact=%s date=%s status=%s by=%s", contact_id, day, row.status.value, caller_id)
    return row


def record_program_outcome(
    db: Session,
    *,
    followup_id: int,
    caller_id: int,
    status: Optional[CallStatus] = None,
    remarks: object = UNSET,
) -> ProgramFollowUp:
    row = db.get(ProgramFollowUp, followup_id)
    if not row or row.is_deleted:
        raise NotFoundError("Follow-up not found")

    record_outcome(row, caller_id=caller_id, status=status, remarks=remarks)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("program call recorded followup=%s status=%s by=%s", followup_id, row.status.value, caller_id)
    return row
