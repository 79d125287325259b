from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .user import utcnow


class CallStatus(str, Enum):
    """
    Outcome of a follow-up call. Values are API-stable strings shown in the UI.
    """

    NOT_CALLED = "Not Called"
    COMING = "Coming"
    NOT_COMING = "Not Coming"
    MAY_COME = "May Come"
    NOT_ANSWERED = "Not Answered"
    NOT_SURE = "Not Sure"


class FollowUpUserType(str, Enum):
    PARTICIPANT = "participant"
    GUEST = "guest"


class CallOutcomeBase(SQLModel):
    """
    Columns shared by both ledgers: who should call, for which calendar day,
    and what happened when they did.
    """

    follow_up_date: date = Field(index=True)

    assigned_volunteer_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    status: CallStatus = Field(default=CallStatus.NOT_CALLED, index=True)
    remarks: str = Field(default="")

    called_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    called_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow, index=True)


class OutreachFollowUp(CallOutcomeBase, table=True):
    """
    One outreach contact to be called for one date.
    The unique constraint is what makes list creation race-safe.
    """

    __tablename__ = "outreach_followups"
    __table_args__ = (
        UniqueConstraint("outreach_contact_id", "follow_up_date", name="uq_outreach_followups_contact_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    outreach_contact_id: int = Field(foreign_key="outreach_contacts.id", index=True)
    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id")


class ProgramFollowUp(CallOutcomeBase, table=True):
    """
    One program member (participant or guest) to be called for one session date.
    """

    __tablename__ = "program_followups"
    __table_args__ = (
        UniqueConstraint("program_id", "user_id", "follow_up_date", name="uq_program_followups_program_user_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    program_id: int = Field(foreign_key="programs.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    user_type: FollowUpUserType = Field(default=FollowUpUserType.PARTICIPANT, index=True)

    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    # Set only by upstream tooling that retires rows; this service hard-deletes.
    # Retired rows are skipped by every read and never get a session.
    is_deleted: bool = Field(default=False, index=True)
