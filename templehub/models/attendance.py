from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from .user import utcnow


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class Attendance(SQLModel, table=True):
    """
    Attendance mark written by the attendance screens; read here for session detail.
    `date` is naive UTC like every other timestamp; session lookups match it
    against the session's local calendar day (LOCAL_TIMEZONE).
    """

    __tablename__ = "attendance"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)
    program_id: int = Field(foreign_key="programs.id", index=True)

    date: datetime = Field(default_factory=utcnow, index=True)
    level: Optional[int] = Field(default=None)
    status: AttendanceStatus = Field(default=AttendanceStatus.PRESENT, index=True)

    marked_at: datetime = Field(default_factory=utcnow)
