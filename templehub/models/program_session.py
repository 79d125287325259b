from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from .user import utcnow

PLACEHOLDER_TOPIC = "Session"
PLACEHOLDER_SPEAKER = "To be updated"


class ProgramSession(SQLModel, table=True):
    """
    A program meeting day, derived from follow-up activity.

    At most one live (is_deleted = false) row per (program_id, session_date);
    the partial unique index enforces it on SQLite and Postgres.
    """

    __tablename__ = "program_sessions"
    __table_args__ = (
        Index(
            "uq_program_sessions_live_program_date",
            "program_id",
            "session_date",
            unique=True,
            sqlite_where=text("is_deleted = 0"),
            postgresql_where=text("is_deleted = false"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    program_id: int = Field(foreign_key="programs.id", index=True)
    session_date: date = Field(index=True)

    topic: str = Field(default=PLACEHOLDER_TOPIC)
    speaker_name: str = Field(default=PLACEHOLDER_SPEAKER)

    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id")
    is_deleted: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
