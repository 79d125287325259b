from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .user import utcnow


class Program(SQLModel, table=True):
    __tablename__ = "programs"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    description: Optional[str] = Field(default=None)
    temple: Optional[str] = Field(default=None, index=True)

    # Owning admin
    created_by_user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=utcnow, index=True)


class ProgramMembership(SQLModel, table=True):
    __tablename__ = "program_memberships"
    __table_args__ = (
        UniqueConstraint("program_id", "user_id", name="uq_program_memberships_program_user"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    program_id: int = Field(foreign_key="programs.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    joined_at: datetime = Field(default_factory=utcnow, index=True)
