from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from .user import utcnow


class PaidStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    SPONSORED = "Sponsored"


class OutreachContact(SQLModel, table=True):
    """
    Someone met during outreach who is not (yet) a registered user.

    admin_user_id is the owning admin: their follow-up lists are built from
    these rows, ordered by created_at.
    """

    __tablename__ = "outreach_contacts"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(index=True)
    phone: str = Field(index=True)
    profession: Optional[str] = Field(default=None)
    mother_tongue: Optional[str] = Field(default=None)
    current_location: Optional[str] = Field(default=None)
    branch: Optional[str] = Field(default=None, index=True)
    paid_status: PaidStatus = Field(default=PaidStatus.UNPAID)
    comment: Optional[str] = Field(default=None)

    admin_user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    added_by_user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    created_at: datetime = Field(default_factory=utcnow, index=True)
