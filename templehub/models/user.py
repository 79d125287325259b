from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    # Keep timestamps UTC-naive for consistent storage/ordering in SQLite.
    return datetime.utcnow().replace(tzinfo=None)


class Role(str, Enum):
    """
    Closed set of directory roles. Values are API-stable strings.

    Ordering lives in services.roles (rank), not in the enum order.
    """

    ADMIN = "admin"
    VOLUNTEER = "volunteer"
    PARTICIPANT = "participant"
    GUEST = "guest"
    OUTREACH = "outreach"


# Roles that can be handed a bucket of follow-up calls
CALLER_ROLES = (Role.VOLUNTEER, Role.ADMIN)


class User(SQLModel, table=True):
    """
    A person in the temple directory.

    Notes:
    - Only active users (OTP-verified upstream) are eligible contacts or callers.
    - Program enrolment lives in program_memberships, not on this row.
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(index=True)
    email: Optional[str] = Field(default=None, index=True, unique=True)
    phone: Optional[str] = Field(default=None, index=True)

    role: Role = Field(default=Role.GUEST, index=True)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, index=True)

    def can_take_calls(self) -> bool:
        return bool(self.is_active) and self.role in CALLER_ROLES
