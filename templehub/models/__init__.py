# templehub/models/__init__.py
# Central import surface for SQLModel table registration.

from .user import Role, User
from .program import Program, ProgramMembership
from .outreach_contact import OutreachContact, PaidStatus
from .followup import CallStatus, FollowUpUserType, OutreachFollowUp, ProgramFollowUp
from .program_session import ProgramSession
from .attendance import Attendance, AttendanceStatus

__all__ = [
    "Role",
    "User",
    "Program",
    "ProgramMembership",
    "OutreachContact",
    "PaidStatus",
    "CallStatus",
    "FollowUpUserType",
    "OutreachFollowUp",
    "ProgramFollowUp",
    "ProgramSession",
    "Attendance",
    "AttendanceStatus",
]
