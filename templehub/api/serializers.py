from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from ..models.followup import OutreachFollowUp, ProgramFollowUp
from ..models.program_session import ProgramSession
from ..models.user import User
from ..services.ledger import LedgerEntry


def _iso(v: Optional[date | datetime]) -> Optional[str]:
    return v.isoformat() if v is not None else None


def serialize_entry(entry: LedgerEntry) -> Dict[str, Any]:
    row = entry.row
    out: Dict[str, Any] = {
        "id": row.id,
        "contact_id": entry.contact_id,
        "contact_name": entry.contact_name,
        "contact_phone": entry.contact_phone,
        "follow_up_date": _iso(row.follow_up_date),
        "assigned_volunteer_id": row.assigned_volunteer_id,
        "assigned_volunteer_name": entry.assigned_volunteer_name,
        "status": row.status.value,
        "remarks": row.remarks,
        "called_by_id": row.called_by_id,
        "called_by_name": entry.called_by_name,
        "called_at": _iso(row.called_at),
    }
    if isinstance(row, ProgramFollowUp):
        out["program_id"] = row.program_id
        out["user_type"] = row.user_type.value
    elif isinstance(row, OutreachFollowUp):
        out["kind"] = "outreach"
    return out


def serialize_session(s: ProgramSession) -> Dict[str, Any]:
    return {
        "id": s.id,
        "program_id": s.program_id,
        "session_date": _iso(s.session_date),
        "topic": s.topic,
        "speaker_name": s.speaker_name,
        "created_by_id": s.created_by_id,
        "created_at": _iso(s.created_at),
    }


def serialize_user_brief(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "phone": u.phone,
        "role": u.role.value,
    }
