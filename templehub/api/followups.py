from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field as PydField
from sqlmodel import Session

from ..database import get_db
from ..errors import ForbiddenError
from ..models.followup import CallStatus, FollowUpUserType
from ..models.user import Role
from ..services import call_outcomes, ledger, partitioner
from ..services.auth import CurrentUser
from ..services.dates import to_calendar_date
from .deps import get_current_user, require_role
from .serializers import serialize_entry

router = APIRouter(prefix="/followups", tags=["followups"])


# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------
class OutreachListCreate(BaseModel):
    """
    The list always belongs to the calling admin. admin_id is accepted only
    when it names the caller.
    """
    volunteer_ids: List[int] = PydField(..., min_length=1)
    follow_up_date: str = PydField(..., min_length=1)
    admin_id: Optional[int] = None


class ProgramListCreate(BaseModel):
    program_id: int = PydField(..., ge=1)
    volunteer_ids: List[int] = PydField(..., min_length=1)
    follow_up_date: str = PydField(..., min_length=1)
    user_type: FollowUpUserType = FollowUpUserType.PARTICIPANT
    session_topic: Optional[str] = None
    speaker_name: Optional[str] = None


class OutreachCallUpdate(BaseModel):
    """
    Omit a field to keep its value; send "remarks": "" to clear remarks.
    """
    contact_id: int = PydField(..., ge=1)
    follow_up_date: str = PydField(..., min_length=1)
    status: Optional[CallStatus] = None
    remarks: Optional[str] = None


class ProgramCallUpdate(BaseModel):
    status: Optional[CallStatus] = None
    remarks: Optional[str] = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _remarks_arg(payload: BaseModel) -> object:
    if "remarks" in payload.model_fields_set:
        return payload.remarks
    return call_outcomes.UNSET


def _serialize_creation(result: partitioner.ListCreation) -> Dict[str, Any]:
    return {
        "success": True,
        "created_count": result.created_count,
        "follow_up_date": result.follow_up_date.isoformat(),
        "distribution": [{"volunteer_id": vid, "count": n} for vid, n in result.distribution],
    }


# -----------------------------------------------------------------------------
# Outreach list (owned by an admin)
# -----------------------------------------------------------------------------
@router.post("/assign")
def create_outreach_list(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.ADMIN)),
    payload: OutreachListCreate,
) -> Dict[str, Any]:
    """
    Split the calling admin's outreach contacts across the given volunteers for one date.
    """
    if payload.admin_id is not None and payload.admin_id != user.user_id:
        raise ForbiddenError("Follow-up lists can only be created for your own contacts")

    day = to_calendar_date(payload.follow_up_date)
    result = partitioner.create_outreach_list(
        db,
        admin_id=user.user_id,
        volunteer_ids=payload.volunteer_ids,
        day=day,
        created_by_id=user.user_id,
    )

    out = _serialize_creation(result)
    if result.created_count == 0:
        out["message"] = "No contacts found for this admin"
    else:
        out["message"] = (
            f"Created follow-up list for {day.isoformat()} with {result.created_count} contacts "
            f"assigned to {len(payload.volunteer_ids)} volunteers"
        )
    return out


@router.patch("/update")
def record_outreach_call(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    payload: OutreachCallUpdate,
) -> Dict[str, Any]:
    row = call_outcomes.record_outreach_outcome(
        db,
        contact_id=payload.contact_id,
        day=to_calendar_date(payload.follow_up_date),
        caller_id=user.user_id,
        status=payload.status,
        remarks=_remarks_arg(payload),
    )
    return {"success": True, "followup": serialize_entry(ledger.entry_for(db, row))}


# -----------------------------------------------------------------------------
# Program list
# -----------------------------------------------------------------------------
@router.get("")
def list_program_followups(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    program_id: int = Query(..., alias="program", ge=1),
    date: str = Query(..., min_length=1),
    volunteer_id: Optional[int] = Query(None, ge=1),
    status: Optional[CallStatus] = Query(None),
    user_type: Optional[FollowUpUserType] = Query(None),
) -> Dict[str, Any]:
    day = to_calendar_date(date)
    entries = ledger.list_program_followups(
        db,
        program_id=program_id,
        day=day,
        volunteer_id=volunteer_id,
        status=status,
        user_type=user_type,
    )
    return {
        "program_id": program_id,
        "date": day.isoformat(),
        "count": len(entries),
        "followups": [serialize_entry(e) for e in entries],
    }


@router.post("/create-for-date", status_code=201)
def create_program_list(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.ADMIN)),
    payload: ProgramListCreate,
) -> Dict[str, Any]:
    """
    Split a program's participants (or guests) across volunteers for one session date.
    """
    day = to_calendar_date(payload.follow_up_date)
    result = partitioner.create_program_list(
        db,
        program_id=payload.program_id,
        volunteer_ids=payload.volunteer_ids,
        day=day,
        created_by_id=user.user_id,
        user_type=payload.user_type,
        topic=payload.session_topic,
        speaker_name=payload.speaker_name,
    )

    out = _serialize_creation(result)
    out["program_id"] = payload.program_id
    out["session_id"] = result.session_id
    out["message"] = f"Created {result.created_count} follow-ups for {day.isoformat()}"
    return out


@router.patch("/{followup_id}/update")
def record_program_call(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    followup_id: int,
    payload: ProgramCallUpdate,
) -> Dict[str, Any]:
    row = call_outcomes.record_program_outcome(
        db,
        followup_id=followup_id,
        caller_id=user.user_id,
        status=payload.status,
        remarks=_remarks_arg(payload),
    )
    return {"success": True, "followup": serialize_entry(ledger.entry_for(db, row))}


@router.delete("/delete-for-date")
def delete_program_list(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    program_id: int = Query(..., alias="program", ge=1),
    date: str = Query(..., min_length=1),
) -> Dict[str, Any]:
    """
    Delete the program's follow-up list for a date together with that date's session.
    """
    day = to_calendar_date(date)
    result = ledger.delete_program_list(db, program_id=program_id, day=day)
    return {
        "message": (
            f"Deleted {result.deleted_assignments} follow-ups and "
            f"{result.deleted_sessions} session(s) for {day.isoformat()}"
        ),
        "deleted_assignments": result.deleted_assignments,
        "deleted_sessions": result.deleted_sessions,
    }


@router.get("/volunteers-stats")
def volunteers_stats(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.ADMIN)),
    program_id: int = Query(..., alias="program", ge=1),
    date: Optional[str] = Query(None),
) -> Dict[str, Any]:
    day = to_calendar_date(date) if date else None
    workloads = ledger.volunteer_stats(db, program_id=program_id, day=day)

    items = [
        {
            "volunteer_id": w.volunteer_id,
            "name": w.name,
            "workload": {"total": w.total, "pending": w.pending, "called": w.called, "by_status": w.by_status},
            "completion_rate": w.completion_rate,
        }
        for w in workloads
    ]
    return {
        "program_id": program_id,
        "date": day.isoformat() if day else None,
        "data": items,
        "summary": {
            "total_volunteers": len(workloads),
            "total_followups": sum(w.total for w in workloads),
            "total_pending": sum(w.pending for w in workloads),
            "total_called": sum(w.called for w in workloads),
        },
    }
