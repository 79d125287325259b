from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..database import get_db
from ..errors import ValidationError
from ..models.followup import CallStatus
from ..models.user import Role
from ..services import directory, ledger
from ..services.auth import CurrentUser
from ..services.dates import to_calendar_date
from .deps import require_role
from .serializers import serialize_entry, serialize_user_brief

router = APIRouter(prefix="/outreach/followups", tags=["outreach"])


def _resolve_admin(user: CurrentUser, admin_id: Optional[int]) -> int:
    """
    Volunteers read their admin's list by naming the admin; admins default to themselves.
    """
    if admin_id is not None:
        return admin_id
    if user.is_admin:
        return user.user_id
    raise ValidationError("admin is required")


def _parse_ids(raw: str) -> List[int]:
    out: List[int] = []
    for part in (raw or "").split(","):
        p = part.strip()
        if not p:
            continue
        try:
            out.append(int(p))
        except ValueError:
            raise ValidationError(f"Invalid program id: {p}")
    if not out:
        raise ValidationError("programs is required")
    return out


@router.get("/by-admin")
def list_outreach_followups(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    date: str = Query(..., min_length=1),
    admin_id: Optional[int] = Query(None, alias="admin", ge=1),
    volunteer_id: Optional[int] = Query(None, ge=1),
    status: Optional[CallStatus] = Query(None),
) -> Dict[str, Any]:
    owner_id = _resolve_admin(user, admin_id)
    day = to_calendar_date(date)
    entries = ledger.list_outreach_followups(
        db,
        admin_id=owner_id,
        day=day,
        volunteer_id=volunteer_id,
        status=status,
    )
    return {
        "admin_id": owner_id,
        "date": day.isoformat(),
        "count": len(entries),
        "followups": [serialize_entry(e) for e in entries],
    }


@router.delete("/delete-for-date")
def delete_outreach_list(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.ADMIN)),
    date: str = Query(..., min_length=1),
) -> Dict[str, Any]:
    day = to_calendar_date(date)
    result = ledger.delete_outreach_list(db, admin_id=user.user_id, day=day)
    return {
        "message": f"Deleted {result.deleted_assignments} follow-ups for {day.isoformat()}",
        "deleted_assignments": result.deleted_assignments,
        "deleted_sessions": result.deleted_sessions,
    }


@router.get("/volunteers-by-admin")
def volunteers_by_admin(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    admin_id: Optional[int] = Query(None, alias="admin", ge=1),
) -> Dict[str, Any]:
    owner_id = _resolve_admin(user, admin_id)
    volunteers = directory.volunteers_for_admin(db, owner_id)
    return {"admin_id": owner_id, "volunteers": [serialize_user_brief(v) for v in volunteers]}


@router.get("/volunteers-by-programs")
def volunteers_by_programs(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_role(Role.VOLUNTEER)),
    programs: str = Query(..., min_length=1, description="Comma-separated program ids"),
) -> Dict[str, Any]:
    volunteers = directory.volunteers_in_programs(db, _parse_ids(programs))
    return {"volunteers": [serialize_user_brief(v) for v in volunteers]}
