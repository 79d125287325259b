from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_db
from ..services import session_materializer
from ..services.auth import CurrentUser
from .deps import get_current_user
from .serializers import serialize_session, serialize_user_brief

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("/{program_id}/sessions")
def list_sessions(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    program_id: int,
) -> Dict[str, Any]:
    """
    Sessions of a program, most recent first.

    Side effect: creates a placeholder session for every follow-up date that has none.
    """
    sessions = session_materializer.reconcile_sessions(db, program_id)
    return {
        "success": True,
        "program_id": program_id,
        "sessions": [serialize_session(s) for s in sessions],
    }


@router.get("/{program_id}/sessions/{session_id}")
def session_detail(
    *,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    program_id: int,
    session_id: int,
) -> Dict[str, Any]:
    detail = session_materializer.session_attendance(db, program_id, session_id)
    return {
        "success": True,
        "session": serialize_session(detail.session),
        "present_users": [serialize_user_brief(u) for u in detail.present],
        "absent_users": [serialize_user_brief(u) for u in detail.absent],
    }
