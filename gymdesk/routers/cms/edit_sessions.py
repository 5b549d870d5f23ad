"""
CMS Edit Sessions Router - Warn admins about concurrent edits of a membership
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from gymdesk.dependencies import get_edit_sessions
from gymdesk.middleware import require_admin
from gymdesk.services.edit_sessions import EditSessionRegistry

router = APIRouter(prefix="/edit-sessions", tags=["CMS - Edit Sessions"])


class StartEditSessionRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=100)
    membership_id: int


class EditSessionRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=100)


@router.post("/start")
def start_edit_session(
    request: StartEditSessionRequest,
    admin: dict = Depends(require_admin),
    registry: EditSessionRegistry = Depends(get_edit_sessions),
):
    others = registry.start(request.session_id, request.membership_id, admin["user_id"], admin.get("name"))
    message = None
    if others:
        names = ", ".join(s["admin_name"] or f"Admin #{s['admin_id']}" for s in others)
        message = f"This membership is also being edited by {names}"
    return {"success": True, "message": message, "concurrent_sessions": others}


@router.post("/heartbeat")
def heartbeat_edit_session(
    request: EditSessionRequest,
    admin: dict = Depends(require_admin),
    registry: EditSessionRegistry = Depends(get_edit_sessions),
):
    if not registry.touch(request.session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error_code": "SESSION_NOT_FOUND", "message": "Edit session not found or expired"},
        )
    return {"success": True}


@router.post("/end")
def end_edit_session(
    request: EditSessionRequest,
    admin: dict = Depends(require_admin),
    registry: EditSessionRegistry = Depends(get_edit_sessions),
):
    session: Optional[dict] = registry.end(request.session_id)
    if session is None:
        return {"success": True, "message": "Edit session already closed", "duration_seconds": None}
    return {"success": True, "message": "Edit session closed", "duration_seconds": session["duration_seconds"]}


@router.get("/active/{membership_id}")
def get_active_edit_sessions(
    membership_id: int,
    admin: dict = Depends(require_admin),
    registry: EditSessionRegistry = Depends(get_edit_sessions),
):
    sessions = registry.active_for(membership_id)
    return {"success": True, "sessions": sessions, "total": len(sessions)}
