"""
FastAPI dependency providers.

The Database and the edit-session registry are created once in the app
lifespan and kept on ``app.state``; services are cheap and built per request.
"""
from fastapi import Depends, HTTPException, Request, status

from gymdesk.core import results
from gymdesk.db import Database
from gymdesk.repositories import MemberRepository
from gymdesk.services import (
    build_attendance_service,
    build_checkin_service,
    build_membership_service,
)
from gymdesk.services.attendance import AttendanceService
from gymdesk.services.checkins import CheckinService
from gymdesk.services.edit_sessions import EditSessionRegistry
from gymdesk.services.memberships import MembershipService
from gymdesk.utils.audit import AuditLogger

CLIENT_ERROR_STATUS = {
    **{code: status.HTTP_404_NOT_FOUND for code in results.NOT_FOUND_CODES},
    results.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_edit_sessions(request: Request) -> EditSessionRegistry:
    return request.app.state.edit_sessions


def get_member_repository(db: Database = Depends(get_database)) -> MemberRepository:
    return MemberRepository(db)


def get_audit_logger(db: Database = Depends(get_database)) -> AuditLogger:
    return AuditLogger(db)


def get_membership_service(db: Database = Depends(get_database)) -> MembershipService:
    return build_membership_service(db)


def get_checkin_service(db: Database = Depends(get_database)) -> CheckinService:
    return build_checkin_service(db)


def get_attendance_service(db: Database = Depends(get_database)) -> AttendanceService:
    return build_attendance_service(db)


def unwrap(result: dict) -> dict:
    """Return a successful service result, or raise it as an HTTPException."""
    if result.get("success"):
        return result

    error_code = result.get("error_code", results.INTERNAL_ERROR)
    raise HTTPException(
        status_code=CLIENT_ERROR_STATUS.get(error_code, status.HTTP_400_BAD_REQUEST),
        detail={"error_code": error_code, "message": result.get("message")},
    )
