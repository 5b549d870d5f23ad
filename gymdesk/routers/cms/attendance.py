"""
CMS Attendance Router - Active members, attendance statistics and dashboard
"""
from fastapi import APIRouter, Depends

from gymdesk.dependencies import get_attendance_service, unwrap
from gymdesk.middleware import require_admin
from gymdesk.services.attendance import AttendanceService

router = APIRouter(prefix="/attendance", tags=["CMS - Attendance"])


@router.get("/active-members")
def get_active_members(
    admin: dict = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service),
):
    return unwrap(service.list_active_members())


@router.get("/overview")
def get_overview_stats(
    admin: dict = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service),
):
    return unwrap(service.get_overview_stats())


@router.get("/member-details/{membership_id}")
def get_member_details(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service),
):
    return unwrap(service.get_member_details(membership_id))


@router.get("/stats/{membership_id}")
def get_attendance_stats(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service),
):
    return unwrap(service.get_attendance_stats(membership_id))
