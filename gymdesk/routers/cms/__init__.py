from fastapi import APIRouter

router = APIRouter(prefix="/api/cms")

from . import memberships, checkins, attendance, members, edit_sessions, audit

router.include_router(memberships.router)
router.include_router(checkins.router)
router.include_router(attendance.router)
router.include_router(members.router)
router.include_router(edit_sessions.router)
router.include_router(audit.router)
