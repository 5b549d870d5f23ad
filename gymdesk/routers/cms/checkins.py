"""
CMS Check-ins Router - Staff check-in of members via QR scan or manual entry
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from gymdesk.dependencies import get_checkin_service, unwrap
from gymdesk.middleware import require_admin
from gymdesk.services.checkins import CheckinService

router = APIRouter(prefix="/checkins", tags=["CMS - Check-ins"])


# ============== Request Models ==============

class ResolveCheckinRequest(BaseModel):
    qr_code: str = Field(..., min_length=1)


class RecordCheckinRequest(BaseModel):
    qr_code: str = Field(..., min_length=1)
    membership_id: int
    member_id: Optional[int] = None
    checkin_time: Optional[datetime] = None
    snapshot: Optional[dict] = None
    manual_entry: bool = False


# ============== Endpoints ==============

@router.post("/resolve")
def resolve_checkin(
    request: ResolveCheckinRequest,
    admin: dict = Depends(require_admin),
    service: CheckinService = Depends(get_checkin_service),
):
    """Look up the membership for a scanned code (no check-in is written)"""
    return unwrap(service.resolve_checkin(request.qr_code))


@router.post("/record")
def record_checkin(
    request: RecordCheckinRequest,
    admin: dict = Depends(require_admin),
    service: CheckinService = Depends(get_checkin_service),
):
    """Commit a check-in after staff reviewed the resolved membership"""
    return unwrap(
        service.record_checkin(
            request.qr_code,
            request.membership_id,
            member_id=request.member_id,
            timestamp=request.checkin_time,
            snapshot=request.snapshot,
            manual_entry=request.manual_entry,
            admin_id=admin["user_id"],
        )
    )


@router.get("/membership/{membership_id}")
def get_membership_checkins(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: CheckinService = Depends(get_checkin_service),
):
    """Check-in history of one membership, newest first"""
    return unwrap(service.get_membership_checkins(membership_id))
