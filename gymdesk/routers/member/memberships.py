"""
Member Memberships Router - Member's membership endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from gymdesk.dependencies import get_membership_service, unwrap
from gymdesk.middleware import verify_bearer_token
from gymdesk.services.memberships import MembershipService

router = APIRouter(prefix="/memberships", tags=["Member - Memberships"])


# ============== Request Models ==============

class ApplyMembershipRequest(BaseModel):
    plan_type: str = Field(..., min_length=1, max_length=20)
    payment_method: Optional[str] = Field(None, max_length=50)


# ============== Endpoints ==============

@router.post("/apply")
def apply_membership(
    request: ApplyMembershipRequest,
    auth: dict = Depends(verify_bearer_token),
    service: MembershipService = Depends(get_membership_service),
):
    """Apply for a membership plan; it stays Pending until an admin approves it"""
    return unwrap(service.apply_membership(auth["user_id"], request.plan_type, request.payment_method))


@router.get("/current")
def get_current_membership(
    auth: dict = Depends(verify_bearer_token),
    service: MembershipService = Depends(get_membership_service),
):
    """Current membership of the logged-in member with its calculated status"""
    return unwrap(service.get_member_summary(auth["user_id"]))


@router.get("/status")
def get_membership_status(
    auth: dict = Depends(verify_bearer_token),
    service: MembershipService = Depends(get_membership_service),
):
    """Whether the logged-in member has an active and/or pending membership"""
    return unwrap(service.get_member_membership_status(auth["user_id"]))


@router.get("/history")
def get_membership_history(
    auth: dict = Depends(verify_bearer_token),
    service: MembershipService = Depends(get_membership_service),
):
    """All memberships of the logged-in member, newest first"""
    return unwrap(service.get_member_history(auth["user_id"]))
