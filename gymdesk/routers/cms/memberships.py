"""
CMS Memberships Router - Admin management of memberships
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from gymdesk.core.enums import PlanType
from gymdesk.dependencies import get_membership_service, unwrap
from gymdesk.middleware import require_admin
from gymdesk.services.memberships import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships", tags=["CMS - Memberships"])


# ============== Request Models ==============

class DeclineMembershipRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ExtendMembershipRequest(BaseModel):
    months: int = Field(..., gt=0, le=24)


class ChangePlanRequest(BaseModel):
    new_plan: PlanType
    start_date: Optional[date] = None


# ============== Endpoints ==============

@router.get("")
def get_all_memberships(
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Get all memberships with their calculated status"""
    return unwrap(service.list_memberships(status_filter))


@router.post("/sweep-expired")
def sweep_expired_memberships(
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Mark every Active membership past its end date as Expired"""
    logger.info("Expire sweep requested by admin #%s", admin["user_id"])
    return unwrap(service.sweep_expired())


@router.get("/{membership_id}")
def get_membership_detail(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Get membership detail"""
    return unwrap(service.get_membership(membership_id))


@router.post("/{membership_id}/approve")
def approve_membership(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Approve a pending membership; the period starts today"""
    return unwrap(service.approve_membership(membership_id, admin["user_id"]))


@router.post("/{membership_id}/decline")
def decline_membership(
    membership_id: int,
    request: DeclineMembershipRequest,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Decline a pending membership"""
    return unwrap(service.decline_membership(membership_id, admin["user_id"], request.reason))


@router.post("/{membership_id}/extend")
def extend_membership(
    membership_id: int,
    request: ExtendMembershipRequest,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Extend a membership by whole calendar months"""
    return unwrap(service.extend_membership(membership_id, request.months, admin["user_id"]))


@router.post("/{membership_id}/change-plan")
def change_membership_plan(
    membership_id: int,
    request: ChangePlanRequest,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """Switch plan and restart the membership period"""
    return unwrap(
        service.change_plan(membership_id, request.new_plan, admin["user_id"], request.start_date)
    )


@router.post("/{membership_id}/withdraw")
def withdraw_membership(
    membership_id: int,
    admin: dict = Depends(require_admin),
    service: MembershipService = Depends(get_membership_service),
):
    """End an active membership immediately"""
    return unwrap(service.withdraw_membership(membership_id, admin["user_id"]))
