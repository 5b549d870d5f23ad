"""
CMS Members Router - Check-in code assignment
"""
import logging

import pymysql
from fastapi import APIRouter, Depends, HTTPException, status

from gymdesk.dependencies import get_member_repository
from gymdesk.middleware import require_admin
from gymdesk.repositories import MemberRepository
from gymdesk.utils.helpers import generate_checkin_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["CMS - Members"])

MAX_CODE_ATTEMPTS = 5


@router.post("/{member_id}/checkin-code")
def assign_checkin_code(
    member_id: int,
    admin: dict = Depends(require_admin),
    members: MemberRepository = Depends(get_member_repository),
):
    """Give a member their permanent QR check-in code (idempotent)"""
    member = members.get_member(member_id)
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error_code": "MEMBER_NOT_FOUND", "message": "Member not found"},
        )

    if member.get("checkin_code"):
        return {
            "success": True,
            "message": "Member already has a check-in code",
            "checkin_code": member["checkin_code"],
        }

    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_checkin_code()
        try:
            assigned = members.set_checkin_code(member_id, code)
        except pymysql.err.IntegrityError as e:
            # users.checkin_code is UNIQUE; a collision just means another draw
            logger.warning(f"Check-in code {code} already taken: {e}")
            continue
        except Exception as e:
            logger.error(f"Error assigning check-in code: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error_code": "INTERNAL_ERROR", "message": "Failed to assign check-in code"},
            )

        if not assigned:
            # Someone assigned a code in the meantime
            member = members.get_member(member_id)
            return {
                "success": True,
                "message": "Member already has a check-in code",
                "checkin_code": member["checkin_code"],
            }

        logger.info("Check-in code assigned to member #%s by admin #%s", member_id, admin["user_id"])
        return {"success": True, "message": "Check-in code assigned", "checkin_code": code}

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error_code": "INTERNAL_ERROR", "message": "Failed to assign check-in code"},
    )
