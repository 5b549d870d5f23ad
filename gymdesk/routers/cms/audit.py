"""
CMS Audit Router - Admin action trail
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from gymdesk.dependencies import get_audit_logger
from gymdesk.middleware import require_admin
from gymdesk.utils.audit import AuditLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audit", tags=["CMS - Audit"])


@router.get("/actions")
def get_admin_actions(
    admin_id: Optional[int] = Query(None),
    action_type: Optional[str] = Query(None),
    sort_order: str = Query("newest", pattern="^(newest|oldest)$"),
    admin: dict = Depends(require_admin),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """List admin actions, optionally for one admin or one action type"""
    if action_type == "all":
        action_type = None

    try:
        actions = audit.list_actions(
            actor_id=admin_id,
            action=action_type,
            newest_first=sort_order == "newest",
        )
    except Exception as e:
        logger.error(f"Error fetching admin actions: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": "INTERNAL_ERROR", "message": "Failed to load admin actions"},
        )

    return {"success": True, "actions": actions, "total": len(actions)}
