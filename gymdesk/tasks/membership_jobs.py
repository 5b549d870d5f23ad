"""
Membership cron jobs:
  1. Mark expired memberships
"""
import logging

from gymdesk.db import Database
from gymdesk.services import build_membership_service

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# 1. MARK EXPIRED MEMBERSHIPS
# ─────────────────────────────────────────────
def job_expire_memberships(db: Database):
    """
    Active memberships whose end_date has passed
    → status becomes 'Expired'. Safe to run any number of times.
    """
    try:
        result = build_membership_service(db).sweep_expired()
        if result["success"]:
            logger.info("Expire job done, %d memberships marked as expired", result["updated_count"])
        else:
            logger.error("Expire job failed: %s", result["message"])
    except Exception as e:
        logger.error("Error in job_expire_memberships: %s", e, exc_info=True)
