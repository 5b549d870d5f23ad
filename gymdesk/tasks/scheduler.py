"""
Scheduler module: APScheduler setup for background cron jobs
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from gymdesk import config
from gymdesk.db import Database
from gymdesk.tasks.membership_jobs import job_expire_memberships

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def start_scheduler(db: Database):
    """Register all cron jobs and start the scheduler."""

    # Mark memberships past their end_date as Expired, daily at 00:05 by default
    scheduler.add_job(
        job_expire_memberships,
        trigger=CronTrigger(hour=config.EXPIRY_SWEEP_HOUR, minute=config.EXPIRY_SWEEP_MINUTE),
        args=[db],
        id="expire_memberships",
        name="Expire ended memberships",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
