"""
In-app notifications shown to members (bell icon on the member dashboard).
"""
import logging
from datetime import datetime

from gymdesk.db import Database

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("info", "success", "warning", "error")


class NotificationSink:
    def __init__(self, db: Database):
        self.db = db

    def notify(self, member_id, title: str, message: str, kind: str = "info", related_id=None) -> int:
        if kind not in NOTIFICATION_TYPES:
            kind = "info"

        now = datetime.now()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO notifications
                (member_id, title, message, type, related_id, is_read, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, 0, %s, %s)
                """,
                (member_id, title, message, kind, related_id, now, now),
            )
            notification_id = cursor.lastrowid

        logger.info("Notification #%s (%s) sent to member #%s", notification_id, kind, member_id)
        return notification_id
