"""
Audit Logging Utility
Admin action trail for membership and check-in operations
"""
import json
import logging
from datetime import datetime
from typing import Optional, Dict, Any, List

from gymdesk.db import Database

logger = logging.getLogger(__name__)


class AuditLogger:
    """Writes one ``admin_actions`` row per admin-triggered operation."""

    def __init__(self, db: Database):
        self.db = db

    def record_admin_action(
        self,
        kind: str,
        actor_id,
        target_id,
        details: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> int:
        """
        Log an admin action to the admin_actions table

        Args:
            kind: Action performed (approve_membership, member_checkin, ...)
            actor_id: ID of the admin performing the action
            target_id: ID of the membership being acted on
            details: Old/new values and other context
            timestamp: When the action happened (defaults to now)
        """
        details_json = json.dumps(sanitize_for_audit(details), default=str) if details else None

        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO admin_actions (
                    action, actor_id, target_id, details, created_at
                ) VALUES (%s, %s, %s, %s, %s)
                """,
                (kind, actor_id, target_id, details_json, timestamp or datetime.now()),
            )
            return cursor.lastrowid

    def list_actions(
        self,
        actor_id: Optional[int] = None,
        action: Optional[str] = None,
        newest_first: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Read back the admin action trail

        Args:
            actor_id: Only actions performed by this admin
            action: Only this kind of action (approve_membership, ...)
            newest_first: Sort by time descending (default) or ascending
        """
        conditions = []
        params = []
        if actor_id is not None:
            conditions.append("a.actor_id = %s")
            params.append(actor_id)
        if action:
            conditions.append("a.action = %s")
            params.append(action)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if newest_first else "ASC"

        with self.db.transaction() as cursor:
            cursor.execute(
                f"""
                SELECT a.id, a.action, a.actor_id, a.target_id, a.details, a.created_at,
                       u.first_name AS actor_first_name, u.last_name AS actor_last_name
                FROM admin_actions a
                LEFT JOIN users u ON u.id = a.actor_id
                {where}
                ORDER BY a.created_at {direction}, a.id {direction}
                """,
                tuple(params),
            )
            rows = cursor.fetchall()

        for row in rows:
            if isinstance(row.get("details"), (str, bytes)):
                row["details"] = json.loads(row["details"])
        return list(rows)


def sanitize_for_audit(data: Dict[str, Any], exclude_fields: list = None) -> Dict[str, Any]:
    """
    Sanitize data for audit logging (remove sensitive fields)

    Args:
        data: Data dictionary
        exclude_fields: List of field names to exclude (e.g., passwords)

    Returns:
        Sanitized dictionary
    """
    if not data:
        return {}

    # Default sensitive fields to exclude
    default_excludes = ['password', 'pin', 'token', 'secret', 'credential']
    exclude_fields = exclude_fields or []
    all_excludes = default_excludes + exclude_fields

    # Create copy and remove sensitive fields
    sanitized = dict(data)
    for field in all_excludes:
        if field in sanitized:
            sanitized[field] = "***REDACTED***"

    return sanitized
