from datetime import datetime
from typing import Iterable, List, Optional

from gymdesk.db import Database

MEMBERSHIP_COLUMNS = (
    "member_id", "checkin_code", "plan_type", "amount", "payment_method",
    "status", "start_date", "end_date", "applied_at", "approved_at",
    "approved_by", "declined_at", "decline_reason",
    "first_name", "last_name", "email", "phone", "avatar",
    "created_at", "updated_at",
)


class MembershipRepository:
    def __init__(self, db: Database):
        self.db = db

    def get(self, membership_id: int) -> Optional[dict]:
        with self.db.transaction() as cursor:
            cursor.execute("SELECT * FROM memberships WHERE id = %s", (membership_id,))
            return cursor.fetchone()

    def find_by_member(self, member_id: int, statuses: Optional[Iterable[str]] = None) -> List[dict]:
        """Memberships of a member, newest application first."""
        where_clauses = ["member_id = %s"]
        params = [member_id]

        if statuses:
            statuses = [str(s.value if hasattr(s, "value") else s) for s in statuses]
            where_clauses.append(f"status IN ({', '.join(['%s'] * len(statuses))})")
            params.extend(statuses)

        with self.db.transaction() as cursor:
            cursor.execute(
                f"""
                SELECT * FROM memberships
                WHERE {" AND ".join(where_clauses)}
                ORDER BY applied_at DESC, id DESC
                """,
                params,
            )
            return cursor.fetchall()

    def find_by_checkin_code(self, checkin_code: str) -> List[dict]:
        """All memberships sharing a check-in code, newest application first."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT * FROM memberships
                WHERE checkin_code = %s
                ORDER BY applied_at DESC, id DESC
                """,
                (checkin_code,),
            )
            return cursor.fetchall()

    def list(self, status: Optional[str] = None) -> List[dict]:
        with self.db.transaction() as cursor:
            if status:
                cursor.execute(
                    "SELECT * FROM memberships WHERE status = %s ORDER BY created_at DESC, id DESC",
                    (status,),
                )
            else:
                cursor.execute("SELECT * FROM memberships ORDER BY created_at DESC, id DESC")
            return cursor.fetchall()

    def list_current_active(self, now: datetime) -> List[dict]:
        """Active memberships whose period has not ended, ordered by member name."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT * FROM memberships
                WHERE status = 'Active' AND end_date >= %s
                ORDER BY first_name ASC, last_name ASC
                """,
                (now,),
            )
            return cursor.fetchall()

    def insert(self, membership: dict) -> int:
        columns = [c for c in MEMBERSHIP_COLUMNS if c in membership]
        with self.db.transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO memberships ({", ".join(columns)})
                VALUES ({", ".join(["%s"] * len(columns))})
                """,
                [_db_value(membership[c]) for c in columns],
            )
            return cursor.lastrowid

    def update(self, membership_id: int, fields: dict, expected_status: Optional[str] = None) -> bool:
        """
        Update one membership. With ``expected_status`` the row is only
        touched while it still has that status, so a concurrent transition
        makes this return False instead of overwriting it.
        """
        columns = [c for c in fields if c in MEMBERSHIP_COLUMNS]
        params = [_db_value(fields[c]) for c in columns]
        where_sql = "id = %s"
        params.append(membership_id)
        if expected_status is not None:
            where_sql += " AND status = %s"
            params.append(_db_value(expected_status))

        with self.db.transaction() as cursor:
            cursor.execute(
                f"UPDATE memberships SET {', '.join(f'{c} = %s' for c in columns)} WHERE {where_sql}",
                params,
            )
            return cursor.rowcount > 0

    def expire_active_before(self, now: datetime) -> int:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE memberships
                SET status = 'Expired', updated_at = %s
                WHERE status = 'Active'
                  AND end_date IS NOT NULL
                  AND end_date < %s
                """,
                (now, now),
            )
            return cursor.rowcount


def _db_value(value):
    return value.value if hasattr(value, "value") else value
