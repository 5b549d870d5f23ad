from datetime import datetime
from typing import List, Optional

import pymysql

from gymdesk.core.results import DuplicateCheckinError
from gymdesk.db import Database

CHECKIN_COLUMNS = (
    "checkin_code", "membership_id", "member_id", "checkin_time",
    "plan_type", "first_name", "last_name", "email", "phone",
    "start_date", "end_date", "applied_at",
    "manual_entry", "checked_in_by", "status", "created_at",
)

# MySQL error code for a duplicate key on INSERT
ER_DUP_ENTRY = 1062


class CheckinRepository:
    def __init__(self, db: Database):
        self.db = db

    def find_in_window(self, checkin_code: str, start: datetime, end: datetime) -> Optional[dict]:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT * FROM member_checkins
                WHERE checkin_code = %s AND checkin_time BETWEEN %s AND %s
                ORDER BY checkin_time ASC
                LIMIT 1
                """,
                (checkin_code, start, end),
            )
            return cursor.fetchone()

    def insert(self, checkin: dict) -> int:
        columns = [c for c in CHECKIN_COLUMNS if c in checkin]
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO member_checkins ({", ".join(columns)})
                    VALUES ({", ".join(["%s"] * len(columns))})
                    """,
                    [_db_value(checkin[c]) for c in columns],
                )
                return cursor.lastrowid
        except pymysql.err.IntegrityError as e:
            if e.args and e.args[0] == ER_DUP_ENTRY:
                raise DuplicateCheckinError(checkin.get("checkin_code")) from e
            raise

    def find_by_membership(self, membership_id: int) -> List[dict]:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT * FROM member_checkins
                WHERE membership_id = %s
                ORDER BY checkin_time DESC
                """,
                (membership_id,),
            )
            return cursor.fetchall()

    def find_between(self, start: datetime, end: datetime) -> List[dict]:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT * FROM member_checkins
                WHERE checkin_time BETWEEN %s AND %s
                ORDER BY checkin_time DESC
                """,
                (start, end),
            )
            return cursor.fetchall()


def _db_value(value):
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, bool):
        return 1 if value else 0
    return value
