from typing import Optional

from gymdesk.db import Database


class MemberRepository:
    """Read access to member accounts (owned by the account/registration layer)."""

    def __init__(self, db: Database):
        self.db = db

    def get_member(self, member_id: int) -> Optional[dict]:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                SELECT id, first_name, last_name, email, phone, avatar, checkin_code
                FROM users
                WHERE id = %s AND is_admin = 0
                """,
                (member_id,),
            )
            return cursor.fetchone()

    def set_checkin_code(self, member_id: int, checkin_code: str) -> bool:
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE users SET checkin_code = %s WHERE id = %s AND checkin_code IS NULL",
                (checkin_code, member_id),
            )
            return cursor.rowcount > 0
