"""
In-memory stand-ins for the MySQL repositories and side-effect sinks.

They expose the same methods as the classes in gymdesk.repositories and
gymdesk.utils, with the same ordering and uniqueness rules.
"""
from copy import deepcopy
from datetime import datetime, timedelta

from gymdesk.core.results import DuplicateCheckinError


def _value(value):
    return value.value if hasattr(value, "value") else value


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeMemberRepository:
    def __init__(self):
        self.members = {}

    def add(self, member_id, first_name="Jane", last_name="Doe", checkin_code="GYM-TEST000001", **extra):
        self.members[member_id] = {
            "id": member_id,
            "first_name": first_name,
            "last_name": last_name,
            "email": f"member{member_id}@example.com",
            "phone": "555-0100",
            "avatar": None,
            "checkin_code": checkin_code,
            **extra,
        }
        return self.members[member_id]

    def get_member(self, member_id):
        member = self.members.get(member_id)
        return dict(member) if member else None

    def set_checkin_code(self, member_id, checkin_code):
        member = self.members.get(member_id)
        if not member or member.get("checkin_code"):
            return False
        member["checkin_code"] = checkin_code
        return True


class FakeMembershipRepository:
    def __init__(self):
        self.rows = {}
        self._next_id = 1

    def add(self, **fields) -> dict:
        """Seed a row directly, bypassing the service."""
        membership_id = self.insert(fields)
        return self.rows[membership_id]

    def get(self, membership_id):
        row = self.rows.get(membership_id)
        return dict(row) if row else None

    def find_by_member(self, member_id, statuses=None):
        wanted = {_value(s) for s in statuses} if statuses else None
        rows = [
            r for r in self.rows.values()
            if r["member_id"] == member_id and (wanted is None or r["status"] in wanted)
        ]
        return self._newest_first(rows)

    def find_by_checkin_code(self, checkin_code):
        return self._newest_first(r for r in self.rows.values() if r["checkin_code"] == checkin_code)

    def list(self, status=None):
        rows = [r for r in self.rows.values() if status is None or r["status"] == status]
        rows.sort(key=lambda r: (r.get("created_at") or datetime.min, r["id"]), reverse=True)
        return [dict(r) for r in rows]

    def list_current_active(self, now):
        rows = [
            r for r in self.rows.values()
            if r["status"] == "Active" and r.get("end_date") is not None and r["end_date"] >= now
        ]
        rows.sort(key=lambda r: (r.get("first_name") or "", r.get("last_name") or ""))
        return [dict(r) for r in rows]

    def insert(self, membership):
        membership_id = self._next_id
        self._next_id += 1
        row = {key: _value(value) for key, value in membership.items()}
        row["id"] = membership_id
        row.setdefault("created_at", row.get("applied_at"))
        self.rows[membership_id] = row
        return membership_id

    def update(self, membership_id, fields, expected_status=None):
        row = self.rows.get(membership_id)
        if row is None:
            return False
        if expected_status is not None and row["status"] != _value(expected_status):
            return False
        row.update({key: _value(value) for key, value in fields.items()})
        return True

    def expire_active_before(self, now):
        count = 0
        for row in self.rows.values():
            if row["status"] == "Active" and row.get("end_date") is not None and row["end_date"] < now:
                row["status"] = "Expired"
                row["updated_at"] = now
                count += 1
        return count

    @staticmethod
    def _newest_first(rows):
        ordered = sorted(rows, key=lambda r: (r.get("applied_at") or datetime.min, r["id"]), reverse=True)
        return [dict(r) for r in ordered]


class FakeCheckinRepository:
    def __init__(self):
        self.rows = {}
        self._next_id = 1

    def find_in_window(self, checkin_code, start, end):
        matches = [
            r for r in self.rows.values()
            if r["checkin_code"] == checkin_code and start <= r["checkin_time"] <= end
        ]
        matches.sort(key=lambda r: r["checkin_time"])
        return dict(matches[0]) if matches else None

    def insert(self, checkin):
        # Mirrors UNIQUE(checkin_code, checkin_day)
        day = checkin["checkin_time"].date()
        for row in self.rows.values():
            if row["checkin_code"] == checkin["checkin_code"] and row["checkin_time"].date() == day:
                raise DuplicateCheckinError(checkin["checkin_code"])

        checkin_id = self._next_id
        self._next_id += 1
        self.rows[checkin_id] = {**deepcopy(checkin), "id": checkin_id}
        return checkin_id

    def find_by_membership(self, membership_id):
        rows = [r for r in self.rows.values() if r["membership_id"] == membership_id]
        rows.sort(key=lambda r: r["checkin_time"], reverse=True)
        return [dict(r) for r in rows]

    def find_between(self, start, end):
        rows = [r for r in self.rows.values() if start <= r["checkin_time"] <= end]
        rows.sort(key=lambda r: r["checkin_time"], reverse=True)
        return [dict(r) for r in rows]


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def notify(self, member_id, title, message, kind="info", related_id=None):
        self.sent.append(
            {"member_id": member_id, "title": title, "message": message, "kind": kind, "related_id": related_id}
        )
        return len(self.sent)


class RecordingAudit:
    def __init__(self):
        self.actions = []

    def record_admin_action(self, kind, actor_id, target_id, details=None, timestamp=None):
        self.actions.append(
            {"kind": kind, "actor_id": actor_id, "target_id": target_id, "details": details, "timestamp": timestamp}
        )
        return len(self.actions)

    def list_actions(self, actor_id=None, action=None, newest_first=True):
        rows = [
            {
                "id": index,
                "action": entry["kind"],
                "actor_id": entry["actor_id"],
                "target_id": entry["target_id"],
                "details": entry["details"],
                "created_at": entry["timestamp"],
            }
            for index, entry in enumerate(self.actions, start=1)
            if (actor_id is None or entry["actor_id"] == actor_id) and (not action or entry["kind"] == action)
        ]
        rows.sort(key=lambda r: (r["created_at"] or datetime.min, r["id"]), reverse=newest_first)
        return rows


class BrokenSink:
    """Notification and audit sink whose storage is down."""

    def notify(self, *args, **kwargs):
        raise RuntimeError("notifications table unavailable")

    def record_admin_action(self, *args, **kwargs):
        raise RuntimeError("admin_actions table unavailable")


class BrokenMembershipRepository(FakeMembershipRepository):
    def get(self, membership_id):
        raise RuntimeError("connection lost")

    def expire_active_before(self, now):
        raise RuntimeError("connection lost")
