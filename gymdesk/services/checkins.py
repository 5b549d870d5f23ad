"""
QR check-in.

Staff scan (or type) a member's code, review the resolved membership, then
commit the check-in. The two steps are separate calls; the one-per-day rule
is enforced again when the check-in is recorded.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from gymdesk.core import results
from gymdesk.core.dates import day_bounds, format_date, to_datetime
from gymdesk.core.enums import MembershipStatus
from gymdesk.core.qr import extract_checkin_code
from gymdesk.core.results import DuplicateCheckinError, fail, internal_error, ok
from gymdesk.core.status import resolve_status
from gymdesk.utils.helpers import member_full_name

logger = logging.getLogger(__name__)

# Membership fields copied onto each check-in row
SNAPSHOT_FIELDS = (
    "plan_type", "first_name", "last_name", "email", "phone",
    "start_date", "end_date", "applied_at",
)
SNAPSHOT_DATE_FIELDS = ("start_date", "end_date", "applied_at")


class CheckinService:
    def __init__(
        self,
        memberships,
        checkins,
        notifications,
        audit,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.memberships = memberships
        self.checkins = checkins
        self.notifications = notifications
        self.audit = audit
        self.clock = clock

    def resolve_checkin(self, code) -> dict:
        """Find the membership a scanned code may check in with. Never writes."""
        checkin_code = extract_checkin_code(code)
        if not checkin_code:
            return fail(results.INVALID_QR_CODE, "No QR code ID found in input")

        try:
            memberships = self.memberships.find_by_checkin_code(checkin_code)
            if not memberships:
                return fail(results.MEMBERSHIP_NOT_FOUND, "No membership found for this QR code")

            active = next((m for m in memberships if m["status"] == MembershipStatus.ACTIVE), None)
            if active is None:
                latest = memberships[0]
                latest_status = getattr(latest["status"], "value", latest["status"])
                return fail(
                    results.NO_ACTIVE_MEMBERSHIP,
                    f'No active membership found. Most recent membership status: "{latest_status}" '
                    f"(applied on {format_date(latest.get('applied_at'))})",
                )

            now = self.clock()
            end_date = to_datetime(active.get("end_date"))
            if end_date is None or now > end_date:
                return fail(results.MEMBERSHIP_EXPIRED, f"Membership expired on {format_date(end_date)}")

            day_start, day_end = day_bounds(now)
            already_checked_in = self.checkins.find_in_window(checkin_code, day_start, day_end) is not None
        except Exception as e:
            logger.error(f"Error resolving check-in for code {checkin_code}: {e}", exc_info=True)
            return internal_error("look up membership")

        logger.info("Check-in code %s resolved to membership #%s", checkin_code, active["id"])
        return ok(
            "Membership verified. Review the member details and confirm the check-in.",
            checkin_code=checkin_code,
            membership=active,
            resolved_status=resolve_status(active, now).to_dict(),
            already_checked_in=already_checked_in,
        )

    def record_checkin(
        self,
        code,
        membership_id,
        member_id=None,
        timestamp=None,
        snapshot: Optional[dict] = None,
        manual_entry: bool = False,
        admin_id=None,
    ) -> dict:
        checkin_code = extract_checkin_code(code)
        if not checkin_code or not membership_id:
            return fail(results.VALIDATION_ERROR, "QR code ID and membership ID are required")

        if timestamp is None:
            checkin_time = self.clock()
        else:
            checkin_time = to_datetime(timestamp)
            if checkin_time is None:
                return fail(results.VALIDATION_ERROR, f"Invalid check-in time: {timestamp}")

        try:
            day_start, day_end = day_bounds(checkin_time)
            if self.checkins.find_in_window(checkin_code, day_start, day_end):
                return fail(results.ALREADY_CHECKED_IN, "Member already checked in today")

            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            if membership.get("checkin_code") != checkin_code:
                return fail(results.CHECKIN_CODE_MISMATCH, "This QR code does not belong to the selected membership")

            if member_id is not None and str(member_id) != str(membership["member_id"]):
                return fail(results.VALIDATION_ERROR, "Member does not own the selected membership")

            checkin = {
                "checkin_code": checkin_code,
                "membership_id": membership["id"],
                "member_id": membership["member_id"],
                "checkin_time": checkin_time,
                **_build_snapshot(membership, snapshot),
                "manual_entry": bool(manual_entry),
                "checked_in_by": admin_id,
                "status": "checked_in",
                "created_at": self.clock(),
            }
            checkin_id = self.checkins.insert(checkin)
        except DuplicateCheckinError:
            return fail(results.ALREADY_CHECKED_IN, "Member already checked in today")
        except Exception as e:
            logger.error(f"Error recording check-in for code {checkin_code}: {e}", exc_info=True)
            return internal_error("record check-in")

        member_name = member_full_name(checkin)
        logger.info(
            "Check-in #%s recorded for %s (membership #%s, %s)",
            checkin_id, member_name, membership["id"], "manual" if manual_entry else "scan",
        )

        if admin_id:
            try:
                self.audit.record_admin_action(
                    "member_checkin",
                    admin_id,
                    membership["id"],
                    {
                        "member_name": member_name,
                        "checkin_code": checkin_code,
                        "checkin_time": checkin_time,
                        "plan_type": checkin["plan_type"],
                        "manual_entry": bool(manual_entry),
                    },
                    self.clock(),
                )
            except Exception as e:
                logger.warning(f"Audit logging failed for check-in #{checkin_id}: {e}")

        try:
            self.notifications.notify(
                membership["member_id"],
                "Check-in Successful",
                f"Hello {checkin.get('first_name') or member_name}! You have been successfully "
                f"checked in at {checkin_time.strftime('%I:%M %p')}.",
                "success",
                membership["id"],
            )
        except Exception as e:
            logger.warning(f"Check-in notification for member #{membership['member_id']} failed: {e}")

        return ok(
            "Check-in recorded successfully",
            checkin_id=checkin_id,
            checkin_time=checkin_time,
            membership_id=membership["id"],
            manual_entry=bool(manual_entry),
        )

    def get_membership_checkins(self, membership_id) -> dict:
        try:
            checkins = self.checkins.find_by_membership(membership_id)
        except Exception as e:
            logger.error(f"Error getting check-ins for membership #{membership_id}: {e}", exc_info=True)
            return internal_error("load check-ins")

        return ok(checkins=checkins, total=len(checkins))


def _build_snapshot(membership: dict, overrides: Optional[dict]) -> dict:
    snapshot = {field: membership.get(field) for field in SNAPSHOT_FIELDS}
    for field in SNAPSHOT_FIELDS:
        if overrides and overrides.get(field) is not None:
            value = overrides[field]
            if field in SNAPSHOT_DATE_FIELDS:
                value = to_datetime(value) or snapshot[field]
            snapshot[field] = value
    snapshot["plan_type"] = getattr(snapshot["plan_type"], "value", snapshot["plan_type"])
    return snapshot
