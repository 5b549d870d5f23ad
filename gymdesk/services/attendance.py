"""
Attendance statistics derived from the check-in log.

Nothing here is stored; every figure is recomputed from memberships and
check-ins against the current date.
"""
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Set

from gymdesk.core import results
from gymdesk.core.dates import calculate_remaining_days, day_bounds, iter_days, to_datetime
from gymdesk.core.enums import MembershipStatus, PlanType
from gymdesk.core.results import fail, internal_error, ok

logger = logging.getLogger(__name__)

AVG_ATTENDANCE_DAYS = 7


def unique_checkin_days(checkins: Iterable[dict]) -> Set[date]:
    """Distinct local calendar dates with at least one check-in."""
    days = set()
    for checkin in checkins:
        checkin_time = to_datetime(checkin.get("checkin_time"))
        if checkin_time is not None:
            days.add(checkin_time.date())
    return days


def possible_checkin_days(membership: dict, today: date) -> List[date]:
    """Days from the start date through min(today, end date), inclusive."""
    start = to_datetime(membership.get("start_date"))
    end = to_datetime(membership.get("end_date"))
    if start is None or end is None:
        return []
    return list(iter_days(start.date(), min(today, end.date())))


def count_missed_days(membership: dict, checkin_days: Set[date], today: date) -> int:
    return sum(1 for day in possible_checkin_days(membership, today) if day not in checkin_days)


def calculate_checkin_rate(unique_days: int, possible_days: int) -> int:
    """Percentage of possible days attended, rounded half up; 0 when nothing was possible."""
    if possible_days <= 0:
        return 0
    return (200 * unique_days + possible_days) // (2 * possible_days)


def build_attendance_stats(membership: dict, checkins: List[dict], today: date) -> dict:
    checkin_days = unique_checkin_days(checkins)
    possible_days = possible_checkin_days(membership, today)
    missed_days = count_missed_days(membership, checkin_days, today)
    last_checkin = max(
        (to_datetime(c.get("checkin_time")) for c in checkins if c.get("checkin_time")),
        default=None,
    )
    return {
        "unique_checkin_days": len(checkin_days),
        "missed_days": missed_days,
        "checkin_rate": calculate_checkin_rate(len(checkin_days), len(possible_days)),
        "total_possible_days": len(possible_days),
        "total_checkins": len(checkins),
        "last_checkin": last_checkin,
    }


class AttendanceService:
    def __init__(self, memberships, checkins, clock: Callable[[], datetime] = datetime.now):
        self.memberships = memberships
        self.checkins = checkins
        self.clock = clock

    def get_attendance_stats(self, membership_id) -> dict:
        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")
            checkins = self.checkins.find_by_membership(membership_id)
        except Exception as e:
            logger.error(f"Error getting attendance stats: {e}", exc_info=True)
            return internal_error("calculate attendance")

        return ok(membership_id=membership_id, **build_attendance_stats(membership, checkins, self.clock().date()))

    def get_member_details(self, membership_id) -> dict:
        """Membership, its check-ins (newest first) and attendance statistics."""
        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")
            checkins = self.checkins.find_by_membership(membership_id)
        except Exception as e:
            logger.error(f"Error fetching member details: {e}", exc_info=True)
            return internal_error("load member details")

        return ok(
            membership=membership,
            checkins=checkins,
            statistics=build_attendance_stats(membership, checkins, self.clock().date()),
        )

    def list_active_members(self) -> dict:
        """Members whose Active membership has not ended yet, with attendance figures."""
        now = self.clock()
        try:
            active_memberships = self.memberships.list_current_active(now)
            members = []
            for membership in active_memberships:
                checkins = self.checkins.find_by_membership(membership["id"])
                stats = build_attendance_stats(membership, checkins, now.date())
                members.append(
                    {
                        "membership_id": membership["id"],
                        "member_id": membership["member_id"],
                        "checkin_code": membership["checkin_code"],
                        "first_name": membership.get("first_name"),
                        "last_name": membership.get("last_name"),
                        "email": membership.get("email"),
                        "phone": membership.get("phone"),
                        "avatar": membership.get("avatar"),
                        "plan_type": membership["plan_type"],
                        "start_date": membership.get("start_date"),
                        "end_date": membership.get("end_date"),
                        "remaining_days": calculate_remaining_days(membership.get("end_date"), now),
                        "total_checkins": stats["total_checkins"],
                        "missed_checkins": stats["missed_days"],
                        "last_checkin": stats["last_checkin"],
                    }
                )
        except Exception as e:
            logger.error(f"Error fetching active members: {e}", exc_info=True)
            return internal_error("load active members")

        return ok(members=members, total_count=len(members))

    def get_overview_stats(self) -> dict:
        """Dashboard counters: active members, pending applications, today's traffic, revenue."""
        now = self.clock()
        try:
            active_memberships = self.memberships.list_current_active(now)
            pending = self.memberships.list(MembershipStatus.PENDING.value)

            today_start, today_end = day_bounds(now)
            today_checkins = self.checkins.find_between(today_start, today_end)

            week_start, _ = day_bounds(now - timedelta(days=AVG_ATTENDANCE_DAYS))
            recent_checkins = self.checkins.find_between(week_start, now)
        except Exception as e:
            logger.error(f"Error fetching overview stats: {e}", exc_info=True)
            return internal_error("load overview statistics")

        return ok(
            active_members=len(active_memberships),
            pending_applications=len(pending),
            today_checkins=len(today_checkins),
            monthly_revenue=round(sum(_monthly_amount(m) for m in active_memberships)),
            avg_attendance=_average_daily_attendance(recent_checkins),
        )


def _monthly_amount(membership: dict) -> float:
    try:
        months = PlanType.parse(membership["plan_type"]).months
    except ValueError:
        return 0
    return float(membership.get("amount") or 0) / months


def _average_daily_attendance(checkins: List[dict]) -> float:
    per_day = Counter()
    for checkin in checkins:
        checkin_time = to_datetime(checkin.get("checkin_time"))
        if checkin_time is not None:
            per_day[checkin_time.date()] += 1
    if not per_day:
        return 0.0
    return round(sum(per_day.values()) / len(per_day), 1)
