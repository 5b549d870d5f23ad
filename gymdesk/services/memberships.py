"""
Membership lifecycle: apply, approve, decline, extend, change plan,
withdraw and the expiry sweep.

State machine::

    Pending -> Active -> Expired (sweep / withdraw)
    Pending -> Declined

A member may apply again once no Pending or Active membership exists.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from gymdesk.core import results
from gymdesk.core.dates import (
    add_months,
    calculate_end_date,
    end_of_day,
    format_date,
    start_of_day,
    to_datetime,
)
from gymdesk.core.enums import DEFAULT_PAYMENT_METHOD, MembershipStatus, PlanType
from gymdesk.core.results import fail, internal_error, ok
from gymdesk.core.status import resolve_status

logger = logging.getLogger(__name__)


class MembershipService:
    def __init__(
        self,
        memberships,
        members,
        notifications,
        audit,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.memberships = memberships
        self.members = members
        self.notifications = notifications
        self.audit = audit
        self.clock = clock

    # ============== Member operations ==============

    def apply_membership(self, member_id, plan_type, payment_method: Optional[str] = None) -> dict:
        if not member_id or not plan_type:
            return fail(results.VALIDATION_ERROR, "Member ID and plan type are required")

        try:
            plan = PlanType.parse(plan_type)
        except ValueError:
            return fail(
                results.INVALID_PLAN,
                f"Invalid plan type: {plan_type}. Choose one of {', '.join(p.value for p in PlanType)}.",
            )

        try:
            member = self.members.get_member(member_id)
            if not member:
                return fail(results.MEMBER_NOT_FOUND, "Member not found")

            checkin_code = member.get("checkin_code")
            if not checkin_code:
                return fail(
                    results.CHECKIN_CODE_MISSING,
                    "Member does not have a QR code ID. Please contact support.",
                )

            now = self.clock()
            conflict, stale = self._check_open_memberships(member_id, now)
            if conflict:
                return conflict

            for membership in stale:
                self.memberships.update(
                    membership["id"],
                    {"status": MembershipStatus.EXPIRED.value, "updated_at": now},
                    expected_status=MembershipStatus.ACTIVE.value,
                )
                logger.info("Membership #%s was past its end date, marked as expired", membership["id"])

            start_date = start_of_day(now)
            end_date = calculate_end_date(start_date, plan)

            membership_id = self.memberships.insert(
                {
                    "member_id": member_id,
                    "checkin_code": checkin_code,
                    "plan_type": plan.value,
                    "amount": plan.price,
                    "payment_method": payment_method or DEFAULT_PAYMENT_METHOD,
                    "status": MembershipStatus.PENDING.value,
                    "start_date": start_date,
                    "end_date": end_date,
                    "applied_at": now,
                    "first_name": member.get("first_name"),
                    "last_name": member.get("last_name"),
                    "email": member.get("email"),
                    "phone": member.get("phone"),
                    "avatar": member.get("avatar"),
                    "created_at": now,
                    "updated_at": now,
                }
            )
        except Exception as e:
            logger.error(f"Error submitting membership application: {e}", exc_info=True)
            return internal_error("submit membership application")

        logger.info("Member #%s applied for %s membership #%s", member_id, plan.value, membership_id)
        self._notify(
            member_id,
            "Membership Application Submitted",
            f"Your {plan.value} membership application has been submitted and is waiting for admin approval.",
            "info",
            membership_id,
        )

        return ok(
            "Membership application submitted successfully! Please wait for admin approval.",
            membership_id=membership_id,
            status=MembershipStatus.PENDING.value,
            plan_type=plan.value,
            amount=plan.price,
            start_date=start_date,
            end_date=end_date,
        )

    def _check_open_memberships(self, member_id, now: datetime) -> Tuple[Optional[dict], List[dict]]:
        """
        Returns ``(conflict, stale)``. ``conflict`` is a failure result if the
        member already holds a Pending or a running Active membership.
        ``stale`` lists Active rows already past their end date; the caller
        expires them only once the application goes ahead.
        """
        open_memberships = self.memberships.find_by_member(
            member_id, [MembershipStatus.PENDING, MembershipStatus.ACTIVE]
        )

        stale = []
        for membership in open_memberships:
            if membership["status"] != MembershipStatus.ACTIVE:
                continue
            if resolve_status(membership, now).is_expired:
                stale.append(membership)
                continue
            return fail(
                results.ACTIVE_MEMBERSHIP_EXISTS,
                f"You already have an active {membership['plan_type']} membership that ends on "
                f"{format_date(membership['end_date'])}. Please wait until your current membership "
                f"expires before applying for a new one.",
            ), []

        for membership in open_memberships:
            if membership["status"] == MembershipStatus.PENDING:
                return fail(
                    results.PENDING_MEMBERSHIP_EXISTS,
                    f"You already have a pending {membership['plan_type']} membership application "
                    f"submitted on {format_date(membership['applied_at'])}. Please wait for admin "
                    f"approval before applying for a new membership.",
                ), []

        return None, stale

    # ============== Admin transitions ==============

    def approve_membership(self, membership_id, admin_id) -> dict:
        invalid = _require_ids(membership_id, admin_id)
        if invalid:
            return invalid

        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            if membership["status"] != MembershipStatus.PENDING:
                return _transition_error("approved", membership)

            # Period starts on the approval day, not the application day
            now = self.clock()
            start_date = start_of_day(now)
            end_date = calculate_end_date(start_date, membership["plan_type"])

            updated = self.memberships.update(
                membership_id,
                {
                    "status": MembershipStatus.ACTIVE.value,
                    "start_date": start_date,
                    "end_date": end_date,
                    "approved_at": now,
                    "approved_by": admin_id,
                    "updated_at": now,
                },
                expected_status=MembershipStatus.PENDING.value,
            )
            if not updated:
                return fail(results.INVALID_STATUS_TRANSITION, "Membership is no longer pending")
        except Exception as e:
            logger.error(f"Error approving membership: {e}", exc_info=True)
            return internal_error("approve membership")

        logger.info("Membership #%s approved by admin #%s", membership_id, admin_id)
        self._audit(
            "approve_membership",
            admin_id,
            membership_id,
            {
                "plan_type": membership["plan_type"],
                "old_status": MembershipStatus.PENDING.value,
                "new_status": MembershipStatus.ACTIVE.value,
                "old_start_date": membership.get("start_date"),
                "old_end_date": membership.get("end_date"),
                "new_start_date": start_date,
                "new_end_date": end_date,
            },
            now,
        )
        self._notify(
            membership["member_id"],
            "Membership Approved",
            f"Congratulations! Your {membership['plan_type']} membership has been approved "
            f"and is active until {format_date(end_date)}.",
            "success",
            membership_id,
        )

        return ok(
            "Membership approved successfully",
            membership_id=membership_id,
            status=MembershipStatus.ACTIVE.value,
            start_date=start_date,
            end_date=end_date,
        )

    def decline_membership(self, membership_id, admin_id, reason: Optional[str] = None) -> dict:
        invalid = _require_ids(membership_id, admin_id)
        if invalid:
            return invalid

        reason = reason.strip() if isinstance(reason, str) and reason.strip() else None

        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            if membership["status"] != MembershipStatus.PENDING:
                return _transition_error("declined", membership)

            now = self.clock()
            updated = self.memberships.update(
                membership_id,
                {
                    "status": MembershipStatus.DECLINED.value,
                    "decline_reason": reason,
                    "declined_at": now,
                    "updated_at": now,
                },
                expected_status=MembershipStatus.PENDING.value,
            )
            if not updated:
                return fail(results.INVALID_STATUS_TRANSITION, "Membership is no longer pending")
        except Exception as e:
            logger.error(f"Error declining membership: {e}", exc_info=True)
            return internal_error("decline membership")

        logger.info("Membership #%s declined by admin #%s", membership_id, admin_id)
        self._audit(
            "decline_membership",
            admin_id,
            membership_id,
            {
                "plan_type": membership["plan_type"],
                "old_status": MembershipStatus.PENDING.value,
                "new_status": MembershipStatus.DECLINED.value,
                "reason": reason,
            },
            now,
        )

        message = f"Your {membership['plan_type']} membership application has been declined."
        if reason:
            message += f" Reason: {reason}"
        self._notify(membership["member_id"], "Membership Declined", message, "error", membership_id)

        return ok("Membership declined", membership_id=membership_id, status=MembershipStatus.DECLINED.value)

    def extend_membership(self, membership_id, months, admin_id) -> dict:
        invalid = _require_ids(membership_id, admin_id)
        if invalid:
            return invalid

        try:
            months = 0 if isinstance(months, bool) else int(months)
        except (TypeError, ValueError):
            months = 0
        if months <= 0:
            return fail(results.INVALID_MONTHS, "Months must be a positive whole number")

        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            now = self.clock()
            old_end_date = to_datetime(membership.get("end_date"))
            new_end_date = end_of_day(add_months(old_end_date or now, months))

            self.memberships.update(membership_id, {"end_date": new_end_date, "updated_at": now})
        except Exception as e:
            logger.error(f"Error extending membership: {e}", exc_info=True)
            return internal_error("extend membership")

        logger.info("Membership #%s extended by %d month(s) by admin #%s", membership_id, months, admin_id)
        self._audit(
            "extend_membership",
            admin_id,
            membership_id,
            {"months": months, "old_end_date": old_end_date, "new_end_date": new_end_date},
            now,
        )
        self._notify(
            membership["member_id"],
            "Membership Extended",
            f"Your {membership['plan_type']} membership has been extended by {months} month(s). "
            f"It is now valid until {format_date(new_end_date)}.",
            "success",
            membership_id,
        )

        return ok(
            f"Membership extended by {months} month(s) successfully",
            membership_id=membership_id,
            end_date=new_end_date,
        )

    def change_plan(self, membership_id, new_plan, admin_id, start_date=None) -> dict:
        invalid = _require_ids(membership_id, admin_id)
        if invalid:
            return invalid

        try:
            plan = PlanType.parse(new_plan)
        except ValueError:
            return fail(
                results.INVALID_PLAN,
                f"Invalid plan type: {new_plan}. Choose one of {', '.join(p.value for p in PlanType)}.",
            )

        requested_start = None
        if start_date is not None:
            requested_start = to_datetime(start_date)
            if requested_start is None:
                return fail(results.VALIDATION_ERROR, f"Invalid start date: {start_date}")

        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            now = self.clock()
            new_start = start_of_day(requested_start or now)
            new_end = calculate_end_date(new_start, plan)

            self.memberships.update(
                membership_id,
                {
                    "plan_type": plan.value,
                    "amount": plan.price,
                    "start_date": new_start,
                    "end_date": new_end,
                    "updated_at": now,
                },
            )
        except Exception as e:
            logger.error(f"Error changing membership plan: {e}", exc_info=True)
            return internal_error("change membership plan")

        logger.info(
            "Membership #%s changed from %s to %s by admin #%s",
            membership_id, membership["plan_type"], plan.value, admin_id,
        )
        self._audit(
            "change_plan",
            admin_id,
            membership_id,
            {
                "old_plan": membership["plan_type"],
                "new_plan": plan.value,
                "old_start_date": membership.get("start_date"),
                "old_end_date": membership.get("end_date"),
                "new_start_date": new_start,
                "new_end_date": new_end,
            },
            now,
        )
        self._notify(
            membership["member_id"],
            "Membership Plan Changed",
            f"Your membership plan has been changed to {plan.value}. "
            f"It runs from {format_date(new_start)} until {format_date(new_end)}.",
            "info",
            membership_id,
        )

        return ok(
            f"Membership plan changed to {plan.value} successfully",
            membership_id=membership_id,
            plan_type=plan.value,
            start_date=new_start,
            end_date=new_end,
        )

    def withdraw_membership(self, membership_id, admin_id) -> dict:
        invalid = _require_ids(membership_id, admin_id)
        if invalid:
            return invalid

        try:
            membership = self.memberships.get(membership_id)
            if not membership:
                return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

            if membership["status"] != MembershipStatus.ACTIVE:
                return _transition_error("withdrawn", membership)

            now = self.clock()
            updated = self.memberships.update(
                membership_id,
                {"status": MembershipStatus.EXPIRED.value, "end_date": now, "updated_at": now},
                expected_status=MembershipStatus.ACTIVE.value,
            )
            if not updated:
                return fail(results.INVALID_STATUS_TRANSITION, "Membership is no longer active")
        except Exception as e:
            logger.error(f"Error withdrawing membership: {e}", exc_info=True)
            return internal_error("withdraw membership")

        logger.info("Membership #%s withdrawn by admin #%s", membership_id, admin_id)
        self._audit(
            "withdraw_membership",
            admin_id,
            membership_id,
            {
                "old_status": MembershipStatus.ACTIVE.value,
                "new_status": MembershipStatus.EXPIRED.value,
                "old_end_date": membership.get("end_date"),
                "new_end_date": now,
            },
            now,
        )
        self._notify(
            membership["member_id"],
            "Membership Withdrawn",
            f"Your {membership['plan_type']} membership has been withdrawn and ended on {format_date(now)}.",
            "warning",
            membership_id,
        )

        return ok("Membership withdrawn successfully", membership_id=membership_id,
                  status=MembershipStatus.EXPIRED.value, end_date=now)

    def sweep_expired(self) -> dict:
        """Mark every Active membership whose end date has passed as Expired."""
        now = self.clock()
        try:
            updated_count = self.memberships.expire_active_before(now)
        except Exception as e:
            logger.error(f"Error updating expired memberships: {e}", exc_info=True)
            return {**internal_error("update expired memberships"), "updated_count": 0}

        logger.info("Expire sweep done, %d memberships marked as expired", updated_count)
        return ok(f"Updated {updated_count} expired memberships", updated_count=updated_count)

    # ============== Reads ==============

    def get_membership(self, membership_id) -> dict:
        try:
            membership = self.memberships.get(membership_id)
        except Exception as e:
            logger.error(f"Error getting membership: {e}", exc_info=True)
            return internal_error("load membership")

        if not membership:
            return fail(results.MEMBERSHIP_NOT_FOUND, "Membership not found")

        return ok(
            membership=membership,
            status=resolve_status(membership, self.clock()).to_dict(),
        )

    def get_member_summary(self, member_id) -> dict:
        """Current (Active, else Pending) membership of a member with its resolved status."""
        try:
            open_memberships = self.memberships.find_by_member(
                member_id, [MembershipStatus.ACTIVE, MembershipStatus.PENDING]
            )
        except Exception as e:
            logger.error(f"Error getting user membership summary: {e}", exc_info=True)
            return {**internal_error("load membership summary"), "membership": None,
                    "status": resolve_status(None).to_dict()}

        current = next((m for m in open_memberships if m["status"] == MembershipStatus.ACTIVE), None)
        if current is None and open_memberships:
            current = open_memberships[0]

        return ok(membership=current, status=resolve_status(current, self.clock()).to_dict())

    def get_member_membership_status(self, member_id) -> dict:
        try:
            open_memberships = self.memberships.find_by_member(
                member_id, [MembershipStatus.ACTIVE, MembershipStatus.PENDING]
            )
        except Exception as e:
            logger.error(f"Error getting user membership status: {e}", exc_info=True)
            return internal_error("load membership status")

        active = next((m for m in open_memberships if m["status"] == MembershipStatus.ACTIVE), None)
        pending = next((m for m in open_memberships if m["status"] == MembershipStatus.PENDING), None)
        return ok(
            has_active=active is not None,
            has_pending=pending is not None,
            active_membership=active,
            pending_membership=pending,
        )

    def get_member_history(self, member_id) -> dict:
        try:
            history = self.memberships.find_by_member(member_id)
        except Exception as e:
            logger.error(f"Error getting user membership history: {e}", exc_info=True)
            return internal_error("load membership history")

        now = self.clock()
        return ok(memberships=[_with_status(m, now) for m in history], total=len(history))

    def list_memberships(self, status: Optional[str] = None) -> dict:
        """All memberships (optionally one stored status) with read-time status and counters."""
        if status:
            try:
                status = MembershipStatus(status).value
            except ValueError:
                return fail(results.VALIDATION_ERROR, f"Invalid membership status: {status}")

        try:
            rows = self.memberships.list(status)
        except Exception as e:
            logger.error(f"Error getting all memberships with status: {e}", exc_info=True)
            return internal_error("load memberships")

        now = self.clock()
        memberships = [_with_status(m, now) for m in rows]
        return ok(
            memberships=memberships,
            total=len(memberships),
            active=sum(1 for m in memberships if m["is_active"]),
            expired=sum(1 for m in memberships if m["is_expired"]),
            pending=sum(1 for m in memberships if m["status"] == MembershipStatus.PENDING),
        )

    # ============== Side effects ==============

    def _notify(self, member_id, title, message, kind, related_id=None):
        try:
            self.notifications.notify(member_id, title, message, kind, related_id)
        except Exception as e:
            logger.warning(f"Notification '{title}' to member #{member_id} failed: {e}")

    def _audit(self, kind, actor_id, target_id, details, timestamp):
        try:
            self.audit.record_admin_action(kind, actor_id, target_id, details, timestamp)
        except Exception as e:
            logger.warning(f"Audit logging failed for {kind} on membership #{target_id}: {e}")


def _require_ids(membership_id, admin_id) -> Optional[dict]:
    if not membership_id:
        return fail(results.VALIDATION_ERROR, "Membership ID is required")
    if not admin_id:
        return fail(results.VALIDATION_ERROR, "Admin identity is required for this action")
    return None


def _transition_error(action: str, membership: dict) -> dict:
    status = membership["status"]
    status = status.value if hasattr(status, "value") else status
    return fail(
        results.INVALID_STATUS_TRANSITION,
        f"Membership cannot be {action}: current status is {status}",
    )


def _with_status(membership: dict, now: datetime) -> dict:
    info = resolve_status(membership, now)
    return {
        **membership,
        "calculated_status": info.status,
        "remaining_days": info.remaining_days,
        "is_active": info.is_active,
        "is_expired": info.is_expired,
    }
