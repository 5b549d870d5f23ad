"""
Read-time membership status resolution.

The stored ``status`` column can lag behind the calendar until the expiry
sweep runs, so an ``Active`` row past its end date resolves to ``Expired``
here. Nothing in this module writes to storage.
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

from gymdesk.core.dates import calculate_remaining_days, to_datetime
from gymdesk.core.enums import MembershipStatus, NO_MEMBERSHIP


@dataclass
class MembershipStatusInfo:
    status: str
    is_active: bool
    is_expired: bool
    is_pending: bool
    remaining_days: int
    message: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    plan_type: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def resolve_status(membership: Optional[dict], now: Optional[datetime] = None) -> MembershipStatusInfo:
    if not membership:
        return MembershipStatusInfo(
            status=NO_MEMBERSHIP,
            is_active=False,
            is_expired=False,
            is_pending=False,
            remaining_days=0,
            message="No membership found",
        )

    now = now or datetime.now()
    stored = membership.get("status")
    start_date = to_datetime(membership.get("start_date"))
    end_date = to_datetime(membership.get("end_date"))
    remaining_days = calculate_remaining_days(end_date, now)

    is_pending = stored == MembershipStatus.PENDING
    is_active = stored == MembershipStatus.ACTIVE and end_date is not None and now <= end_date
    is_expired = stored == MembershipStatus.ACTIVE and not is_active

    if is_pending:
        status = MembershipStatus.PENDING.value
        message = "Membership pending admin approval"
    elif is_active:
        status = MembershipStatus.ACTIVE.value
        message = f"Membership active with {remaining_days} days remaining"
    elif is_expired:
        status = MembershipStatus.EXPIRED.value
        message = "Membership has expired"
    else:
        status = _status_value(stored)
        message = f"Membership status: {status}"

    return MembershipStatusInfo(
        status=status,
        is_active=is_active,
        is_expired=is_expired,
        is_pending=is_pending,
        remaining_days=remaining_days,
        message=message,
        start_date=start_date,
        end_date=end_date,
        plan_type=_status_value(membership.get("plan_type")),
    )


def _status_value(value):
    return value.value if hasattr(value, "value") else value
