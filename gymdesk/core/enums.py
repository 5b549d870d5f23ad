from enum import Enum


class PlanType(str, Enum):
    BASIC = "Basic"
    PREMIUM = "Premium"
    VIP = "VIP"

    @property
    def months(self) -> int:
        return PLAN_MONTHS[self]

    @property
    def price(self) -> int:
        return PLAN_PRICES[self]

    @classmethod
    def parse(cls, value) -> "PlanType":
        """Accept a PlanType or its name ("Basic", "premium", ...). Raises ValueError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for plan in cls:
                if plan.value.lower() == value.strip().lower():
                    return plan
        raise ValueError(f"Invalid plan type: {value!r}")


PLAN_MONTHS = {
    PlanType.BASIC: 1,
    PlanType.PREMIUM: 3,
    PlanType.VIP: 6,
}

PLAN_PRICES = {
    PlanType.BASIC: 500,
    PlanType.PREMIUM: 1200,
    PlanType.VIP: 2000,
}


class MembershipStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    DECLINED = "Declined"
    EXPIRED = "Expired"


# Resolved (read-time) status when a member has no membership at all
NO_MEMBERSHIP = "None"

DEFAULT_PAYMENT_METHOD = "Cash at Gym"
