"""
Result dicts returned across the service boundary.

Services never raise for expected conditions; they return
``{"success": False, "error_code": ..., "message": ...}`` instead.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_PLAN = "INVALID_PLAN"
INVALID_MONTHS = "INVALID_MONTHS"
INVALID_QR_CODE = "INVALID_QR_CODE"
CHECKIN_CODE_MISSING = "CHECKIN_CODE_MISSING"
CHECKIN_CODE_MISMATCH = "CHECKIN_CODE_MISMATCH"

# State conflicts
ACTIVE_MEMBERSHIP_EXISTS = "ACTIVE_MEMBERSHIP_EXISTS"
PENDING_MEMBERSHIP_EXISTS = "PENDING_MEMBERSHIP_EXISTS"
INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
NO_ACTIVE_MEMBERSHIP = "NO_ACTIVE_MEMBERSHIP"

# Not found
MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
MEMBERSHIP_NOT_FOUND = "MEMBERSHIP_NOT_FOUND"

# Derived state
MEMBERSHIP_EXPIRED = "MEMBERSHIP_EXPIRED"

INTERNAL_ERROR = "INTERNAL_ERROR"

NOT_FOUND_CODES = {MEMBER_NOT_FOUND, MEMBERSHIP_NOT_FOUND}


def ok(message: str = "", **data) -> dict:
    return {"success": True, "message": message, **data}


def fail(error_code: str, message: str) -> dict:
    return {"success": False, "error_code": error_code, "message": message}


def internal_error(action: str) -> dict:
    return fail(INTERNAL_ERROR, f"Failed to {action}. Please try again later.")


class DuplicateCheckinError(Exception):
    """Raised by the check-in repository when the same-day unique key rejects an insert."""
