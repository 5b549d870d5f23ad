import random
import string

CHECKIN_CODE_PREFIX = "GYM-"


def generate_checkin_code(length: int = 10) -> str:
    """
    Generate the permanent check-in code printed in a member's QR card.

    Args:
        length: number of random characters after the prefix (default 10)

    Returns:
        Check-in code, e.g. GYM-7Q2K9XW4AB
    """
    alphabet = string.ascii_uppercase + string.digits
    return CHECKIN_CODE_PREFIX + "".join(random.SystemRandom().choices(alphabet, k=length))


def member_full_name(record: dict) -> str:
    """'First Last' from a membership, check-in or user row."""
    parts = [record.get("first_name") or "", record.get("last_name") or ""]
    return " ".join(p for p in parts if p).strip() or "Member"
