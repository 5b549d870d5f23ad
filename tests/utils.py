"""
Test Utilities for GymDesk API
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from fastapi.testclient import TestClient

from gymdesk import config
from gymdesk.core.dates import calculate_end_date, start_of_day
from gymdesk.core.enums import PlanType

ADMIN = {"user_id": 900, "email": "admin@gymdesk.test", "name": "Front Desk", "role_name": "admin"}
MEMBER = {"user_id": 1, "email": "member1@example.com", "name": "Jane Doe", "role_name": "member"}

CHECKIN_CODE = "GYM-TEST000001"


def make_token(user: dict, expires_hours: int = config.ACCESS_TOKEN_EXPIRE_HOURS) -> str:
    """Sign an access token the way the login service issues them"""
    payload = {
        "user_id": user.get("user_id"),
        "email": user.get("email"),
        "name": user.get("name"),
        "role_name": user.get("role_name"),
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(hours=expires_hours),
    }
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.ALGORITHM)


def seed_membership(
    memberships,
    member_id: int = MEMBER["user_id"],
    status: str = "Active",
    plan_type: str = "Basic",
    start: Optional[datetime] = None,
    applied_at: Optional[datetime] = None,
    checkin_code: str = CHECKIN_CODE,
    **extra,
) -> dict:
    """Insert a membership row straight into a fake repository."""
    start = start or datetime(2024, 3, 1)
    plan = PlanType.parse(plan_type)
    row = {
        "member_id": member_id,
        "checkin_code": checkin_code,
        "plan_type": plan.value,
        "amount": plan.price,
        "payment_method": "Cash at Gym",
        "status": status,
        "start_date": start_of_day(start),
        "end_date": calculate_end_date(start, plan),
        "applied_at": applied_at or start,
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "member1@example.com",
        "phone": "555-0100",
        "avatar": None,
    }
    row.update(extra)
    return memberships.add(**row)


class APIClient:
    """HTTP Client for API testing (in-process, over FastAPI's TestClient)"""

    def __init__(self, app):
        self.client = TestClient(app)
        self.token: Optional[str] = None

    def set_token(self, token: str):
        """Set authorization token"""
        self.token = token

    def clear_token(self):
        """Clear authorization token"""
        self.token = None

    def _headers(self, extra_headers: Dict = None) -> Dict:
        """Build request headers"""
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def get(self, endpoint: str, params: Dict = None):
        return self.client.get(endpoint, params=params, headers=self._headers())

    def post(self, endpoint: str, data: Dict = None):
        return self.client.post(endpoint, json=data, headers=self._headers())
