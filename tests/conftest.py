from datetime import datetime, timedelta

import pytest

from fakes import (
    FakeCheckinRepository,
    FakeClock,
    FakeMemberRepository,
    FakeMembershipRepository,
    RecordingAudit,
    RecordingNotifications,
)
from utils import ADMIN, CHECKIN_CODE, MEMBER, APIClient, make_token

from gymdesk.services.attendance import AttendanceService
from gymdesk.services.checkins import CheckinService
from gymdesk.services.edit_sessions import EditSessionRegistry
from gymdesk.services.memberships import MembershipService


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 10, 30))


@pytest.fixture
def members():
    repo = FakeMemberRepository()
    repo.add(MEMBER["user_id"], checkin_code=CHECKIN_CODE)
    return repo


@pytest.fixture
def memberships():
    return FakeMembershipRepository()


@pytest.fixture
def checkins():
    return FakeCheckinRepository()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def membership_service(memberships, members, notifications, audit, clock):
    return MembershipService(memberships, members, notifications, audit, clock=clock)


@pytest.fixture
def checkin_service(memberships, checkins, notifications, audit, clock):
    return CheckinService(memberships, checkins, notifications, audit, clock=clock)


@pytest.fixture
def attendance_service(memberships, checkins, clock):
    return AttendanceService(memberships, checkins, clock=clock)


@pytest.fixture
def edit_sessions(clock):
    return EditSessionRegistry(timedelta(minutes=30), clock=clock)


@pytest.fixture
def app(membership_service, checkin_service, attendance_service, members, edit_sessions, audit):
    from gymdesk import dependencies
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[dependencies.get_membership_service] = lambda: membership_service
    fastapi_app.dependency_overrides[dependencies.get_checkin_service] = lambda: checkin_service
    fastapi_app.dependency_overrides[dependencies.get_attendance_service] = lambda: attendance_service
    fastapi_app.dependency_overrides[dependencies.get_member_repository] = lambda: members
    fastapi_app.dependency_overrides[dependencies.get_edit_sessions] = lambda: edit_sessions
    fastapi_app.dependency_overrides[dependencies.get_audit_logger] = lambda: audit
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def admin_client(app):
    client = APIClient(app)
    client.set_token(make_token(ADMIN))
    return client


@pytest.fixture
def member_client(app):
    client = APIClient(app)
    client.set_token(make_token(MEMBER))
    return client
