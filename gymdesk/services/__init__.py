from gymdesk.db import Database
from gymdesk.repositories import CheckinRepository, MemberRepository, MembershipRepository
from gymdesk.services.attendance import AttendanceService
from gymdesk.services.checkins import CheckinService
from gymdesk.services.memberships import MembershipService
from gymdesk.utils.audit import AuditLogger
from gymdesk.utils.notifications import NotificationSink


def build_membership_service(db: Database) -> MembershipService:
    return MembershipService(
        memberships=MembershipRepository(db),
        members=MemberRepository(db),
        notifications=NotificationSink(db),
        audit=AuditLogger(db),
    )


def build_checkin_service(db: Database) -> CheckinService:
    return CheckinService(
        memberships=MembershipRepository(db),
        checkins=CheckinRepository(db),
        notifications=NotificationSink(db),
        audit=AuditLogger(db),
    )


def build_attendance_service(db: Database) -> AttendanceService:
    return AttendanceService(
        memberships=MembershipRepository(db),
        checkins=CheckinRepository(db),
    )
