from gymdesk.repositories.members import MemberRepository
from gymdesk.repositories.memberships import MembershipRepository
from gymdesk.repositories.checkins import CheckinRepository

__all__ = ["MemberRepository", "MembershipRepository", "CheckinRepository"]
