"""
Who is currently editing what in the admin screens.

Only used to warn an admin that someone else has the same record open.
It lives in process memory, is lost on restart and is not shared between
instances, so it never replaces the status checks of the membership service.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EditSessionRegistry:
    def __init__(self, ttl: timedelta, clock: Callable[[], datetime] = datetime.now):
        self.ttl = ttl
        self.clock = clock
        self._sessions: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def start(self, session_id: str, target_id, admin_id, admin_name: Optional[str] = None) -> List[dict]:
        """
        Open (or refresh) a session and return the other live sessions on the
        same target.
        """
        now = self.clock()
        with self._lock:
            self._purge_expired(now)
            existing = self._sessions.get(session_id)
            self._sessions[session_id] = {
                "session_id": session_id,
                "target_id": str(target_id),
                "admin_id": admin_id,
                "admin_name": admin_name,
                "started_at": existing["started_at"] if existing else now,
                "last_seen": now,
            }
            others = [
                dict(s) for s in self._sessions.values()
                if s["target_id"] == str(target_id) and s["session_id"] != session_id
            ]

        if others:
            logger.info(
                "Admin #%s opened target %s while %d other session(s) are editing it",
                admin_id, target_id, len(others),
            )
        return others

    def touch(self, session_id: str) -> bool:
        now = self.clock()
        with self._lock:
            self._purge_expired(now)
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session["last_seen"] = now
            return True

    def end(self, session_id: str) -> Optional[dict]:
        """Close a session; returns it with its duration, or None if unknown/expired."""
        now = self.clock()
        with self._lock:
            self._purge_expired(now)
            session = self._sessions.pop(session_id, None)

        if session is None:
            return None
        session["duration_seconds"] = int((now - session["started_at"]).total_seconds())
        return session

    def active_for(self, target_id) -> List[dict]:
        now = self.clock()
        with self._lock:
            self._purge_expired(now)
            return [dict(s) for s in self._sessions.values() if s["target_id"] == str(target_id)]

    def _purge_expired(self, now: datetime):
        expired = [sid for sid, s in self._sessions.items() if now - s["last_seen"] > self.ttl]
        for sid in expired:
            del self._sessions[sid]
