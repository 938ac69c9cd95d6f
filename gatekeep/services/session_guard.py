"""Per-request session validation with a sliding activity window."""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from gatekeep.core.clock import Clock, utcnow
from gatekeep.core.security import hash_session_token
from gatekeep.models import AuthSession
from gatekeep.schemas.auth import SessionOut
from gatekeep.stores.sessions import SessionStore

if TYPE_CHECKING:
    from gatekeep.core.config import Settings

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Hot path: validate is one lookup plus one conditional UPDATE, nothing more.

    An unknown, invalidated, expired or idle token yields None rather than an error.
    """

    def __init__(self, sessions: SessionStore, settings: "Settings", clock: Clock = utcnow) -> None:
        self.sessions = sessions
        self.settings = settings
        self.clock = clock

    def _is_usable(self, row: AuthSession) -> bool:
        now = self.clock()
        if not row.is_valid or now >= row.expires_at:
            return False
        idle_minutes = self.settings.SESSION_IDLE_TIMEOUT_MINUTES
        if idle_minutes and row.last_activity_at + timedelta(minutes=idle_minutes) <= now:
            return False
        return True

    def validate(self, token: str) -> SessionOut | None:
        if not token:
            return None
        row = self.sessions.get_by_token_hash(hash_session_token(token))
        if row is None or not self._is_usable(row):
            return None
        result = SessionOut.model_validate(row)
        now = self.clock()
        # Lost the race with a concurrent invalidate: treat as invalid.
        if not self.sessions.touch(row.id, now):
            return None
        result.last_activity_at = now
        return result

    def invalidate(self, token: str) -> SessionOut | None:
        """Idempotent. Returns the session that was matched, if any."""
        session, _ = self._invalidate(token)
        return session

    def revoke(self, token: str) -> SessionOut | None:
        """Like invalidate, but returns the session only if this call ended it."""
        session, was_valid = self._invalidate(token)
        return session if was_valid else None

    def _invalidate(self, token: str) -> tuple[SessionOut | None, bool]:
        if not token:
            return None, False
        row, was_valid = self.sessions.invalidate_by_token_hash(hash_session_token(token))
        if row is None:
            return None, False
        return SessionOut.model_validate(row), was_valid

    def invalidate_all(self, account_id: int) -> int:
        count = self.sessions.invalidate_all_for_account(account_id)
        if count:
            logger.info("Invalidated %s session(s) for account_id=%s", count, account_id)
        return count
