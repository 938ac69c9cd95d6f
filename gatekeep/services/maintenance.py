"""Maintenance sweeps: expire stale sessions and prune aged audit/ledger rows.

Every operation is monotonic and idempotent, so overlapping runs need no lock.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from gatekeep.core.clock import Clock, utcnow
from gatekeep.schemas.maintenance import MaintenanceReport
from gatekeep.services.errors import ValidationError
from gatekeep.stores import ActivityLog, AttemptLedger, SessionStore

if TYPE_CHECKING:
    from gatekeep.core.config import Settings

logger = logging.getLogger(__name__)


def _require_positive_days(retention_days: int) -> None:
    if retention_days < 1:
        raise ValidationError({"retention_days": ["Must be at least 1"]})


class MaintenanceSweeper:
    def __init__(
        self,
        sessions: SessionStore,
        activity: ActivityLog,
        attempts: AttemptLedger,
        settings: "Settings",
        clock: Clock = utcnow,
    ) -> None:
        self.sessions = sessions
        self.activity = activity
        self.attempts = attempts
        self.settings = settings
        self.clock = clock

    def sweep_expired_sessions(self) -> int:
        """Mark valid-but-expired sessions invalid. A second run right after returns 0."""
        count = self.sessions.invalidate_expired(self.clock())
        if count > 0:
            logger.info("Session sweep: expired=%s", count)
        return count

    def prune_activity_log(self, retention_days: int | None = None) -> int:
        """Delete activity records older than retention_days (default ACTIVITY_RETENTION_DAYS)."""
        days = self.settings.ACTIVITY_RETENTION_DAYS if retention_days is None else retention_days
        _require_positive_days(days)
        cutoff = self.clock() - timedelta(days=days)
        deleted = self.activity.delete_before(cutoff)
        if deleted > 0:
            logger.info(
                "Activity prune: cutoff=%s, records_deleted=%s", cutoff.isoformat(), deleted
            )
        return deleted

    def prune_login_attempts(self, retention_days: int | None = None) -> int:
        """Delete ledger rows older than retention_days; only the rate-limit window is ever read."""
        days = self.settings.ATTEMPT_RETENTION_DAYS if retention_days is None else retention_days
        _require_positive_days(days)
        cutoff = self.clock() - timedelta(days=days)
        deleted = self.attempts.delete_before(cutoff)
        if deleted > 0:
            logger.info(
                "Attempt prune: cutoff=%s, attempts_deleted=%s", cutoff.isoformat(), deleted
            )
        return deleted

    def run_all(self) -> MaintenanceReport:
        if not self.settings.MAINTENANCE_ENABLED:
            logger.info("Maintenance is disabled (MAINTENANCE_ENABLED=false); skipping.")
            return MaintenanceReport(skipped=True)
        return MaintenanceReport(
            sessions_expired=self.sweep_expired_sessions(),
            activity_pruned=self.prune_activity_log(),
            attempts_pruned=self.prune_login_attempts(),
        )
