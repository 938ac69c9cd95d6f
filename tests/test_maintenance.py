"""Unit and integration tests for MaintenanceSweeper: session sweep and log pruning."""

import unittest
from datetime import datetime
from unittest.mock import MagicMock

from sqlalchemy import delete, select

from gatekeep.models import ActivityRecord, AuthSession, LoginAttempt
from gatekeep.services.errors import ValidationError
from gatekeep.services.factory import build_sweeper
from gatekeep.services.maintenance import MaintenanceSweeper

from dbsupport import (
    VALID_PASSWORD,
    WRONG_PASSWORD,
    FakeClock,
    count_rows,
    make_db,
    make_service,
    make_settings,
)

ADDR = "203.0.113.5"
UA = "pytest-agent"


def _mock_sweeper(enabled: bool = True) -> MaintenanceSweeper:
    settings = MagicMock()
    settings.MAINTENANCE_ENABLED = enabled
    settings.ACTIVITY_RETENTION_DAYS = 90
    settings.ATTEMPT_RETENTION_DAYS = 30
    return MaintenanceSweeper(
        sessions=MagicMock(),
        activity=MagicMock(),
        attempts=MagicMock(),
        settings=settings,
        clock=lambda: datetime(2026, 3, 10, 12, 0, 0),
    )


class TestRunAllDisabled(unittest.TestCase):
    """When MAINTENANCE_ENABLED is False, run_all does nothing."""

    def test_returns_skipped_and_does_not_touch_stores(self) -> None:
        sweeper = _mock_sweeper(enabled=False)
        report = sweeper.run_all()
        self.assertTrue(report.skipped)
        sweeper.sessions.invalidate_expired.assert_not_called()
        sweeper.activity.delete_before.assert_not_called()
        sweeper.attempts.delete_before.assert_not_called()


class TestRunAllCounts(unittest.TestCase):
    def test_reports_each_step(self) -> None:
        sweeper = _mock_sweeper()
        sweeper.sessions.invalidate_expired.return_value = 3
        sweeper.activity.delete_before.return_value = 7
        sweeper.attempts.delete_before.return_value = 11
        report = sweeper.run_all()
        self.assertFalse(report.skipped)
        self.assertEqual(report.sessions_expired, 3)
        self.assertEqual(report.activity_pruned, 7)
        self.assertEqual(report.attempts_pruned, 11)
        sweeper.activity.delete_before.assert_called_once_with(datetime(2025, 12, 10, 12, 0, 0))
        sweeper.attempts.delete_before.assert_called_once_with(datetime(2026, 2, 8, 12, 0, 0))

    def test_rejects_non_positive_retention(self) -> None:
        sweeper = _mock_sweeper()
        with self.assertRaises(ValidationError):
            sweeper.prune_activity_log(0)
        with self.assertRaises(ValidationError):
            sweeper.prune_login_attempts(-1)
        sweeper.activity.delete_before.assert_not_called()


class MaintenanceDbTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.clock = FakeClock()
        self.service = make_service(self.db, self.clock)
        self.sweeper = build_sweeper(self.db, make_settings(), self.clock)
        self.service.register("Ann", "Lee", "ann@example.com", VALID_PASSWORD)

    def tearDown(self) -> None:
        self.db.close()

    def issue(self) -> str:
        return self.service.authenticate("ann@example.com", VALID_PASSWORD, ADDR, UA).session.token


class TestSweepExpiredSessions(MaintenanceDbTestCase):
    def test_sweep_is_idempotent(self) -> None:
        self.issue()
        self.clock.advance(hours=12)
        live = self.issue()
        self.clock.advance(hours=13)

        self.assertEqual(self.sweeper.sweep_expired_sessions(), 1)
        self.assertEqual(self.sweeper.sweep_expired_sessions(), 0)
        self.assertIsNotNone(self.service.guard.validate(live))
        self.assertEqual(count_rows(self.db, AuthSession, AuthSession.is_valid.is_(True)), 1)

    def test_sweep_with_nothing_expired(self) -> None:
        self.issue()
        self.assertEqual(self.sweeper.sweep_expired_sessions(), 0)


class TestPruneActivityLog(MaintenanceDbTestCase):
    def test_deletes_only_records_older_than_retention(self) -> None:
        token = self.issue()  # register + login records at t0
        self.clock.advance(days=91)
        self.service.logout(token)

        self.assertEqual(self.sweeper.prune_activity_log(90), 2)
        self.assertEqual(self.sweeper.prune_activity_log(90), 0)
        remaining = self.db.execute(select(ActivityRecord.action)).scalars().all()
        self.assertEqual(remaining, ["logout"])

    def test_default_retention_from_settings(self) -> None:
        self.issue()
        self.clock.advance(days=89)
        self.assertEqual(self.sweeper.prune_activity_log(), 0)
        self.clock.advance(days=2)
        self.assertEqual(self.sweeper.prune_activity_log(), 2)

    def test_session_reference_is_weak(self) -> None:
        self.issue()
        session_id = self.db.execute(select(AuthSession.id)).scalar_one()
        self.db.execute(delete(AuthSession).where(AuthSession.id == session_id))
        self.db.commit()
        self.db.expire_all()
        login = self.db.execute(
            select(ActivityRecord).where(ActivityRecord.action == "login")
        ).scalar_one()
        self.assertIsNone(login.session_id)


class TestPruneLoginAttempts(MaintenanceDbTestCase):
    def test_prunes_attempts_past_retention(self) -> None:
        self.service.authenticate("ann@example.com", WRONG_PASSWORD, ADDR, UA)
        self.clock.advance(days=31)
        self.issue()
        self.assertEqual(self.sweeper.prune_login_attempts(), 1)
        self.assertEqual(count_rows(self.db, LoginAttempt), 1)


if __name__ == "__main__":
    unittest.main()
