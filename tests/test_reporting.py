"""Tests for ReportingService: account counts and per-day login counts."""

import unittest
from datetime import date

from gatekeep.services.errors import ValidationError
from gatekeep.services.factory import build_reporting

from dbsupport import VALID_PASSWORD, WRONG_PASSWORD, FakeClock, make_db, make_service

ADDR = "203.0.113.9"
UA = "pytest-agent"


class TestAccountStats(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.clock = FakeClock()
        self.service = make_service(self.db, self.clock)
        self.reporting = build_reporting(self.db, self.clock)

    def tearDown(self) -> None:
        self.db.close()

    def test_empty_database(self) -> None:
        stats = self.reporting.account_stats()
        self.assertEqual(
            (stats.total, stats.active, stats.verified, stats.created_today, stats.active_sessions),
            (0, 0, 0, 0, 0),
        )

    def test_counts_reflect_storage_state(self) -> None:
        self.service.register("Ann", "Lee", "ann@example.com", VALID_PASSWORD)
        self.clock.advance(days=1)
        self.service.register("Bob", "Ray", "bob@example.com", VALID_PASSWORD)
        self.service.authenticate("bob@example.com", VALID_PASSWORD, ADDR, UA)
        token = self.service.authenticate("ann@example.com", VALID_PASSWORD, ADDR, UA).session.token
        self.service.logout(token)

        stats = self.reporting.account_stats()
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.active, 2)
        self.assertEqual(stats.verified, 0)
        self.assertEqual(stats.created_today, 1)
        self.assertEqual(stats.active_sessions, 1)


class TestLoginStats(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.clock = FakeClock()
        self.service = make_service(self.db, self.clock)
        self.reporting = build_reporting(self.db, self.clock)
        self.service.register("Ann", "Lee", "ann@example.com", VALID_PASSWORD)

    def tearDown(self) -> None:
        self.db.close()

    def test_per_day_counts(self) -> None:
        self.service.authenticate("ann@example.com", WRONG_PASSWORD, ADDR, UA)
        self.service.authenticate("ann@example.com", VALID_PASSWORD, ADDR, UA)
        self.clock.advance(days=2)
        self.service.authenticate("ann@example.com", VALID_PASSWORD, ADDR, UA)

        result = self.reporting.login_stats(3)
        self.assertEqual(result.days, 3)
        self.assertEqual([d.day for d in result.per_day], [date(2026, 3, 10), date(2026, 3, 11), date(2026, 3, 12)])
        self.assertEqual([(d.successes, d.failures) for d in result.per_day], [(1, 1), (0, 0), (1, 0)])

    def test_window_excludes_older_days(self) -> None:
        self.service.authenticate("ann@example.com", WRONG_PASSWORD, ADDR, UA)
        self.clock.advance(days=10)
        result = self.reporting.login_stats(7)
        self.assertEqual(len(result.per_day), 7)
        self.assertTrue(all(d.successes == 0 and d.failures == 0 for d in result.per_day))

    def test_days_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            self.reporting.login_stats(0)
        with self.assertRaises(ValidationError):
            self.reporting.login_stats(366)


if __name__ == "__main__":
    unittest.main()
