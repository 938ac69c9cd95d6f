"""HTTP surface tests through FastAPI's TestClient with an in-memory database."""

import unittest

from fastapi.testclient import TestClient

from gatekeep.api.deps import get_clock
from gatekeep.core.clock import utcnow
from gatekeep.core.config import get_settings
from gatekeep.core.database import get_db
from gatekeep.main import app
from gatekeep.stores import CredentialStore

from dbsupport import VALID_PASSWORD, WRONG_PASSWORD, FakeClock, make_db, make_settings

PREFIX = "/api/v1"
REGISTER_BODY = {
    "first_name": "Ann",
    "last_name": "Lee",
    "email": "ann@example.com",
    "password": VALID_PASSWORD,
}


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.clock = FakeClock(utcnow())
        settings = make_settings()

        def override_db():
            yield self.db

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_clock] = lambda: self.clock
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.db.close()

    def register(self, **overrides: str):
        return self.client.post(f"{PREFIX}/auth/register", json={**REGISTER_BODY, **overrides})

    def login(self, password: str = VALID_PASSWORD, email: str = "ann@example.com"):
        return self.client.post(
            f"{PREFIX}/auth/login",
            json={"email": email, "password": password},
            headers={"X-Forwarded-For": "203.0.113.20, 10.0.0.1", "User-Agent": "api-test"},
        )

    def bearer(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestRegisterAndLogin(ApiTestCase):
    def test_register_returns_account_without_credentials(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["email"], "ann@example.com")
        self.assertEqual(body["profile"]["first_name"], "Ann")
        self.assertNotIn("password_hash", body)

    def test_duplicate_register_is_conflict(self) -> None:
        self.register()
        resp = self.register(email="ANN@example.com")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["code"], "duplicate_account")

    def test_invalid_register_lists_fields(self) -> None:
        resp = self.register(password="weak")
        self.assertEqual(resp.status_code, 422)
        self.assertIn("password", resp.json()["error"]["detail"]["fields"])

    def test_unknown_email_and_wrong_password_look_the_same(self) -> None:
        self.register()
        wrong = self.login(WRONG_PASSWORD)
        unknown = self.login(email="nobody@example.com")
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())

    def test_rate_limited_login_is_429_with_retry_after(self) -> None:
        self.register()
        for _ in range(5):
            self.login(WRONG_PASSWORD)
        resp = self.login()
        self.assertEqual(resp.status_code, 429)
        self.assertIn("Retry-After", resp.headers)
        self.assertEqual(resp.json()["error"]["message"], "Too many attempts. Try again later.")


class TestSessionEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.token = self.login().json()["session"]["token"]

    def test_me_requires_valid_session(self) -> None:
        self.assertEqual(self.client.get(f"{PREFIX}/auth/me").status_code, 401)
        resp = self.client.get(f"{PREFIX}/auth/me", headers=self.bearer(self.token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["login_count"], 1)

    def test_logout_invalidates_token(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/logout", headers=self.bearer(self.token))
        self.assertEqual(resp.status_code, 200)
        me = self.client.get(f"{PREFIX}/auth/me", headers=self.bearer(self.token))
        self.assertEqual(me.status_code, 401)

    def test_logout_all(self) -> None:
        other = self.login().json()["session"]["token"]
        resp = self.client.post(f"{PREFIX}/auth/logout-all", headers=self.bearer(self.token))
        self.assertEqual(resp.json(), {"revoked_sessions": 2})
        me = self.client.get(f"{PREFIX}/auth/me", headers=self.bearer(other))
        self.assertEqual(me.status_code, 401)

    def test_update_profile(self) -> None:
        resp = self.client.patch(
            f"{PREFIX}/auth/profile",
            json={"display_name": "annie"},
            headers=self.bearer(self.token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["display_name"], "annie")
        self.assertEqual(resp.json()["first_name"], "Ann")

    def test_change_password_revokes_sessions(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/password",
            json={"current_password": VALID_PASSWORD, "new_password": "Xyz98765?"},
            headers=self.bearer(self.token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["revoked_sessions"], 1)
        self.assertEqual(self.login().status_code, 401)
        self.assertEqual(self.login("Xyz98765?").status_code, 200)

    def test_expired_session_rejected(self) -> None:
        self.clock.advance(hours=25)
        resp = self.client.get(f"{PREFIX}/auth/me", headers=self.bearer(self.token))
        self.assertEqual(resp.status_code, 401)


class TestAdminEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        account_id = self.register().json()["id"]
        self.token = self.login().json()["session"]["token"]
        self.account_id = account_id

    def test_requires_admin_role(self) -> None:
        resp = self.client.get(f"{PREFIX}/admin/stats/accounts", headers=self.bearer(self.token))
        self.assertEqual(resp.status_code, 403)

    def test_admin_can_read_stats_and_run_maintenance(self) -> None:
        CredentialStore(self.db).grant_role(self.account_id, "admin", self.clock())
        headers = self.bearer(self.token)

        stats = self.client.get(f"{PREFIX}/admin/stats/accounts", headers=headers)
        self.assertEqual(stats.status_code, 200)
        self.assertEqual(stats.json()["total"], 1)
        self.assertEqual(stats.json()["active_sessions"], 1)

        logins = self.client.get(f"{PREFIX}/admin/stats/logins", params={"days": 2}, headers=headers)
        self.assertEqual(logins.status_code, 200)
        self.assertEqual(len(logins.json()["per_day"]), 2)

        sweep = self.client.post(f"{PREFIX}/admin/maintenance/sweep-sessions", headers=headers)
        self.assertEqual(sweep.json(), {"affected": 0})

        bad = self.client.post(
            f"{PREFIX}/admin/maintenance/prune-activity",
            params={"retention_days": 0},
            headers=headers,
        )
        self.assertEqual(bad.status_code, 422)


class TestHealth(ApiTestCase):
    def test_health_reports_database(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
