"""Session store: create, lookup-and-touch, invalidate, bulk expiry."""

from datetime import datetime

from sqlalchemy import select, update

from gatekeep.models import AuthSession
from gatekeep.stores.base import SqlStore


class SessionStore(SqlStore):
    """Sessions are addressed by token hash; callers never pass raw tokens here."""

    def create(
        self,
        token_hash: str,
        account_id: int,
        device_fingerprint: str,
        address_hash: str,
        now: datetime,
        expires_at: datetime,
    ) -> AuthSession:
        row = AuthSession(
            token_hash=token_hash,
            account_id=account_id,
            device_fingerprint=device_fingerprint,
            address_hash=address_hash,
            is_valid=True,
            created_at=now,
            last_activity_at=now,
            expires_at=expires_at,
        )
        with self.transaction() as db:
            db.add(row)
        return row

    def get_by_token_hash(self, token_hash: str) -> AuthSession | None:
        with self.reading() as db:
            return db.execute(
                select(AuthSession).where(AuthSession.token_hash == token_hash)
            ).scalar_one_or_none()

    def touch(self, session_id: int, now: datetime) -> bool:
        """Bump last_activity_at if the session is still valid. Last writer wins."""
        stmt = (
            update(AuthSession)
            .where(AuthSession.id == session_id, AuthSession.is_valid.is_(True))
            .values(last_activity_at=now)
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            result = db.execute(stmt)
        return result.rowcount == 1

    def invalidate_by_token_hash(self, token_hash: str) -> tuple[AuthSession | None, bool]:
        """
        Mark invalid regardless of current state. Returns (row, was_valid); row is None
        when no session matched, was_valid tells whether this call revoked it.
        """
        with self.transaction() as db:
            row = db.execute(
                select(AuthSession).where(AuthSession.token_hash == token_hash)
            ).scalar_one_or_none()
            if row is None:
                return None, False
            was_valid = bool(row.is_valid)
            row.is_valid = False
        return row, was_valid

    def invalidate_all_for_account(self, account_id: int) -> int:
        stmt = (
            update(AuthSession)
            .where(AuthSession.account_id == account_id, AuthSession.is_valid.is_(True))
            .values(is_valid=False)
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            result = db.execute(stmt)
        return result.rowcount

    def invalidate_expired(self, now: datetime) -> int:
        """Only touches rows already logically expired, so it is safe beside live traffic."""
        stmt = (
            update(AuthSession)
            .where(AuthSession.is_valid.is_(True), AuthSession.expires_at <= now)
            .values(is_valid=False)
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            result = db.execute(stmt)
        return result.rowcount
