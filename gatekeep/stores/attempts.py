"""Attempt ledger: append-only login attempts with windowed counting."""

from datetime import datetime

from sqlalchemy import delete, func, select

from gatekeep.models import LoginAttempt
from gatekeep.stores.base import SqlStore


class AttemptLedger(SqlStore):
    """
    Append-only; rows are never updated, so concurrent writers never conflict.

    Counts read here are a point-in-time snapshot: two concurrent callers can both
    observe N-1 failures and both proceed. The rate limit is an approximate bound.
    """

    def record(
        self,
        email: str,
        address_hash: str,
        success: bool,
        now: datetime,
        failure_reason: str | None = None,
    ) -> None:
        with self.transaction() as db:
            db.add(
                LoginAttempt(
                    email=email,
                    address_hash=address_hash,
                    success=success,
                    failure_reason=failure_reason,
                    attempted_at=now,
                )
            )

    def count_failures_since(self, email: str, address_hash: str, since: datetime) -> int:
        """Failures strictly after since; a failure exactly at since has aged out."""
        with self.reading() as db:
            return db.execute(
                select(func.count(LoginAttempt.id)).where(
                    LoginAttempt.email == email,
                    LoginAttempt.address_hash == address_hash,
                    LoginAttempt.success.is_(False),
                    LoginAttempt.attempted_at > since,
                )
            ).scalar_one()

    def oldest_failure_since(self, email: str, address_hash: str, since: datetime) -> datetime | None:
        """Earliest failure inside the window; used to compute retry-after."""
        with self.reading() as db:
            return db.execute(
                select(func.min(LoginAttempt.attempted_at)).where(
                    LoginAttempt.email == email,
                    LoginAttempt.address_hash == address_hash,
                    LoginAttempt.success.is_(False),
                    LoginAttempt.attempted_at > since,
                )
            ).scalar_one()

    def delete_before(self, cutoff: datetime) -> int:
        with self.transaction() as db:
            result = db.execute(
                delete(LoginAttempt)
                .where(LoginAttempt.attempted_at < cutoff)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount
