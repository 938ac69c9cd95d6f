"""Read-only aggregate counts over accounts, sessions and the attempt ledger."""

from datetime import date, datetime, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from gatekeep.core.clock import Clock, utcnow
from gatekeep.models import Account, AuthSession, LoginAttempt
from gatekeep.schemas.stats import AccountStatsResult, DailyLoginStats, LoginStatsResult
from gatekeep.services.errors import ValidationError
from gatekeep.stores.base import SqlStore

MAX_LOGIN_STATS_DAYS = 365


def _as_date(value: date | datetime | str) -> date:
    # SQLite returns DATE() as text, PostgreSQL as a date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


class ReportingService(SqlStore):
    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        super().__init__(db)
        self.clock = clock

    def account_stats(self) -> AccountStatsResult:
        now = self.clock()
        start_of_day = datetime(now.year, now.month, now.day)
        with self.reading() as db:
            row = db.execute(
                select(
                    func.count(Account.id).label("total"),
                    func.coalesce(func.sum(case((Account.is_active.is_(True), 1), else_=0)), 0).label("active"),
                    func.coalesce(func.sum(case((Account.email_verified.is_(True), 1), else_=0)), 0).label("verified"),
                    func.coalesce(func.sum(case((Account.created_at >= start_of_day, 1), else_=0)), 0).label("created_today"),
                )
            ).one()
            active_sessions = db.execute(
                select(func.count(AuthSession.id)).where(
                    AuthSession.is_valid.is_(True), AuthSession.expires_at > now
                )
            ).scalar_one()
        return AccountStatsResult(
            total=row.total,
            active=row.active,
            verified=row.verified,
            created_today=row.created_today,
            active_sessions=active_sessions,
        )

    def login_stats(self, days: int = 7) -> LoginStatsResult:
        """Per-day counts for the last `days` days including today; days without attempts are zero."""
        if days < 1 or days > MAX_LOGIN_STATS_DAYS:
            raise ValidationError({"days": [f"Must be between 1 and {MAX_LOGIN_STATS_DAYS}"]})
        today = self.clock().date()
        first_day = today - timedelta(days=days - 1)
        since = datetime(first_day.year, first_day.month, first_day.day)

        day_col = func.date(LoginAttempt.attempted_at).label("day")
        with self.reading() as db:
            rows = db.execute(
                select(
                    day_col,
                    func.sum(case((LoginAttempt.success.is_(True), 1), else_=0)).label("successes"),
                    func.sum(case((LoginAttempt.success.is_(False), 1), else_=0)).label("failures"),
                )
                .where(LoginAttempt.attempted_at >= since)
                .group_by(day_col)
            ).all()

        by_day = {_as_date(r.day): (r.successes or 0, r.failures or 0) for r in rows}
        per_day = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            successes, failures = by_day.get(day, (0, 0))
            per_day.append(DailyLoginStats(day=day, successes=successes, failures=failures))
        return LoginStatsResult(days=days, per_day=per_day)
