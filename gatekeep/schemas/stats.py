"""Typed results for reporting queries."""

from datetime import date

from pydantic import BaseModel, Field


class AccountStatsResult(BaseModel):
    """Point-in-time account counts; reflect storage state at query time."""

    total: int
    active: int
    verified: int
    created_today: int
    active_sessions: int


class DailyLoginStats(BaseModel):
    day: date
    successes: int = 0
    failures: int = 0


class LoginStatsResult(BaseModel):
    """Per-day success/failure counts over a trailing window (oldest day first)."""

    days: int = Field(..., description="Trailing window length in days")
    per_day: list[DailyLoginStats]
