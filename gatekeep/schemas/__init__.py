"""Pydantic request/response schemas."""

from gatekeep.schemas.auth import (
    AccountOut,
    LoginRequest,
    LoginResult,
    MessageResponse,
    PasswordChangeRequest,
    ProfileOut,
    ProfileUpdateRequest,
    RegisterRequest,
    SessionOut,
    SessionsRevokedResponse,
)
from gatekeep.schemas.health import HealthResponse
from gatekeep.schemas.maintenance import MaintenanceReport, SweepResponse
from gatekeep.schemas.stats import AccountStatsResult, DailyLoginStats, LoginStatsResult

__all__ = [
    "AccountOut",
    "AccountStatsResult",
    "DailyLoginStats",
    "HealthResponse",
    "LoginRequest",
    "LoginResult",
    "LoginStatsResult",
    "MaintenanceReport",
    "MessageResponse",
    "PasswordChangeRequest",
    "ProfileOut",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "SessionOut",
    "SessionsRevokedResponse",
    "SweepResponse",
]
