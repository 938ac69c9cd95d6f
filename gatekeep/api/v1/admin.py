"""Admin-only reporting and maintenance endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gatekeep.api.deps import get_reporting, get_sweeper, require_admin
from gatekeep.schemas.auth import SessionOut
from gatekeep.schemas.maintenance import SweepResponse
from gatekeep.schemas.stats import AccountStatsResult, LoginStatsResult
from gatekeep.services.maintenance import MaintenanceSweeper
from gatekeep.services.reporting import ReportingService

router = APIRouter()


@router.get("/stats/accounts", response_model=AccountStatsResult)
def account_stats(
    _admin: Annotated[SessionOut, Depends(require_admin)],
    reporting: Annotated[ReportingService, Depends(get_reporting)],
) -> AccountStatsResult:
    return reporting.account_stats()


@router.get("/stats/logins", response_model=LoginStatsResult)
def login_stats(
    _admin: Annotated[SessionOut, Depends(require_admin)],
    reporting: Annotated[ReportingService, Depends(get_reporting)],
    days: Annotated[int, Query(description="Trailing window in days (1-365)")] = 7,
) -> LoginStatsResult:
    return reporting.login_stats(days)


@router.post("/maintenance/sweep-sessions", response_model=SweepResponse)
def sweep_sessions(
    _admin: Annotated[SessionOut, Depends(require_admin)],
    sweeper: Annotated[MaintenanceSweeper, Depends(get_sweeper)],
) -> SweepResponse:
    """Mark expired sessions invalid. Safe to call repeatedly."""
    return SweepResponse(affected=sweeper.sweep_expired_sessions())


@router.post("/maintenance/prune-activity", response_model=SweepResponse)
def prune_activity(
    _admin: Annotated[SessionOut, Depends(require_admin)],
    sweeper: Annotated[MaintenanceSweeper, Depends(get_sweeper)],
    retention_days: Annotated[int | None, Query(description="Defaults to ACTIVITY_RETENTION_DAYS")] = None,
) -> SweepResponse:
    """Delete activity records older than the retention window. Irreversible."""
    return SweepResponse(affected=sweeper.prune_activity_log(retention_days))
