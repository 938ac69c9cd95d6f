"""Schemas for maintenance operations."""

from pydantic import BaseModel, Field


class SweepResponse(BaseModel):
    affected: int = Field(..., description="Rows changed or deleted by this run")


class MaintenanceReport(BaseModel):
    """Counts from one full maintenance run."""

    skipped: bool = False
    sessions_expired: int = 0
    activity_pruned: int = 0
    attempts_pruned: int = 0
