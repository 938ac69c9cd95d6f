"""Wire stores and services onto one request-scoped SQLAlchemy session."""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from gatekeep.core.clock import Clock, utcnow
from gatekeep.services.auth import AuthService
from gatekeep.services.maintenance import MaintenanceSweeper
from gatekeep.services.reporting import ReportingService
from gatekeep.services.session_guard import SessionGuard
from gatekeep.stores import ActivityLog, AttemptLedger, CredentialStore, SessionStore

if TYPE_CHECKING:
    from gatekeep.core.config import Settings


def build_auth_service(db: Session, settings: "Settings", clock: Clock = utcnow) -> AuthService:
    sessions = SessionStore(db)
    return AuthService(
        credentials=CredentialStore(db),
        attempts=AttemptLedger(db),
        sessions=sessions,
        activity=ActivityLog(db),
        settings=settings,
        clock=clock,
        guard=SessionGuard(sessions, settings, clock),
    )


def build_session_guard(db: Session, settings: "Settings", clock: Clock = utcnow) -> SessionGuard:
    return SessionGuard(SessionStore(db), settings, clock)


def build_sweeper(db: Session, settings: "Settings", clock: Clock = utcnow) -> MaintenanceSweeper:
    return MaintenanceSweeper(
        sessions=SessionStore(db),
        activity=ActivityLog(db),
        attempts=AttemptLedger(db),
        settings=settings,
        clock=clock,
    )


def build_reporting(db: Session, clock: Clock = utcnow) -> ReportingService:
    return ReportingService(db, clock)
