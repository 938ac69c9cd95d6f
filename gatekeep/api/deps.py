"""FastAPI dependencies: service wiring, caller identity, bearer-session auth."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gatekeep.core.clock import Clock, utcnow
from gatekeep.core.config import Settings, get_settings
from gatekeep.core.database import get_db
from gatekeep.schemas.auth import SessionOut
from gatekeep.services.auth import AuthService
from gatekeep.services.factory import (
    build_auth_service,
    build_reporting,
    build_session_guard,
    build_sweeper,
)
from gatekeep.services.maintenance import MaintenanceSweeper
from gatekeep.services.reporting import ReportingService
from gatekeep.services.session_guard import SessionGuard
from gatekeep.stores import CredentialStore

ADMIN_ROLE = "admin"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ClientInfo:
    """Caller identity inputs; consumed read-only and only persisted in hashed form."""

    address: str | None
    user_agent: str | None
    accept_language: str | None
    accept_encoding: str | None


def get_clock() -> Clock:
    return utcnow


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        address = forwarded.split(",")[0].strip()
    else:
        address = request.client.host if request.client else None
    return ClientInfo(
        address=address,
        user_agent=request.headers.get("User-Agent"),
        accept_language=request.headers.get("Accept-Language"),
        accept_encoding=request.headers.get("Accept-Encoding"),
    )


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AuthService:
    return build_auth_service(db, settings, clock)


def get_session_guard(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> SessionGuard:
    return build_session_guard(db, settings, clock)


def get_sweeper(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> MaintenanceSweeper:
    return build_sweeper(db, settings, clock)


def get_reporting(
    db: Annotated[Session, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ReportingService:
    return build_reporting(db, clock)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Dependency: raw bearer token. Raises 401 if the Authorization header is missing."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_session(
    token: Annotated[str, Depends(get_bearer_token)],
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
) -> SessionOut:
    """Dependency: validate the bearer session (sliding its activity window) or raise 401."""
    session = guard.validate(token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def require_admin(
    current: Annotated[SessionOut, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> SessionOut:
    """Dependency: require a session whose account holds the admin role. Raises 403 otherwise."""
    if not CredentialStore(db).has_role(current.account_id, ADMIN_ROLE):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current
