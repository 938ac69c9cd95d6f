"""Database engine and session management (PostgreSQL in prod, SQLite for dev/tests)."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gatekeep.core.config import settings


def _engine_kwargs(url: str, timeout_sec: float) -> dict[str, Any]:
    """Per-dialect connect args so every storage call inherits a timeout."""
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False, "timeout": timeout_sec},
        }
        # In-memory databases live on a single connection shared across threads.
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    timeout_ms = int(timeout_sec * 1000)
    return {
        "pool_pre_ping": True,
        "connect_args": {
            "connect_timeout": max(int(timeout_sec), 1),
            "options": f"-c statement_timeout={timeout_ms}",
        },
    }


def build_engine(url: str, timeout_sec: float, echo: bool = False) -> Engine:
    """Create an engine for url; SQLite connections get foreign keys enabled."""
    engine = create_engine(url, echo=echo, **_engine_kwargs(url, timeout_sec))
    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(
    settings.DATABASE_URL,
    settings.STORAGE_TIMEOUT_SEC,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
