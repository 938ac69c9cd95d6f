"""Shared test helpers: in-memory database, fake clock, service wiring."""

from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from gatekeep.core.config import Settings
from gatekeep.core.database import build_engine
from gatekeep.models import Base
from gatekeep.services.auth import AuthService
from gatekeep.services.factory import build_auth_service

VALID_PASSWORD = "Abc12345!"
WRONG_PASSWORD = "Wrong123!"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 10, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_settings(**overrides: object) -> Settings:
    """Settings with fast bcrypt and an in-memory database."""
    values: dict[str, object] = {"DATABASE_URL": "sqlite://", "BCRYPT_ROUNDS": 4}
    values.update(overrides)
    return Settings(**values)


def make_session_factory(url: str = "sqlite://") -> sessionmaker:
    """New engine with a fresh schema; use a file URL when sessions must not share a connection."""
    engine = build_engine(url, 5.0)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_db(url: str = "sqlite://") -> Session:
    """Fresh schema on a new engine; every call is isolated from the others."""
    return make_session_factory(url)()


def make_service(
    db: Session | None = None,
    clock: FakeClock | None = None,
    **overrides: object,
) -> AuthService:
    return build_auth_service(db or make_db(), make_settings(**overrides), clock or FakeClock())


def count_rows(db: Session, model: type, *criteria: object) -> int:
    return db.execute(select(func.count()).select_from(model).where(*criteria)).scalar_one()
