"""Shared transaction handling for the SQLAlchemy-backed stores."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gatekeep.services.errors import StorageError

logger = logging.getLogger(__name__)


class SqlStore:
    """Base for stores that share one request-scoped SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def transaction(self, raise_conflicts: bool = False) -> Iterator[Session]:
        """
        One all-or-nothing unit of work: commit on exit, roll back on any error.

        SQLAlchemy errors surface as StorageError. With raise_conflicts, an
        IntegrityError propagates unchanged so the caller can map the
        constraint it expects (duplicate email, existing grant).
        """
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            if raise_conflicts and isinstance(e, IntegrityError):
                raise
            logger.exception("Storage operation failed in %s", type(self).__name__)
            raise StorageError() from e
        except BaseException:
            self.db.rollback()
            raise

    @contextmanager
    def reading(self) -> Iterator[Session]:
        """Read-only access; storage failures surface as StorageError."""
        try:
            yield self.db
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage read failed in %s", type(self).__name__)
            raise StorageError() from e
