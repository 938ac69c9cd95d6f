"""Credential store: accounts, profiles, and the atomic login-counter updates."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from gatekeep.models import Account, Profile, Role, RolePermission
from gatekeep.services.errors import DuplicateAccountError, NotFoundError, StorageError
from gatekeep.stores.base import SqlStore

logger = logging.getLogger(__name__)


class CredentialStore(SqlStore):
    """Lookup and atomic field updates for Account rows."""

    def get(self, account_id: int) -> Account | None:
        with self.reading() as db:
            return db.execute(
                select(Account)
                .options(selectinload(Account.profile))
                .where(Account.id == account_id)
            ).scalar_one_or_none()

    def find_active_by_email(self, email: str) -> Account | None:
        """email must already be normalized."""
        with self.reading() as db:
            return db.execute(
                select(Account)
                .options(selectinload(Account.profile))
                .where(Account.email == email, Account.is_active.is_(True))
            ).scalar_one_or_none()

    def create_with_profile(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        now: datetime,
    ) -> Account:
        """
        Insert Account + Profile in one transaction (both persist or neither does).

        Raises DuplicateAccountError when the unique email index rejects the insert,
        which is what decides concurrent registrations for the same address.
        """
        account = Account(
            email=email,
            password_hash=password_hash,
            is_active=True,
            email_verified=False,
            failed_login_count=0,
            login_count=0,
            created_at=now,
            updated_at=now,
        )
        account.profile = Profile(first_name=first_name, last_name=last_name, updated_at=now)
        try:
            with self.transaction(raise_conflicts=True) as db:
                db.add(account)
        except IntegrityError as e:
            logger.info("Registration rejected by unique email constraint")
            raise DuplicateAccountError() from e
        return account

    def record_failed_login(
        self,
        account_id: int,
        now: datetime,
        max_failures: int,
        lockout: timedelta,
    ) -> tuple[int, datetime | None]:
        """
        Increment the failure counter and, when it reaches max_failures, set the
        lock in the same UPDATE statement. Returns (failed_count, locked_until).
        """
        new_count = Account.failed_login_count + 1
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(
                failed_login_count=new_count,
                locked_until=case(
                    (new_count >= max_failures, now + lockout),
                    else_=Account.locked_until,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            result = db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Account not found.")
            row = db.execute(
                select(Account.failed_login_count, Account.locked_until).where(
                    Account.id == account_id
                )
            ).one()
        return row.failed_login_count, row.locked_until

    def record_successful_login(self, account_id: int, now: datetime) -> None:
        """Reset failures, clear the lock, bump login_count and last_login_at in one UPDATE."""
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(
                failed_login_count=0,
                locked_until=None,
                login_count=Account.login_count + 1,
                last_login_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            result = db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Account not found.")

    def update_password_hash(self, account_id: int, password_hash: str, now: datetime) -> None:
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(password_hash=password_hash, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        with self.transaction() as db:
            if db.execute(stmt).rowcount == 0:
                raise NotFoundError("Account not found.")

    def update_profile(self, account_id: int, fields: dict[str, str | None], now: datetime) -> Profile:
        with self.transaction() as db:
            profile = db.execute(
                select(Profile).where(Profile.account_id == account_id)
            ).scalar_one_or_none()
            if profile is None:
                raise NotFoundError("Account not found.")
            for name, value in fields.items():
                setattr(profile, name, value)
            profile.updated_at = now
        return profile

    def has_role(self, account_id: int, role_name: str) -> bool:
        with self.reading() as db:
            found = db.execute(
                select(RolePermission.id)
                .join(Role, Role.id == RolePermission.role_id)
                .where(RolePermission.account_id == account_id, Role.name == role_name)
            ).first()
        return found is not None

    def _grant_exists(self, db: Session, account_id: int, role_id: int) -> bool:
        return db.execute(
            select(RolePermission.id).where(
                RolePermission.account_id == account_id,
                RolePermission.role_id == role_id,
            )
        ).first() is not None

    def grant_role(
        self,
        account_id: int,
        role_name: str,
        now: datetime,
        granted_by: int | None = None,
    ) -> bool:
        """
        Grant role_name (created on first use). Returns False if already granted.

        A concurrent grant of the same role is settled by the unique constraint on
        (account_id, role_id); the loser reports False. Any other conflict, such as
        two callers creating the same new role, surfaces as a retryable StorageError.
        """
        try:
            with self.transaction(raise_conflicts=True) as db:
                role = db.execute(select(Role).where(Role.name == role_name)).scalar_one_or_none()
                if role is None:
                    role = Role(name=role_name)
                    db.add(role)
                    db.flush()
                if self._grant_exists(db, account_id, role.id):
                    return False
                db.add(
                    RolePermission(
                        account_id=account_id,
                        role_id=role.id,
                        granted_by=granted_by,
                        granted_at=now,
                    )
                )
        except IntegrityError as e:
            if self.has_role(account_id, role_name):
                logger.info("Role %s already granted to account_id=%s", role_name, account_id)
                return False
            raise StorageError() from e
        return True
