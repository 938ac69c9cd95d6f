"""Authentication engine: registration, login policy, session issuance, audit records.

Lockout and rate-limit state is read fresh from storage on every call; counters are
changed only through single conditional UPDATE statements in the credential store,
never read-modify-write here, so concurrent failures cannot under-count.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from gatekeep.core.clock import Clock, utcnow
from gatekeep.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    device_fingerprint,
    generate_session_token,
    hash_password,
    hash_session_token,
    hash_source_address,
    is_valid_email,
    normalize_email,
    password_policy_errors,
    verify_password,
)
from gatekeep.models.login_attempt import (
    REASON_ACCOUNT_LOCKED,
    REASON_INVALID_PASSWORD,
    REASON_RATE_LIMITED,
    REASON_USER_NOT_FOUND,
)
from gatekeep.schemas.auth import AccountOut, LoginResult, ProfileOut, SessionOut
from gatekeep.services.errors import (
    AccountLockedError,
    DuplicateAccountError,
    InvalidCredentialsError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from gatekeep.services.session_guard import SessionGuard
from gatekeep.stores import ActivityLog, AttemptLedger, CredentialStore, SessionStore

if TYPE_CHECKING:
    from gatekeep.core.config import Settings

logger = logging.getLogger(__name__)

# Activity record action names.
ACTION_REGISTER = "register"
ACTION_LOGIN = "login"
ACTION_LOGIN_FAILED = "login_failed"
ACTION_LOGOUT = "logout"
ACTION_SESSIONS_REVOKED = "sessions_revoked"
ACTION_PROFILE_UPDATE = "profile_update"
ACTION_PASSWORD_CHANGE = "password_change"

DISPLAY_NAME_MAX_LEN = 100
BIO_MAX_LEN = 500


def _seconds_until(moment: datetime, now: datetime) -> int:
    return max(math.ceil((moment - now).total_seconds()), 1)


def _check_name(field: str, value: str, errors: dict[str, list[str]]) -> None:
    if not (NAME_MIN_LEN <= len(value) <= NAME_MAX_LEN):
        errors.setdefault(field, []).append(
            f"Must be between {NAME_MIN_LEN} and {NAME_MAX_LEN} characters"
        )


class AuthService:
    """Orchestrates the credential store, attempt ledger, session store and activity log."""

    def __init__(
        self,
        credentials: CredentialStore,
        attempts: AttemptLedger,
        sessions: SessionStore,
        activity: ActivityLog,
        settings: "Settings",
        clock: Clock = utcnow,
        guard: SessionGuard | None = None,
    ) -> None:
        self.credentials = credentials
        self.attempts = attempts
        self.sessions = sessions
        self.activity = activity
        self.settings = settings
        self.clock = clock
        self.guard = guard or SessionGuard(sessions, settings, clock)

    def _hash_address(self, source_address: str | None) -> str:
        return hash_source_address(
            source_address, self.settings.ADDRESS_HASH_SECRET.get_secret_value()
        )

    def register(self, first_name: str, last_name: str, email: str, password: str) -> AccountOut:
        """
        Create an Account and its Profile. All input problems are reported together.

        The pre-check for an existing account is an optimization; the unique email
        index decides races between concurrent registrations.
        """
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        normalized = normalize_email(email)

        errors: dict[str, list[str]] = {}
        _check_name("first_name", first, errors)
        _check_name("last_name", last, errors)
        if not is_valid_email(normalized):
            errors["email"] = ["Invalid email address"]
        password_errors = password_policy_errors(password)
        if password_errors:
            errors["password"] = password_errors
        if errors:
            raise ValidationError(errors)

        if self.credentials.find_active_by_email(normalized) is not None:
            raise DuplicateAccountError()

        now = self.clock()
        account = self.credentials.create_with_profile(
            email=normalized,
            password_hash=hash_password(password, rounds=self.settings.BCRYPT_ROUNDS),
            first_name=first,
            last_name=last,
            now=now,
        )
        self.activity.append(account.id, ACTION_REGISTER, now)
        logger.info("Registered account_id=%s", account.id)
        return AccountOut.model_validate(account)

    def authenticate(
        self,
        email: str,
        password: str,
        source_address: str | None,
        user_agent: str | None,
        accept_language: str | None = None,
        accept_encoding: str | None = None,
    ) -> LoginResult | None:
        """
        Verify credentials and issue a session.

        Returns None for an unknown email or a wrong password (indistinguishable to
        the caller). Raises RateLimitedError or AccountLockedError when policy blocks
        the attempt; each outcome is recorded in the attempt ledger.
        """
        normalized = normalize_email(email)
        address_hash = self._hash_address(source_address)
        now = self.clock()

        # Rate limit first, before any account lookup or password work.
        window = timedelta(minutes=self.settings.RATE_LIMIT_WINDOW_MINUTES)
        window_start = now - window
        failures = self.attempts.count_failures_since(normalized, address_hash, window_start)
        if failures >= self.settings.RATE_LIMIT_MAX_FAILURES:
            oldest = self.attempts.oldest_failure_since(normalized, address_hash, window_start)
            self.attempts.record(
                normalized, address_hash, False, now, failure_reason=REASON_RATE_LIMITED
            )
            logger.warning("Login rate limit hit: failures_in_window=%s", failures)
            raise RateLimitedError(_seconds_until((oldest or now) + window, now))

        account = self.credentials.find_active_by_email(normalized)
        if account is None:
            self.attempts.record(
                normalized, address_hash, False, now, failure_reason=REASON_USER_NOT_FOUND
            )
            return None

        account_id = account.id
        if account.locked_until is not None and account.locked_until > now:
            locked_until = account.locked_until
            self.attempts.record(
                normalized, address_hash, False, now, failure_reason=REASON_ACCOUNT_LOCKED
            )
            raise AccountLockedError(_seconds_until(locked_until, now))

        if not verify_password(password, account.password_hash):
            failed_count, locked_until = self.credentials.record_failed_login(
                account_id,
                now,
                max_failures=self.settings.MAX_FAILED_LOGINS,
                lockout=timedelta(minutes=self.settings.LOCKOUT_MINUTES),
            )
            locked = locked_until is not None and locked_until > now
            if locked:
                logger.warning(
                    "Account locked: account_id=%s failed_count=%s until=%s",
                    account_id,
                    failed_count,
                    locked_until.isoformat(),
                )
            self.attempts.record(
                normalized, address_hash, False, now, failure_reason=REASON_INVALID_PASSWORD
            )
            self.activity.append(
                account_id,
                ACTION_LOGIN_FAILED,
                now,
                address_hash=address_hash,
                metadata={"failed_count": failed_count, "locked": locked},
                success=False,
            )
            return None

        self.credentials.record_successful_login(account_id, now)
        self.attempts.record(normalized, address_hash, True, now)

        token = generate_session_token()
        session_row = self.sessions.create(
            token_hash=hash_session_token(token),
            account_id=account_id,
            device_fingerprint=device_fingerprint(user_agent, accept_language, accept_encoding),
            address_hash=address_hash,
            now=now,
            expires_at=now + timedelta(hours=self.settings.SESSION_TTL_HOURS),
        )
        session_out = SessionOut.model_validate(session_row).model_copy(update={"token": token})
        self.activity.append(
            account_id,
            ACTION_LOGIN,
            now,
            session_id=session_out.id,
            address_hash=address_hash,
        )

        fresh = self.credentials.get(account_id)
        return LoginResult(account=AccountOut.model_validate(fresh), session=session_out)

    def get_account(self, account_id: int) -> AccountOut:
        account = self.credentials.get(account_id)
        if account is None:
            raise NotFoundError("Account not found.")
        return AccountOut.model_validate(account)

    def logout(self, token: str) -> bool:
        """
        Invalidate the session for token. Idempotent; returns False for unknown or
        already-invalid tokens, which leave no further logout record.
        """
        session = self.guard.revoke(token)
        if session is None:
            return False
        self.activity.append(
            session.account_id, ACTION_LOGOUT, self.clock(), session_id=session.id
        )
        return True

    def invalidate_all_sessions(self, account_id: int, session_id: int | None = None) -> int:
        """Revoke every session of account_id (other accounts untouched). Returns the count."""
        if self.credentials.get(account_id) is None:
            raise NotFoundError("Account not found.")
        count = self.guard.invalidate_all(account_id)
        self.activity.append(
            account_id,
            ACTION_SESSIONS_REVOKED,
            self.clock(),
            session_id=session_id,
            metadata={"revoked_sessions": count},
        )
        return count

    def update_profile(
        self,
        account_id: int,
        first_name: str | None = None,
        last_name: str | None = None,
        display_name: str | None = None,
        bio: str | None = None,
        session_id: int | None = None,
    ) -> ProfileOut:
        """Apply the provided fields; None means leave unchanged."""
        fields: dict[str, str | None] = {}
        errors: dict[str, list[str]] = {}
        if first_name is not None:
            fields["first_name"] = first_name.strip()
            _check_name("first_name", fields["first_name"], errors)
        if last_name is not None:
            fields["last_name"] = last_name.strip()
            _check_name("last_name", fields["last_name"], errors)
        if display_name is not None:
            value = display_name.strip()
            if len(value) > DISPLAY_NAME_MAX_LEN:
                errors["display_name"] = [f"Must be at most {DISPLAY_NAME_MAX_LEN} characters"]
            fields["display_name"] = value or None
        if bio is not None:
            value = bio.strip()
            if len(value) > BIO_MAX_LEN:
                errors["bio"] = [f"Must be at most {BIO_MAX_LEN} characters"]
            fields["bio"] = value or None
        if not fields and not errors:
            errors["profile"] = ["No fields to update"]
        if errors:
            raise ValidationError(errors)

        now = self.clock()
        profile = self.credentials.update_profile(account_id, fields, now)
        result = ProfileOut.model_validate(profile)
        self.activity.append(
            account_id,
            ACTION_PROFILE_UPDATE,
            now,
            session_id=session_id,
            resource="profile",
            metadata={"fields": sorted(fields)},
        )
        return result

    def change_password(
        self,
        account_id: int,
        current_password: str,
        new_password: str,
        session_id: int | None = None,
    ) -> int:
        """Replace the password and revoke all of the account's sessions. Returns sessions revoked."""
        account = self.credentials.get(account_id)
        if account is None:
            raise NotFoundError("Account not found.")
        if not verify_password(current_password, account.password_hash):
            raise InvalidCredentialsError("Invalid current password.")

        errors = password_policy_errors(new_password)
        if not errors and verify_password(new_password, account.password_hash):
            errors = ["New password must differ from the current password"]
        if errors:
            raise ValidationError({"new_password": errors})

        now = self.clock()
        self.credentials.update_password_hash(
            account_id, hash_password(new_password, rounds=self.settings.BCRYPT_ROUNDS), now
        )
        revoked = self.guard.invalidate_all(account_id)
        self.activity.append(
            account_id,
            ACTION_PASSWORD_CHANGE,
            now,
            session_id=session_id,
            metadata={"revoked_sessions": revoked},
        )
        return revoked
