"""ORM model for the append-only login attempt ledger."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from gatekeep.core.clock import utcnow
from gatekeep.models.base import Base

# Failure reasons recorded on unsuccessful attempts.
REASON_RATE_LIMITED = "rate_limited"
REASON_USER_NOT_FOUND = "user_not_found"
REASON_ACCOUNT_LOCKED = "account_locked"
REASON_INVALID_PASSWORD = "invalid_password"


class LoginAttempt(Base):
    """Immutable fact: one login attempt for an email from a hashed address."""

    __tablename__ = "login_attempts"
    __table_args__ = (
        Index(
            "ix_login_attempts_email_address_time",
            "email",
            "address_hash",
            "attempted_at",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False)
    address_hash = Column(String(64), nullable=False)
    success = Column(Boolean, nullable=False)
    failure_reason = Column(String(32), nullable=True)
    attempted_at = Column(DateTime, nullable=False, default=utcnow, index=True)
