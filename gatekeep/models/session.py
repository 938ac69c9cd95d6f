"""ORM model for server-side login sessions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from gatekeep.core.clock import utcnow
from gatekeep.models.base import Base


class AuthSession(Base):
    """
    Login session keyed by the SHA-256 of its opaque token (raw token is never stored).

    Usable iff is_valid and now < expires_at. Expiry is enforced at read time;
    the maintenance sweep flips is_valid on rows that are already expired.
    """

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    device_fingerprint = Column(String(64), nullable=False)
    address_hash = Column(String(64), nullable=False)
    is_valid = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_activity_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
