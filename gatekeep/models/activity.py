"""ORM model for the account activity (audit) trail."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String

from gatekeep.core.clock import utcnow
from gatekeep.models.base import Base


class ActivityRecord(Base):
    """
    Immutable audit entry for an account action.

    session_id is a weak reference: deleting the session nulls it and the record stays.
    metadata_json is free-form JSON; nothing in the service enforces a schema on it.
    """

    __tablename__ = "activity_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_id = Column(
        Integer,
        ForeignKey("sessions.id", ondelete="SET NULL"),
        nullable=True,
    )
    action = Column(String(64), nullable=False)
    resource = Column(String(255), nullable=True)
    address_hash = Column(String(64), nullable=True)
    metadata_json = Column(JSON, nullable=True)
    success = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
