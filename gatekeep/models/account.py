"""ORM models for accounts and their 1:1 profiles."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from gatekeep.core.clock import utcnow
from gatekeep.models.base import Base


class Account(Base):
    """
    Registered identity with credentials and login bookkeeping.

    email is stored normalized (trimmed, lowercased); the unique index is what
    guarantees one account per address.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    email_verified = Column(Boolean, nullable=False, default=False)

    failed_login_count = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime, nullable=True)
    login_count = Column(Integer, nullable=False, default=0)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship(
        "Profile",
        back_populates="account",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    role_permissions = relationship(
        "RolePermission",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="RolePermission.account_id",
    )


class Profile(Base):
    """Display fields owned by an Account; no security semantics."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    display_name = Column(String(100), nullable=True)
    bio = Column(String(500), nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    account = relationship("Account", back_populates="profile")
