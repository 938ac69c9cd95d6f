"""ORM models for roles and the account-role grant relation (no evaluation logic)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from gatekeep.core.clock import utcnow
from gatekeep.models.base import Base


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)  # e.g. admin, support


class RolePermission(Base):
    """Grant of a Role to an Account, with who granted it and when."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("account_id", "role_id", name="uq_role_permissions_account_role"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    granted_by = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
    granted_at = Column(DateTime, nullable=False, default=utcnow)

    account = relationship(
        "Account", back_populates="role_permissions", foreign_keys=[account_id]
    )
    role = relationship("Role")
