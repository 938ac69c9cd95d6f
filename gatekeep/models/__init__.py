"""SQLAlchemy ORM models."""

from gatekeep.models.account import Account, Profile
from gatekeep.models.activity import ActivityRecord
from gatekeep.models.base import Base
from gatekeep.models.login_attempt import LoginAttempt
from gatekeep.models.role import Role, RolePermission
from gatekeep.models.session import AuthSession

__all__ = [
    "Account",
    "ActivityRecord",
    "AuthSession",
    "Base",
    "LoginAttempt",
    "Profile",
    "Role",
    "RolePermission",
]
