"""SQLAlchemy-backed stores consumed by the service layer."""

from gatekeep.stores.activity import ActivityLog
from gatekeep.stores.attempts import AttemptLedger
from gatekeep.stores.credentials import CredentialStore
from gatekeep.stores.sessions import SessionStore

__all__ = ["ActivityLog", "AttemptLedger", "CredentialStore", "SessionStore"]
