"""Request/response schemas for account, login and session operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration payload. Constraints are enforced by the service (one error listing all fields)."""

    first_name: str = Field(..., description="Given name (1-100 chars)")
    last_name: str = Field(..., description="Family name (1-100 chars)")
    email: str = Field(..., description="Email address (case-insensitive)")
    password: str = Field(..., description="Password (8-128 chars, mixed classes)")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., max_length=254, description="Email address")
    password: str = Field(..., max_length=1024, description="Password")


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str
    display_name: str | None = None
    bio: str | None = None


class AccountOut(BaseModel):
    """Account without credential material."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    is_active: bool
    email_verified: bool
    login_count: int
    last_login_at: datetime | None = None
    created_at: datetime
    profile: ProfileOut | None = None


class SessionOut(BaseModel):
    """Session as seen by the caller. token is only populated when the session is issued."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    created_at: datetime
    last_activity_at: datetime
    expires_at: datetime
    token: str | None = Field(default=None, description="Opaque bearer token (issued once)")


class LoginResult(BaseModel):
    """Successful authentication: the account (with profile) and its new session."""

    account: AccountOut
    session: SessionOut


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    bio: str | None = None


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., max_length=1024)
    new_password: str = Field(..., max_length=1024)


class SessionsRevokedResponse(BaseModel):
    revoked_sessions: int = Field(..., description="Number of sessions invalidated")


class MessageResponse(BaseModel):
    message: str
