"""Account, login and session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from gatekeep.api.deps import (
    ClientInfo,
    get_auth_service,
    get_bearer_token,
    get_client_info,
    get_current_session,
)
from gatekeep.schemas.auth import (
    AccountOut,
    LoginRequest,
    LoginResult,
    MessageResponse,
    PasswordChangeRequest,
    ProfileOut,
    ProfileUpdateRequest,
    RegisterRequest,
    SessionOut,
    SessionsRevokedResponse,
)
from gatekeep.services.auth import AuthService

router = APIRouter()


@router.post("/register", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AccountOut:
    """Create an account and profile. 409 if the email is already registered."""
    return service.register(body.first_name, body.last_name, body.email, body.password)


@router.post("/login", response_model=LoginResult)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
    client: Annotated[ClientInfo, Depends(get_client_info)],
) -> LoginResult:
    """
    Authenticate with email and password; returns the account and a new session.
    Include session.token in the Authorization header as: Bearer <token>
    """
    result = service.authenticate(
        body.email,
        body.password,
        client.address,
        client.user_agent,
        client.accept_language,
        client.accept_encoding,
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    return result


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: Annotated[str, Depends(get_bearer_token)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Invalidate the presented session. Idempotent."""
    service.logout(token)
    return MessageResponse(message="Logged out")


@router.post("/logout-all", response_model=SessionsRevokedResponse)
def logout_all(
    current: Annotated[SessionOut, Depends(get_current_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionsRevokedResponse:
    """Invalidate every session of the current account, including this one."""
    count = service.invalidate_all_sessions(current.account_id, session_id=current.id)
    return SessionsRevokedResponse(revoked_sessions=count)


@router.get("/me", response_model=AccountOut)
def me(
    current: Annotated[SessionOut, Depends(get_current_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AccountOut:
    return service.get_account(current.account_id)


@router.patch("/profile", response_model=ProfileOut)
def update_profile(
    body: ProfileUpdateRequest,
    current: Annotated[SessionOut, Depends(get_current_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ProfileOut:
    return service.update_profile(
        current.account_id,
        first_name=body.first_name,
        last_name=body.last_name,
        display_name=body.display_name,
        bio=body.bio,
        session_id=current.id,
    )


@router.post("/password", response_model=SessionsRevokedResponse)
def change_password(
    body: PasswordChangeRequest,
    current: Annotated[SessionOut, Depends(get_current_session)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionsRevokedResponse:
    """Change password; all sessions (this one included) are revoked."""
    count = service.change_password(
        current.account_id,
        body.current_password,
        body.new_password,
        session_id=current.id,
    )
    return SessionsRevokedResponse(revoked_sessions=count)
