"""
API v1 account and session routes.

Defines REST endpoints for email sign-up, login and the current session.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import get_credential_store
from src.api.models import (
    AccountResponse,
    ErrorResponse,
    LoginRequest,
    PasswordStrengthRequest,
    PasswordStrengthResponse,
    SignUpRequest,
)
from src.domain.credentials import CredentialStore, PasswordStrength
from src.domain.exceptions import DuplicateEmailError, InvalidCredentialsError

router = APIRouter(tags=["v1"])


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"description": "Validation error"},
    },
    summary="Create an account",
    description="Create an account with full name, email and password. "
    "The new account is signed in.",
)
async def create_account(
    request_data: SignUpRequest,
    store: CredentialStore = Depends(get_credential_store),
) -> AccountResponse:
    """
    Create an account and sign it in.

    - **full_name**: Display name
    - **email**: Valid email address (normalized to lowercase)
    - **password**: Password (minimum 8 characters), repeated in **confirm_password**
    """
    try:
        account = store.create_account(
            request_data.full_name, request_data.email, request_data.password
        )
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return AccountResponse.from_record(account)


@router.post(
    "/accounts/password-strength",
    response_model=PasswordStrengthResponse,
    summary="Rate password strength",
)
async def password_strength(request_data: PasswordStrengthRequest) -> PasswordStrengthResponse:
    """Classify a candidate password for the sign-up strength meter."""
    return PasswordStrengthResponse.from_strength(PasswordStrength.of(request_data.password))


@router.post(
    "/sessions",
    response_model=AccountResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Incorrect email or password"},
        422: {"description": "Validation error"},
    },
    summary="Log in",
    description="Authenticate with email and password and start a session.",
)
async def login(
    request_data: LoginRequest,
    store: CredentialStore = Depends(get_credential_store),
) -> AccountResponse:
    """
    Log in with email and password.

    Unknown email and wrong password return the same generic error.
    """
    try:
        account = store.authenticate(request_data.email, request_data.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from None
    return AccountResponse.from_record(account)


@router.get(
    "/sessions/current",
    response_model=AccountResponse,
    responses={404: {"model": ErrorResponse, "description": "No active session"}},
    summary="Get the signed-in account",
)
async def current_session(
    store: CredentialStore = Depends(get_credential_store),
) -> AccountResponse:
    account = store.get_current_session()
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active session")
    return AccountResponse.from_record(account)


@router.delete(
    "/sessions/current",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
)
async def logout(store: CredentialStore = Depends(get_credential_store)) -> Response:
    """Clear the session. Succeeds even when nobody is signed in."""
    store.logout()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
