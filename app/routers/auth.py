from datetime import timedelta
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from jwt.exceptions import InvalidTokenError as JWTInvalidTokenError
from sqlmodel import Session

from app.database.database import get_session
from app.core.config import get_settings, Settings
from app.core.security import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from app.exceptions import InvalidCredentialsError, InvalidTokenError
from app.models.password_reset import (
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
)
from app.models.token import Token, TokenRefreshRequest
from app.models.user import User, UserCreate, UserPublic
from app.services import user as user_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_claims(user: User) -> dict:
    return {"sub": user.username, "role": user.role.value}


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(
    user_in: UserCreate,
    session: Annotated[Session, Depends(get_session)],
):
    """
    Create a volunteer account (role USER).

    Hosts register the same way, then create their host profile with
    `POST /hosts`.
    """
    return user_service.create_user(session, user_in)


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[Session, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    user = authenticate_user(session, form_data.username, form_data.password)
    if not user:
        raise InvalidCredentialsError()

    access_token = create_access_token(
        data=_token_claims(user),
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    refresh_token = create_refresh_token(
        data={"sub": user.username},
        expires_delta=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

    return Token(
        access_token=access_token, refresh_token=refresh_token, token_type="bearer"
    )


@router.post("/refresh", response_model=Token)
async def refresh_token(
    request_data: TokenRefreshRequest,
    session: Annotated[Session, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Exchange a refresh token for a new access token.
    Expects JSON: {"refresh_token": "..."}

    Deactivated accounts cannot refresh.
    """
    incoming_refresh_token = request_data.refresh_token

    try:
        payload = decode_token(incoming_refresh_token)
    except JWTInvalidTokenError:
        raise InvalidTokenError()

    username: str | None = payload.get("sub")
    if username is None or payload.get("type") != "refresh":
        raise InvalidTokenError()
    user = user_service.get_user_by_username(session, username)
    if not user or not user.is_active:
        raise InvalidTokenError()

    new_access_token = create_access_token(
        data=_token_claims(user),
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    return Token(
        access_token=new_access_token,
        refresh_token=incoming_refresh_token,
        token_type="bearer",
    )


@router.post("/password-reset/request", response_model=PasswordResetResponse)
async def request_password_reset(
    request_data: PasswordResetRequest,
    session: Annotated[Session, Depends(get_session)],
):
    """
    Email a password reset link valid for `PASSWORD_RESET_TOKEN_EXPIRE_MINUTES`.

    The answer is the same whether or not the address has an account.
    """
    await user_service.request_password_reset(session, request_data.email)
    return PasswordResetResponse(
        message="If this email is registered, a reset link has been sent"
    )


@router.get("/password-reset/validate", response_model=PasswordResetResponse)
def validate_password_reset_token(
    session: Annotated[Session, Depends(get_session)],
    token: str = Query(min_length=64, max_length=64),
):
    """Check a reset token before showing the new-password form (401 if invalid)."""
    user_service.validate_password_reset_token(session, token)
    return PasswordResetResponse(message="Reset token is valid")


@router.post("/password-reset/confirm", response_model=PasswordResetResponse)
def confirm_password_reset(
    reset_data: PasswordResetConfirm,
    session: Annotated[Session, Depends(get_session)],
):
    user_service.reset_password_with_token(
        session, reset_data.token, reset_data.new_password
    )
    return PasswordResetResponse(message="Password has been reset")
