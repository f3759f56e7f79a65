from typing import Literal
from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import PyJWTError
from sqlmodel import Session, select

from app.core.config import get_settings
from app.core.password import DUMMY_HASH, verify_password, get_password_hash
from app.exceptions import AppException
from app.models.user import User

__all__ = [
    "authenticate_user",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "get_password_hash",
    "verify_password",
]


def authenticate_user(session: Session, username: str, password: str) -> User | None:
    """
    Authenticate an active user by username and password.

    A dummy hash is verified when the username is unknown so that both
    failure paths cost the same.

    Returns:
        User if authentication succeeds, `None` otherwise.
    """
    statement = select(User).where(User.username == username)
    user = session.exec(statement).first()
    hash_to_verify = user.hashed_password if user else DUMMY_HASH
    password_ok = verify_password(password, hash_to_verify)
    if user and user.is_active and password_ok:
        return user
    return None


def create_token(
    data: dict, expires_delta: timedelta, type: Literal["access", "refresh"]
) -> str:
    """
    Create a JSON Web Token with the given payload, expiration, and token type.

    Parameters:
        data (dict): Payload claims to include in the token.
        expires_delta (timedelta): Time span from now after which the token expires.
        type (Literal["access", "refresh"]): Token classification included in the token claims.

    Returns:
        token (str): Encoded JWT string.

    Raises:
        AppException: If the token cannot be generated (rendered as HTTP 500).
    """
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": type})
    try:
        return jwt.encode(
            to_encode,
            settings.SECRET_KEY.get_secret_value(),
            algorithm=settings.ALGORITHM,
        )
    except PyJWTError as e:
        raise AppException("Could not generate authentication token.") from e


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token containing the provided payload.

    Parameters:
        data (dict): Claims to include in the token payload.
        expires_delta (timedelta | None): Optional time until expiration. If `None`, the expiration is set using ACCESS_TOKEN_EXPIRE_MINUTES from application settings.
    """
    expires_delta = (
        expires_delta
        if expires_delta
        else timedelta(minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return create_token(data, expires_delta=expires_delta, type="access")


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT refresh token containing the provided payload.

    Parameters:
        data (dict): Claims to include in the token payload.
        expires_delta (timedelta | None): Time until the token expires; if None, uses REFRESH_TOKEN_EXPIRE_DAYS from settings.
    """
    expires_delta = (
        expires_delta
        if expires_delta
        else timedelta(days=get_settings().REFRESH_TOKEN_EXPIRE_DAYS)
    )
    return create_token(data, expires_delta=expires_delta, type="refresh")


def decode_token(token: str) -> dict:
    """
    Verify a JWT's signature and expiry and return its claims.

    Raises:
        jwt.exceptions.InvalidTokenError: If the token is malformed, expired or badly signed.
    """
    settings = get_settings()
    return jwt.decode(
        token,
        settings.SECRET_KEY.get_secret_value(),
        algorithms=[settings.ALGORITHM],
    )
