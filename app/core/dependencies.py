from typing import Annotated
from jwt.exceptions import InvalidTokenError as JWTInvalidTokenError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from app.core.security import decode_token
from app.database.database import get_session
from app.exceptions import InvalidTokenError, InsufficientPermissionsError
from app.models.token import TokenData
from app.models.user import User
from app.models.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Session = Depends(get_session),
) -> User:
    """
    Resolve the authenticated user from an access JWT.

    Returns:
        user (User): The active User whose username matches the token's subject.

    Raises:
        InvalidTokenError: 401 if the token is invalid, not an access token, missing the subject, or if no active user matches.
    """
    try:
        payload = decode_token(token)
        username: str | None = payload.get("sub")
        if username is None or payload.get("type") != "access":
            raise InvalidTokenError()
        token_data = TokenData(username=username, role=payload.get("role"))
    except JWTInvalidTokenError:
        raise InvalidTokenError()

    statement = select(User).where(User.username == token_data.username)
    user = session.exec(statement).first()
    if user is None or not user.is_active:
        raise InvalidTokenError()
    return user


def get_optional_user(
    token: Annotated[str | None, Depends(optional_oauth2_scheme)],
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the caller when a bearer token is sent, for endpoints that are
    public but show more to owners and admins.

    A token that is sent but invalid is still rejected with 401.
    """
    if token is None:
        return None
    return get_current_user(token, session)


def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Require the authenticated user to hold an admin role.

    The role is read from the database, not from the token claim, so demotions
    take effect immediately.

    Raises:
        InsufficientPermissionsError: 403 if the user is neither ADMIN nor SUPER_ADMIN.
    """
    if not current_user.is_admin:
        raise InsufficientPermissionsError("Administrator privileges required")
    return current_user


def get_current_host_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Require the authenticated user to own a host profile.

    Raises:
        InsufficientPermissionsError: 403 if the user is not a HOST or has no host profile yet.
    """
    if current_user.role != UserRole.HOST or current_user.host_profile is None:
        raise InsufficientPermissionsError("A host profile is required")
    return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
CurrentAdmin = Annotated[User, Depends(get_current_admin)]
CurrentHostUser = Annotated[User, Depends(get_current_host_user)]
SessionDep = Annotated[Session, Depends(get_session)]
