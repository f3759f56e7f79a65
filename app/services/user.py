"""User service module for account CRUD operations."""

from datetime import datetime, timedelta
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.models.enums import EmailType
from app.models.user import User, UserCreate, UserUpdate
from app.core.password import generate_reset_token, get_password_hash, get_token_hash
from app.exceptions import (
    AppException,
    NotFoundError,
    AlreadyExistsError,
    InvalidTokenError,
    ValidationError,
)
from app.utils.logger import logger
from app.utils.validation import mask_email
from app.services.email import send_notification_email


def create_user(session: Session, user_in: UserCreate) -> User:
    """
    Create and persist a new user with a hashed password.

    New accounts always start with the USER role; promotion to HOST happens
    when the user creates a host profile.

    Parameters:
        user_in (UserCreate): User creation data; must include a plaintext `password` and other user fields.

    Returns:
        User: The created User model instance.

    Raises:
        AlreadyExistsError: If a user with the same username or email already exists.
    """
    hashed_password = get_password_hash(user_in.password)

    db_user = User.model_validate(user_in, update={"hashed_password": hashed_password})

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("User", "unique field", "username or email")
    session.refresh(db_user)
    logger.info(f"User {db_user.id_user} registered ({mask_email(db_user.email)})")
    return db_user


def get_user(session: Session, user_id: int) -> User | None:
    """
    Retrieve a user by ID.

    Args:
        session: Database session
        user_id: The user's primary key

    Returns:
        User | None: The user record or None if not found
    """
    return session.get(User, user_id)


def get_user_by_username(session: Session, username: str) -> User | None:
    statement = select(User).where(User.username == username)
    return session.exec(statement).first()


def get_user_by_email(session: Session, email: str) -> User | None:
    statement = select(User).where(User.email == email)
    return session.exec(statement).first()


def get_users(session: Session, *, offset: int = 0, limit: int = 100) -> list[User]:
    """
    Retrieve a paginated list of users.

    Returns:
        list[User]: User records for the requested page defined by offset and limit.
    """
    statement = select(User).offset(offset).limit(limit)
    return list(session.exec(statement).all())


def update_user(session: Session, user_id: int, user_update: UserUpdate) -> User:
    """
    Update an existing user's information.

    Parameters:
        user_id (int): Primary key of the user to update.
        user_update (UserUpdate): Partial update data; only provided fields will be applied. If `password` is provided, it will be hashed and stored on the user as `hashed_password`.

    Returns:
        User: The updated user record.

    Raises:
        NotFoundError: If no user exists with the given `user_id`.
        AlreadyExistsError: If updating causes a uniqueness conflict (for example, duplicate email).
        ValidationError: If `email` or `name` is explicitly set to null.
    """
    db_user = get_user(session, user_id)
    if not db_user:
        raise NotFoundError("User", user_id)

    # Convert update model to dict, excluding unset fields
    user_data = user_update.model_dump(exclude_unset=True)
    for field in ("email", "name"):
        if field in user_data and user_data[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)

    if "password" in user_data and user_data["password"] is not None:
        user_data["hashed_password"] = get_password_hash(user_data.pop("password"))
    user_data.pop("password", None)

    for key, value in user_data.items():
        setattr(db_user, key, value)

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("User", "unique field", "one of the updated fields")
    session.refresh(db_user)
    return db_user


async def deactivate_user(session: Session, user_id: int) -> User:
    """
    Soft-delete a user: the row is kept so history and applications still
    resolve `changed_by`, but the account can no longer authenticate.

    Sends the account_deactivated email after commit; a failed email is logged.

    Raises:
        NotFoundError: If no user exists with the given `user_id`.
    """
    db_user = get_user(session, user_id)
    if not db_user:
        raise NotFoundError("User", user_id)

    db_user.is_active = False
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    logger.info(f"User {user_id} deactivated")

    try:
        await send_notification_email(
            session,
            template_name="account_deactivated",
            recipient_email=db_user.email,
            context={"username": db_user.username},
        )
    except Exception:
        session.rollback()
        logger.exception("Failed to send account deactivation email")

    return db_user


async def request_password_reset(session: Session, email: str) -> None:
    """
    Store a fresh reset token for the account behind `email` and mail it.

    Unknown or deactivated addresses are ignored so the endpoint does not
    reveal which emails are registered. A new request replaces any earlier
    token.

    Raises:
        AppException: If the reset email could not be sent.
    """
    user = get_user_by_email(session, email)
    if not user or not user.is_active:
        logger.info(f"Password reset requested for unknown account {mask_email(email)}")
        return

    settings = get_settings()
    token = generate_reset_token()
    user.password_reset_token = get_token_hash(token)
    user.password_reset_expires = datetime.now() + timedelta(
        minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
    )
    session.add(user)
    session.commit()

    response = await send_notification_email(
        session,
        template_name="password_reset",
        recipient_email=user.email,
        context={
            "username": user.username,
            "token": token,
            "expires_minutes": settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES,
            "frontend_url": settings.FRONTEND_URL,
        },
        email_type=EmailType.IMPORTANT,
    )
    if not response.success:
        raise AppException("Could not send the password reset email")
    logger.info(f"Password reset email sent to user {user.id_user}")


def validate_password_reset_token(session: Session, token: str) -> User:
    """
    Return the user owning an unexpired reset token.

    An expired token is cleared on the way out.

    Raises:
        InvalidTokenError: If the token is unknown or expired.
    """
    user = session.exec(
        select(User).where(User.password_reset_token == get_token_hash(token))
    ).first()
    if not user or not user.password_reset_expires:
        raise InvalidTokenError("Invalid or expired password reset token")

    if datetime.now() > user.password_reset_expires:
        user.password_reset_token = None
        user.password_reset_expires = None
        session.add(user)
        session.commit()
        raise InvalidTokenError("Invalid or expired password reset token")
    return user


def reset_password_with_token(session: Session, token: str, new_password: str) -> User:
    """
    Set a new password using a reset token. The token works once.

    Raises:
        InvalidTokenError: If the token is unknown or expired.
    """
    user = validate_password_reset_token(session, token)
    user.hashed_password = get_password_hash(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Password reset for user {user.id_user}")
    return user
