from sqlmodel import Session, select
from loguru import logger
from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.models.user import User
from app.models.enums import UserRole
from app.core.password import get_password_hash
from app.exceptions import AlreadyExistsError
from app.utils.validation import mask_email


def init_db(session: Session) -> None:
    """
    Ensure the configured initial super administrator exists.

    If FIRST_SUPERUSER_EMAIL, FIRST_SUPERUSER_USERNAME, or FIRST_SUPERUSER_PASSWORD is not set,
    the function logs a warning and makes no changes. If a user with the configured username or
    email already exists, no action is taken. Otherwise a SUPER_ADMIN user is created.

    Parameters:
        session (Session): Database session used to look up and persist the user.

    Raises:
        AlreadyExistsError: If a unique constraint prevents creating the user.
    """
    settings = get_settings()
    if (
        not settings.FIRST_SUPERUSER_EMAIL
        or not settings.FIRST_SUPERUSER_PASSWORD.get_secret_value()
        or not settings.FIRST_SUPERUSER_USERNAME
    ):
        logger.warning("First superuser not configured. Skipping creation.")
        return

    existing = session.exec(
        select(User).where(
            (User.username == settings.FIRST_SUPERUSER_USERNAME)
            | (User.email == settings.FIRST_SUPERUSER_EMAIL)
        )
    ).first()
    if existing:
        logger.info("First superuser already exists")
        return

    superuser = User(
        username=settings.FIRST_SUPERUSER_USERNAME,
        email=settings.FIRST_SUPERUSER_EMAIL,
        name="Super Admin",
        role=UserRole.SUPER_ADMIN,
        hashed_password=get_password_hash(
            settings.FIRST_SUPERUSER_PASSWORD.get_secret_value()
        ),
    )
    try:
        session.add(superuser)
        session.commit()
        logger.info(
            f"First superuser created ({mask_email(settings.FIRST_SUPERUSER_EMAIL)})"
        )
    except IntegrityError:
        session.rollback()
        logger.error("First superuser already exists (constraint violation)")
        raise AlreadyExistsError(
            "User", "username or email", settings.FIRST_SUPERUSER_USERNAME
        )
