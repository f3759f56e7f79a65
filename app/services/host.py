"""Host profile service: creation, edits and admin moderation."""

from datetime import datetime
from sqlmodel import Session, select

from app.core.config import get_settings
from app.core.telemetry import record_status_change
from app.exceptions import (
    AlreadyExistsError,
    InsufficientPermissionsError,
    NotFoundError,
    ValidationError,
)
from app.models.enums import HostStatus, UserRole
from app.models.host import (
    Host,
    HostCreate,
    HostStatusHistory,
    HostStatusUpdate,
    HostUpdate,
)
from app.models.user import User
from app.services.email import send_notification_email
from app.services.utils import get_or_404, unique_slug
from app.utils.logger import logger
from app.utils.validation import ensure_id

# Profile fields that may be cleared with an explicit null.
NULLABLE_HOST_FIELDS = frozenset({"district", "contact_email", "contact_phone"})


def create_host(session: Session, user: User, host_in: HostCreate) -> Host:
    """
    Create the host profile owned by `user`.

    A user owns at most one host profile. A plain USER is promoted to HOST;
    other roles keep theirs. The profile starts PENDING and the first history
    row records that.

    Raises:
        AlreadyExistsError: If the user already owns a host profile.
    """
    user_id = ensure_id(user.id_user, "User")
    if get_host_by_user(session, user_id):
        raise AlreadyExistsError("Host", "id_user", user_id)

    host = Host.model_validate(
        host_in,
        update={
            "id_user": user_id,
            "slug": unique_slug(session, Host, host_in.name),
            "status": HostStatus.PENDING,
        },
    )
    session.add(host)
    session.flush()

    session.add(
        HostStatusHistory(
            id_host=ensure_id(host.id_host, "Host"),
            status=HostStatus.PENDING,
            changed_by=user_id,
        )
    )
    if user.role == UserRole.USER:
        user.role = UserRole.HOST
        session.add(user)

    session.commit()
    session.refresh(host)
    logger.info(f"Host {host.id_host} created by user {user_id}")
    return host


def get_host(session: Session, host_id: int) -> Host:
    """Raises NotFoundError if the host does not exist."""
    return get_or_404(session, Host, host_id, "Host")


def get_host_by_user(session: Session, user_id: int) -> Host | None:
    return session.exec(select(Host).where(Host.id_user == user_id)).first()


def list_hosts(
    session: Session,
    *,
    status: HostStatus | None = HostStatus.ACTIVE,
    city: str | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Host]:
    """
    List hosts, by default only ACTIVE ones.

    Parameters:
        status: Status to filter on; None lists every status (admin use).
        city: Exact city match.
    """
    statement = select(Host)
    if status is not None:
        statement = statement.where(Host.status == status)
    if city:
        statement = statement.where(Host.city == city)
    statement = statement.order_by(Host.id_host).offset(offset).limit(limit)  # type: ignore[arg-type]
    return list(session.exec(statement).all())


def ensure_host_access(host: Host, user: User) -> None:
    """
    Raises:
        InsufficientPermissionsError: Unless `user` owns `host` or is an admin.
    """
    if host.id_user != user.id_user and not user.is_admin:
        raise InsufficientPermissionsError("You do not manage this host")


def update_host(
    session: Session, host_id: int, host_update: HostUpdate, user: User
) -> Host:
    """
    Apply a partial update to a host profile.

    Raises:
        NotFoundError: If the host does not exist.
        InsufficientPermissionsError: If the caller neither owns the host nor is an admin.
        ValidationError: If a required field is explicitly set to null.
    """
    host = get_host(session, host_id)
    ensure_host_access(host, user)

    changes = host_update.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in NULLABLE_HOST_FIELDS:
            raise ValidationError(f"{field} cannot be null", field=field)

    for key, value in changes.items():
        setattr(host, key, value)

    session.add(host)
    session.commit()
    session.refresh(host)
    return host


def reapply_host(session: Session, user: User) -> Host:
    """
    Resubmit the caller's REJECTED host profile for review (back to PENDING).

    The rejection note is cleared and a history row records the resubmission.

    Raises:
        NotFoundError: If the caller has no host profile.
        ValidationError: If the profile is not REJECTED.
    """
    user_id = ensure_id(user.id_user, "User")
    host = get_host_by_user(session, user_id)
    if host is None:
        raise NotFoundError("Host", f"user_{user_id}")
    if host.status != HostStatus.REJECTED:
        raise ValidationError(
            "Only a rejected host profile can be resubmitted", field="status"
        )

    host.status = HostStatus.PENDING
    host.status_note = None
    session.add(host)
    session.add(
        HostStatusHistory(
            id_host=ensure_id(host.id_host, "Host"),
            status=HostStatus.PENDING,
            changed_by=user_id,
        )
    )
    session.commit()
    session.refresh(host)
    logger.info(f"Host {host.id_host} resubmitted for review by user {user_id}")
    record_status_change(
        "host", HostStatus.REJECTED.value, HostStatus.PENDING.value, user.role.value
    )
    return host


async def update_host_status(
    session: Session, host_id: int, status_update: HostStatusUpdate, admin: User
) -> Host:
    """
    Moderate a host profile (admin only; enforced by the router dependency).

    Moving to ACTIVE marks the profile verified the first time. A history row
    is appended in the same commit, then the owner is emailed.

    Raises:
        NotFoundError: If the host does not exist.
    """
    host = get_host(session, host_id)
    previous = host.status

    host.status = status_update.status
    host.status_note = status_update.status_note
    if status_update.status == HostStatus.ACTIVE and not host.verified:
        host.verified = True
        host.verified_at = datetime.now()

    session.add(host)
    session.add(
        HostStatusHistory(
            id_host=ensure_id(host.id_host, "Host"),
            status=status_update.status,
            status_note=status_update.status_note,
            changed_by=ensure_id(admin.id_user, "User"),
        )
    )
    session.commit()
    session.refresh(host)
    logger.info(
        f"Host {host_id} status {previous.value} -> {host.status.value} "
        f"by user {admin.id_user}"
    )
    record_status_change("host", previous.value, host.status.value, admin.role.value)

    owner = host.user
    if owner:
        try:
            await send_notification_email(
                session,
                template_name="host_status_changed",
                recipient_email=owner.email,
                context={
                    "host_name": host.name,
                    "status": host.status.value,
                    "status_note": host.status_note or "",
                    "frontend_url": get_settings().FRONTEND_URL,
                },
            )
        except Exception:
            session.rollback()
            logger.exception("Failed to send host status email")

    return host
