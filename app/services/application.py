"""Application service for volunteers applying to opportunities."""

from datetime import datetime
from sqlmodel import Session, select, func
from sqlalchemy.exc import IntegrityError

from app.core import status_rules
from app.core.config import get_settings
from app.core.telemetry import record_status_change
from app.exceptions import (
    AlreadyExistsError,
    InsufficientPermissionsError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from app.models.application import Application, ApplicationCreate
from app.models.enums import ApplicationStatus, OpportunityStatus
from app.models.host import Host
from app.models.opportunity import Opportunity
from app.models.user import User
from app.services.email import send_notification_email
from app.services.host import ensure_host_access
from app.services.utils import get_or_404
from app.utils.logger import logger
from app.utils.validation import ensure_id, has_text

# Applications that no longer hold a place on the opportunity.
INACTIVE_APPLICATION_STATUSES = frozenset(
    {
        ApplicationStatus.DRAFT,
        ApplicationStatus.WITHDRAWN,
        ApplicationStatus.CANCELLED,
        ApplicationStatus.REJECTED,
    }
)

REVIEW_STATUSES = frozenset(
    {ApplicationStatus.REVIEWING, ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}
)
CANCEL_STATUSES = frozenset({ApplicationStatus.CANCELLED, ApplicationStatus.WITHDRAWN})


def _ensure_accepting(session: Session, opportunity: Opportunity) -> None:
    """
    Raises:
        ValidationError: If the opportunity is not ACTIVE or has no place left.
    """
    if opportunity.status != OpportunityStatus.ACTIVE:
        raise ValidationError(
            "This opportunity is not accepting applications", field="id_opportunity"
        )
    if opportunity.max_applications is None:
        return
    active_count = session.exec(
        select(func.count())
        .select_from(Application)
        .where(
            Application.id_opportunity == opportunity.id_opportunity,
            Application.status.notin_(INACTIVE_APPLICATION_STATUSES),  # type: ignore[attr-defined]
        )
    ).one()
    if active_count >= opportunity.max_applications:
        raise ValidationError(
            "This opportunity has reached its maximum number of applications",
            field="id_opportunity",
        )


async def _notify_application_received(
    session: Session, application: Application, applicant: User
) -> None:
    opportunity = application.opportunity
    host = opportunity.host
    if host is None or host.user is None:
        return
    try:
        await send_notification_email(
            session,
            template_name="application_received",
            recipient_email=host.user.email,
            context={
                "host_name": host.name,
                "applicant_name": applicant.name or applicant.username,
                "opportunity_title": opportunity.title,
                "application_id": application.id_application,
                "frontend_url": get_settings().FRONTEND_URL,
            },
        )
    except Exception:
        session.rollback()
        logger.exception("Failed to send application received email")


async def create_application(
    session: Session, applicant: User, application_in: ApplicationCreate
) -> Application:
    """
    Apply to an ACTIVE opportunity.

    The application starts PENDING, or DRAFT when `submit` is false. The host
    owner is emailed for submitted applications.

    Raises:
        NotFoundError: If the opportunity does not exist.
        ValidationError: If the opportunity is not accepting applications, the
            applicant owns it, the dates are inconsistent, or it is full.
        AlreadyExistsError: If the applicant already applied.
    """
    opportunity = get_or_404(
        session, Opportunity, application_in.id_opportunity, "Opportunity"
    )
    if opportunity.host.id_user == applicant.id_user:
        raise ValidationError(
            "You cannot apply to your own opportunity", field="id_opportunity"
        )
    if application_in.end_date and application_in.end_date < application_in.start_date:
        raise ValidationError("end_date must be after start_date", field="end_date")

    _ensure_accepting(session, opportunity)

    application = Application.model_validate(
        application_in.model_dump(exclude={"submit"}),
        update={
            "id_applicant": ensure_id(applicant.id_user, "User"),
            "id_host": opportunity.id_host,
            "status": (
                ApplicationStatus.PENDING
                if application_in.submit
                else ApplicationStatus.DRAFT
            ),
        },
    )
    session.add(application)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError(
            "Application", "id_opportunity", application_in.id_opportunity
        )
    session.refresh(application)
    logger.info(
        f"Application {application.id_application} ({application.status.value}) "
        f"by user {applicant.id_user} for opportunity {opportunity.id_opportunity}"
    )

    if application.status == ApplicationStatus.PENDING:
        await _notify_application_received(session, application, applicant)

    return application


def _relationship(application: Application, user: User) -> tuple[bool, bool, bool]:
    host = application.opportunity.host if application.opportunity else None
    is_applicant = application.id_applicant == user.id_user
    is_host = host is not None and host.id_user == user.id_user
    return is_applicant, is_host, user.is_admin


def get_application(session: Session, application_id: int, user: User) -> Application:
    """
    Load an application visible to `user` (applicant, owning host or admin).

    A DRAFT is private to its applicant and admins; anyone else gets a 404.

    Raises:
        NotFoundError: If the application does not exist or is someone else's draft.
        InsufficientPermissionsError: If the caller is unrelated to it.
    """
    application = get_or_404(session, Application, application_id, "Application")
    is_applicant, is_host, is_admin = _relationship(application, user)
    if application.status == ApplicationStatus.DRAFT and not (is_applicant or is_admin):
        raise NotFoundError("Application", application_id)
    if not (is_applicant or is_host or is_admin):
        raise InsufficientPermissionsError("You cannot view this application")
    return application


def list_user_applications(
    session: Session,
    user: User,
    *,
    status: ApplicationStatus | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Application]:
    statement = select(Application).where(Application.id_applicant == user.id_user)
    if status is not None:
        statement = statement.where(Application.status == status)
    statement = statement.order_by(Application.date_creation.desc()).offset(offset).limit(limit)  # type: ignore[attr-defined]
    return list(session.exec(statement).all())


def list_host_applications(
    session: Session,
    host: Host,
    user: User,
    *,
    status: ApplicationStatus | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Application]:
    """
    Applications received by a host. Drafts are never shown to the host.

    Raises:
        InsufficientPermissionsError: If the caller neither owns the host nor is an admin.
    """
    ensure_host_access(host, user)
    statement = select(Application).where(
        Application.id_host == host.id_host,
        Application.status != ApplicationStatus.DRAFT,
    )
    if status is not None:
        statement = statement.where(Application.status == status)
    statement = statement.order_by(Application.date_creation.desc()).offset(offset).limit(limit)  # type: ignore[attr-defined]
    return list(session.exec(statement).all())


def _cancellation_initiator(
    target: ApplicationStatus, is_applicant: bool, is_host: bool
) -> str:
    if target == ApplicationStatus.WITHDRAWN and is_applicant:
        return "user"
    if is_host:
        return "host"
    if is_applicant:
        return "user"
    return "admin"


async def change_application_status(
    session: Session,
    application_id: int,
    target: str | None,
    note: str | None,
    actor: User,
) -> Application:
    """
    Move an application to `target`.

    Checks, first failure wins: the application exists (404), the target is a
    known status (400), the caller's relationship allows that target (403),
    and the pair is in the application transition table (400).
    Submitting a draft (-> PENDING) re-checks that the opportunity is ACTIVE
    and has room, then emails the host as for a new application.

    The matching sub-record is filled on success: review details for
    REVIEWING / ACCEPTED / REJECTED, confirmation for CONFIRMED, cancellation
    for CANCELLED / WITHDRAWN, completion for COMPLETED. The applicant is
    emailed when someone else changed the status.
    """
    application = get_or_404(session, Application, application_id, "Application")
    current = application.status

    try:
        target_status = ApplicationStatus(target)
    except ValueError:
        raise InvalidStatusTransitionError(
            "Application", current.value, target or "(missing)"
        )

    is_applicant, is_host, is_admin = _relationship(application, actor)
    allowed_targets = status_rules.application_targets_for(
        is_applicant=is_applicant, is_host=is_host, is_admin=is_admin
    )
    if target_status not in allowed_targets:
        raise InsufficientPermissionsError(
            f"You are not allowed to set this application to {target_status.value}"
        )

    if not status_rules.is_valid_application_transition(current, target_status):
        raise InvalidStatusTransitionError(
            "Application", current.value, target_status.value
        )

    if target_status == ApplicationStatus.PENDING:
        _ensure_accepting(session, application.opportunity)

    actor_id = ensure_id(actor.id_user, "User")
    clean_note = note.strip() if has_text(note) else None  # type: ignore[union-attr]
    now = datetime.now()

    application.status = target_status
    application.date_update = now
    application.status_note = clean_note

    if target_status in REVIEW_STATUSES:
        application.reviewed_by = actor_id
        application.reviewed_at = now
        application.review_notes = clean_note
    elif target_status == ApplicationStatus.CONFIRMED:
        application.confirmed_by = actor_id
        application.confirmed_at = now
    elif target_status in CANCEL_STATUSES:
        application.cancelled_by = actor_id
        application.cancelled_at = now
        application.cancellation_reason = clean_note
        application.cancellation_initiated_by = _cancellation_initiator(
            target_status, is_applicant, is_host
        )
    elif target_status == ApplicationStatus.COMPLETED:
        application.completed_at = now

    session.add(application)
    session.commit()
    session.refresh(application)
    logger.info(
        f"Application {application_id} status {current.value} -> "
        f"{target_status.value} by user {actor_id}"
    )
    record_status_change(
        "application", current.value, target_status.value, actor.role.value
    )

    if target_status == ApplicationStatus.PENDING:
        applicant = session.get(User, application.id_applicant)
        if applicant:
            await _notify_application_received(session, application, applicant)
    elif not is_applicant:
        applicant = session.get(User, application.id_applicant)
        if applicant:
            try:
                await send_notification_email(
                    session,
                    template_name="application_status_changed",
                    recipient_email=applicant.email,
                    context={
                        "applicant_name": applicant.name or applicant.username,
                        "opportunity_title": application.opportunity.title,
                        "status_label": status_rules.APPLICATION_STATUS_LABELS[
                            target_status
                        ],
                        "note": clean_note or "",
                        "application_id": application.id_application,
                        "frontend_url": get_settings().FRONTEND_URL,
                    },
                )
            except Exception:
                session.rollback()
                logger.exception("Failed to send application status email")

    return application

