"""Opportunity service: listing CRUD and the status lifecycle.

Status changes go through ``change_opportunity_status``, which applies the
rule table in ``app.core.status_rules`` and writes the new status together
with an appended history row in a single commit. There is no row locking:
two requests validated against the same prior status both commit, both
history rows are kept and the later write decides the final status.
"""

from datetime import datetime
from sqlmodel import Session, select, or_

from app.core import status_rules
from app.core.config import get_settings
from app.core.telemetry import record_status_change
from app.exceptions import (
    InsufficientPermissionsError,
    InvalidStatusTransitionError,
    NotFoundError,
    ReasonRequiredError,
    ValidationError,
)
from app.models.enums import OpportunityStatus, OpportunityType
from app.models.host import Host, HostPublic
from app.models.opportunity import (
    Opportunity,
    OpportunityCreate,
    OpportunityDetail,
    OpportunityStatusActions,
    OpportunityStatusHistory,
    OpportunityUpdate,
    StatusHistoryPublic,
)
from app.models.user import User
from app.services.email import send_notification_email
from app.services.utils import unique_slug
from app.utils.logger import logger
from app.utils.validation import ensure_id, has_text

# Statuses anyone may view; the rest are visible to the owner and admins only.
PUBLIC_STATUSES = frozenset(
    {
        OpportunityStatus.ACTIVE,
        OpportunityStatus.PAUSED,
        OpportunityStatus.FILLED,
        OpportunityStatus.EXPIRED,
    }
)

# Content fields that may be cleared with an explicit null.
NULLABLE_CONTENT_FIELDS = frozenset({"max_applications"})


def is_owner(opportunity: Opportunity, user: User | None) -> bool:
    return (
        user is not None
        and opportunity.host is not None
        and opportunity.host.id_user == user.id_user
    )


def can_view(opportunity: Opportunity, user: User | None) -> bool:
    if opportunity.status in PUBLIC_STATUSES:
        return True
    return user is not None and (user.is_admin or is_owner(opportunity, user))


def get_opportunity(session: Session, opportunity_ref: int | str) -> Opportunity:
    """
    Load an opportunity by numeric id or by slug.

    Raises:
        NotFoundError: If nothing matches.
    """
    opportunity = None
    if isinstance(opportunity_ref, int) or str(opportunity_ref).isdigit():
        opportunity = session.get(Opportunity, int(opportunity_ref))
    if opportunity is None:
        opportunity = session.exec(
            select(Opportunity).where(Opportunity.slug == str(opportunity_ref))
        ).first()
    if opportunity is None:
        raise NotFoundError("Opportunity", opportunity_ref)
    return opportunity


def get_visible_opportunity(
    session: Session, opportunity_ref: int | str, viewer: User | None
) -> Opportunity:
    """
    Load an opportunity the viewer is allowed to see.

    Non-public statuses (drafts, reviews, rejections, deletions) are reported
    as missing to anyone other than the owner or an admin.
    """
    opportunity = get_opportunity(session, opportunity_ref)
    if not can_view(opportunity, viewer):
        raise NotFoundError("Opportunity", opportunity_ref)
    return opportunity


def to_opportunity_detail(opportunity: Opportunity) -> OpportunityDetail:
    return OpportunityDetail.model_validate(
        opportunity,
        update={
            "host": HostPublic.model_validate(opportunity.host),
            "status_history": [
                StatusHistoryPublic.model_validate(entry)
                for entry in opportunity.status_history
            ],
        },
    )


def create_opportunity(
    session: Session, host_user: User, opportunity_in: OpportunityCreate
) -> Opportunity:
    """
    Create a DRAFT opportunity for the caller's host profile.

    The first history row (DRAFT, changed_by the creator) is written in the
    same commit, so the current status always matches the last history entry.

    Raises:
        InsufficientPermissionsError: If the caller has no host profile.
    """
    host = host_user.host_profile
    if host is None:
        raise InsufficientPermissionsError("A host profile is required")
    user_id = ensure_id(host_user.id_user, "User")

    opportunity = Opportunity.model_validate(
        opportunity_in,
        update={
            "id_host": ensure_id(host.id_host, "Host"),
            "slug": unique_slug(session, Opportunity, opportunity_in.title),
            "status": OpportunityStatus.DRAFT,
        },
    )
    session.add(opportunity)
    session.flush()
    session.add(
        OpportunityStatusHistory(
            id_opportunity=ensure_id(opportunity.id_opportunity, "Opportunity"),
            status=OpportunityStatus.DRAFT,
            changed_by=user_id,
        )
    )
    session.commit()
    session.refresh(opportunity)
    logger.info(
        f"Opportunity {opportunity.id_opportunity} created as DRAFT by user {user_id}"
    )
    return opportunity


def update_opportunity(
    session: Session,
    opportunity_ref: int | str,
    opportunity_update: OpportunityUpdate,
    user: User,
) -> Opportunity:
    """
    Edit the content of an opportunity, within what its status allows.

    DRAFT and REJECTED listings are fully editable (a new title also renames
    the slug). Live-ish listings are "limited": title and type are frozen.
    PENDING, ARCHIVED and DELETED listings cannot be edited at all.

    Raises:
        NotFoundError: If the opportunity does not exist.
        InsufficientPermissionsError: If the caller is neither owner nor admin.
        ValidationError: If the status forbids the edit.
    """
    opportunity = get_opportunity(session, opportunity_ref)
    if not (user.is_admin or is_owner(opportunity, user)):
        raise InsufficientPermissionsError("You do not manage this opportunity")

    editable = status_rules.can_edit(opportunity.status)
    if editable is False:
        raise ValidationError(
            f"Opportunity in status {opportunity.status.value} cannot be edited",
            field="status",
        )

    changes = opportunity_update.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in NULLABLE_CONTENT_FIELDS:
            raise ValidationError(f"{field} cannot be null", field=field)

    if editable == "limited":
        for field in status_rules.LIMITED_EDIT_FROZEN_FIELDS:
            if field in changes and changes[field] != getattr(opportunity, field):
                raise ValidationError(
                    f"{field} cannot be changed while the opportunity is "
                    f"{opportunity.status.value}",
                    field=field,
                )

    new_title = changes.get("title")
    if new_title and new_title != opportunity.title:
        opportunity.slug = unique_slug(session, Opportunity, new_title)

    for key, value in changes.items():
        setattr(opportunity, key, value)
    opportunity.date_update = datetime.now()

    session.add(opportunity)
    session.commit()
    session.refresh(opportunity)
    return opportunity


def parse_status(value: str | None, current: OpportunityStatus) -> OpportunityStatus:
    """
    Raises:
        InvalidStatusTransitionError: If `value` is missing or not an OpportunityStatus.
    """
    if not has_text(value):
        raise InvalidStatusTransitionError("Opportunity", current.value, "(missing)")
    try:
        return OpportunityStatus(value)
    except ValueError:
        raise InvalidStatusTransitionError("Opportunity", current.value, value)  # type: ignore[arg-type]


async def change_opportunity_status(
    session: Session,
    opportunity_ref: int | str,
    target: str | None,
    reason: str | None,
    actor: User,
) -> Opportunity:
    """
    Move an opportunity to `target`, recording who did it and why.

    Checks run in this order and the first failure wins:

    1. the opportunity exists (NotFoundError, 404);
    2. the target is a known status (InvalidStatusTransitionError, 400);
    3. the caller's role and ownership allow this pair
       (InsufficientPermissionsError, 403);
    4. the pair is in the transition table (InvalidStatusTransitionError, 400);
    5. a non-blank reason is present when the pair needs one
       (ReasonRequiredError, 400).

    On success the status, ``status_note`` and a new history row are
    committed together. Entering ACTIVE stamps ``published_at`` once. The host
    owner is emailed after the commit; email failures are only logged.

    Args:
        session: Database session
        opportunity_ref: Opportunity id or slug
        target: Requested status, as sent by the client
        reason: Free-text justification, stored on the history row
        actor: Authenticated caller

    Returns:
        Opportunity: The updated opportunity, history included.
    """
    opportunity = get_opportunity(session, opportunity_ref)
    current = opportunity.status
    target_status = parse_status(target, current)
    owner = is_owner(opportunity, actor)

    if not status_rules.can_perform_transition(
        current, target_status, actor.role, owner
    ):
        raise InsufficientPermissionsError(
            f"You are not allowed to change this opportunity from "
            f"{current.value} to {target_status.value}"
        )

    if not status_rules.is_valid_transition(current, target_status):
        raise InvalidStatusTransitionError(
            "Opportunity", current.value, target_status.value
        )

    if status_rules.requires_reason(current, target_status) and not has_text(reason):
        raise ReasonRequiredError(current.value, target_status.value)

    note = reason.strip() if has_text(reason) else None  # type: ignore[union-attr]
    now = datetime.now()

    opportunity.status = target_status
    opportunity.status_note = note
    opportunity.date_update = now
    if (
        target_status == OpportunityStatus.ACTIVE
        and current != OpportunityStatus.ACTIVE
        and opportunity.published_at is None
    ):
        opportunity.published_at = now

    session.add(opportunity)
    session.add(
        OpportunityStatusHistory(
            id_opportunity=ensure_id(opportunity.id_opportunity, "Opportunity"),
            status=target_status,
            reason=note,
            changed_by=ensure_id(actor.id_user, "User"),
            changed_at=now,
        )
    )
    session.commit()
    session.refresh(opportunity)
    logger.info(
        f"Opportunity {opportunity.id_opportunity} status {current.value} -> "
        f"{target_status.value} by user {actor.id_user} ({actor.role.value})"
    )
    record_status_change(
        "opportunity", current.value, target_status.value, actor.role.value
    )

    await _notify_status_change(session, opportunity, note)
    return opportunity


async def _notify_status_change(
    session: Session, opportunity: Opportunity, note: str | None
) -> None:
    host = opportunity.host
    if host is None or host.user is None:
        return
    try:
        await send_notification_email(
            session,
            template_name="opportunity_status_changed",
            recipient_email=host.user.email,
            context={
                "host_name": host.name,
                "opportunity_title": opportunity.title,
                "opportunity_id": opportunity.id_opportunity,
                "status_label": status_rules.STATUS_LABELS[opportunity.status],
                "status_message": status_rules.get_status_update_message(
                    opportunity.status
                ),
                "reason": note or "-",
                "frontend_url": get_settings().FRONTEND_URL,
            },
        )
    except Exception:
        session.rollback()
        logger.exception("Failed to send opportunity status email")


async def delete_opportunity(
    session: Session, opportunity_ref: int | str, user: User
) -> Opportunity:
    """
    Logically delete an opportunity by moving it to DELETED.

    Only statuses with a DELETED successor can be deleted; the row and its
    history are kept.
    """
    return await change_opportunity_status(
        session, opportunity_ref, OpportunityStatus.DELETED.value, None, user
    )


def get_status_actions(
    opportunity: Opportunity, user: User
) -> OpportunityStatusActions:
    """Describe the status and the actions `user` may take on it."""
    status = opportunity.status
    return OpportunityStatusActions(
        status=status,
        label=status_rules.STATUS_LABELS[status],
        description=status_rules.STATUS_DESCRIPTIONS[status],
        editable=status_rules.can_edit(status),
        next_allowed=status_rules.get_next_allowed_states(status),
        actions=status_rules.available_actions(
            status, user.role, is_owner(opportunity, user)
        ),
    )


def search_opportunities(
    session: Session,
    *,
    search: str | None = None,
    opportunity_type: OpportunityType | None = None,
    city: str | None = None,
    min_hours: int | None = None,
    max_hours: int | None = None,
    min_stay: int | None = None,
    sort: str = "newest",
    offset: int = 0,
    limit: int = 20,
) -> list[Opportunity]:
    """
    Public search over ACTIVE opportunities.

    Args:
        search: Case-insensitive match on title, descriptions and city
        opportunity_type: Exact type filter
        city: Exact city filter
        min_hours: Minimum weekly work hours
        max_hours: Maximum weekly work hours
        min_stay: Listings whose minimum stay is at least this many days
        sort: "newest" (latest published first) or "oldest"
        offset: Pagination offset
        limit: Page size

    Returns:
        list[Opportunity]: One page of matching opportunities
    """
    statement = select(Opportunity).where(
        Opportunity.status == OpportunityStatus.ACTIVE
    )

    if search:
        pattern = f"%{search}%"
        statement = statement.where(
            or_(
                Opportunity.title.ilike(pattern),  # type: ignore[attr-defined]
                Opportunity.description.ilike(pattern),  # type: ignore[attr-defined]
                Opportunity.short_description.ilike(pattern),  # type: ignore[attr-defined]
                Opportunity.city.ilike(pattern),  # type: ignore[attr-defined]
            )
        )
    if opportunity_type:
        statement = statement.where(Opportunity.opportunity_type == opportunity_type)
    if city:
        statement = statement.where(Opportunity.city == city)
    if min_hours is not None:
        statement = statement.where(Opportunity.work_hours_per_week >= min_hours)
    if max_hours is not None:
        statement = statement.where(Opportunity.work_hours_per_week <= max_hours)
    if min_stay is not None:
        statement = statement.where(Opportunity.minimum_stay_days >= min_stay)

    if sort == "oldest":
        statement = statement.order_by(
            Opportunity.published_at.asc(),  # type: ignore[union-attr]
            Opportunity.id_opportunity.asc(),  # type: ignore[union-attr]
        )
    else:
        statement = statement.order_by(
            Opportunity.published_at.desc(),  # type: ignore[union-attr]
            Opportunity.id_opportunity.desc(),  # type: ignore[union-attr]
        )

    return list(session.exec(statement.offset(offset).limit(limit)).all())


def list_host_opportunities(
    session: Session,
    host: Host,
    viewer: User | None,
    *,
    status: OpportunityStatus | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Opportunity]:
    """
    Opportunities of one host.

    The owner and admins see every status except DELETED (unless asked for
    explicitly); everyone else only sees ACTIVE listings.
    """
    statement = select(Opportunity).where(Opportunity.id_host == host.id_host)
    manages = viewer is not None and (viewer.is_admin or host.id_user == viewer.id_user)

    if not manages:
        statement = statement.where(Opportunity.status == OpportunityStatus.ACTIVE)
    elif status is not None:
        statement = statement.where(Opportunity.status == status)
    else:
        statement = statement.where(Opportunity.status != OpportunityStatus.DELETED)

    statement = statement.order_by(Opportunity.id_opportunity).offset(offset).limit(limit)  # type: ignore[arg-type]
    return list(session.exec(statement).all())


def admin_list_opportunities(
    session: Session,
    *,
    status: OpportunityStatus | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Opportunity]:
    """Admin listing over every status, oldest update first for review queues."""
    statement = select(Opportunity)
    if status is not None:
        statement = statement.where(Opportunity.status == status)
    statement = statement.order_by(Opportunity.date_update).offset(offset).limit(limit)  # type: ignore[arg-type]
    return list(session.exec(statement).all())
