"""Status lifecycle rules for opportunities and applications.

Static lookup tables plus pure helpers over them. Nothing here touches the
database; the service layer consults these tables before persisting a
status change, and clients use the same tables to decide which action
buttons to show.

Every lookup is default-deny: a pair that is not listed is not allowed.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.models.enums import (
    ADMIN_ROLES,
    ApplicationStatus,
    OpportunityStatus,
    UserRole,
)

OS = OpportunityStatus
AS = ApplicationStatus


class StatusAction(BaseModel):
    """One button offered to a user for an opportunity in a given status.

    A ``target_status`` of ``None`` means "save content, keep the status".
    """

    model_config = ConfigDict(frozen=True)

    target_status: OpportunityStatus | None
    label: str
    button_type: Literal["primary", "secondary", "danger"]
    description: str
    is_primary: bool = False
    needs_confirmation: bool = False
    confirm_message: str | None = None
    needs_reason: bool = False
    reason_title: str | None = None
    reason_placeholder: str | None = None
    host_only: bool = False
    admin_only: bool = False


class StatusPermission(BaseModel):
    """Who may perform one specific opportunity transition."""

    model_config = ConfigDict(frozen=True)

    allowed_roles: frozenset[UserRole]
    requires_ownership: bool


# ---------------------------------------------------------------------------
# Opportunity tables
# ---------------------------------------------------------------------------

STATUS_LABELS: dict[OpportunityStatus, str] = {
    OS.DRAFT: "Draft",
    OS.PENDING: "Pending review",
    OS.ACTIVE: "Active",
    OS.PAUSED: "Paused",
    OS.ADMIN_PAUSED: "Paused by admin",
    OS.REJECTED: "Rejected",
    OS.EXPIRED: "Expired",
    OS.FILLED: "Filled",
    OS.ARCHIVED: "Archived",
    OS.DELETED: "Deleted",
}

STATUS_DESCRIPTIONS: dict[OpportunityStatus, str] = {
    OS.DRAFT: "Everything can be edited; submit for review when ready.",
    OS.PENDING: "Waiting for the platform to review the listing.",
    OS.ACTIVE: "Published and open for applications.",
    OS.PAUSED: "Still visible but not accepting applications.",
    OS.ADMIN_PAUSED: "Paused by an administrator; edit and resubmit for review.",
    OS.REJECTED: "Did not pass review; read the reason, edit and resubmit.",
    OS.EXPIRED: "Past its end date and no longer listed.",
    OS.FILLED: "All places are taken; applications are closed.",
    OS.ARCHIVED: "Kept for the record, hidden from listings.",
    OS.DELETED: "Removed by its host or an administrator.",
}

# Successor states. Anything not listed is illegal.
OPPORTUNITY_TRANSITIONS: dict[OpportunityStatus, frozenset[OpportunityStatus]] = {
    OS.DRAFT: frozenset({OS.PENDING, OS.DELETED}),
    OS.PENDING: frozenset({OS.DRAFT, OS.ACTIVE, OS.REJECTED}),
    OS.ACTIVE: frozenset(
        {OS.PAUSED, OS.ADMIN_PAUSED, OS.FILLED, OS.EXPIRED, OS.ARCHIVED}
    ),
    OS.PAUSED: frozenset({OS.ACTIVE, OS.ARCHIVED, OS.DELETED}),
    OS.EXPIRED: frozenset({OS.DRAFT, OS.ACTIVE, OS.PAUSED, OS.ARCHIVED}),
    OS.FILLED: frozenset({OS.ACTIVE, OS.PAUSED, OS.ARCHIVED}),
    OS.REJECTED: frozenset({OS.PENDING, OS.DELETED}),
    OS.ADMIN_PAUSED: frozenset({OS.PENDING, OS.REJECTED}),
    OS.ARCHIVED: frozenset({OS.DELETED}),
    OS.DELETED: frozenset(),
}

REASON_REQUIRED: frozenset[tuple[OpportunityStatus, OpportunityStatus]] = frozenset(
    {
        (OS.PENDING, OS.REJECTED),
        (OS.ACTIVE, OS.PAUSED),
        (OS.ACTIVE, OS.ADMIN_PAUSED),
        (OS.PAUSED, OS.ACTIVE),
        (OS.ADMIN_PAUSED, OS.PENDING),
        (OS.ADMIN_PAUSED, OS.REJECTED),
    }
)

_ADMIN_ONLY = StatusPermission(allowed_roles=ADMIN_ROLES, requires_ownership=False)

TRANSITION_PERMISSIONS: dict[
    tuple[OpportunityStatus, OpportunityStatus], StatusPermission
] = {
    (OS.PENDING, OS.ACTIVE): _ADMIN_ONLY,
    (OS.PENDING, OS.REJECTED): _ADMIN_ONLY,
    (OS.ACTIVE, OS.ADMIN_PAUSED): _ADMIN_ONLY,
    (OS.ACTIVE, OS.FILLED): _ADMIN_ONLY,
    (OS.ACTIVE, OS.EXPIRED): _ADMIN_ONLY,
    (OS.ADMIN_PAUSED, OS.REJECTED): _ADMIN_ONLY,
    (OS.ACTIVE, OS.PAUSED): StatusPermission(
        allowed_roles=frozenset({UserRole.HOST}), requires_ownership=True
    ),
}

# Applies to every pair without an explicit entry.
DEFAULT_PERMISSION = StatusPermission(
    allowed_roles=frozenset({UserRole.HOST}) | ADMIN_ROLES, requires_ownership=True
)

# True: fully editable, "limited": title/slug/type frozen, False: read-only.
EDITABILITY: dict[OpportunityStatus, bool | Literal["limited"]] = {
    OS.DRAFT: True,
    OS.PENDING: False,
    OS.ACTIVE: "limited",
    OS.PAUSED: "limited",
    OS.ADMIN_PAUSED: "limited",
    OS.REJECTED: True,
    OS.EXPIRED: "limited",
    OS.FILLED: "limited",
    OS.ARCHIVED: False,
    OS.DELETED: False,
}

LIMITED_EDIT_FROZEN_FIELDS = frozenset({"title", "opportunity_type"})

_SAVE = "Save"

STATUS_ACTIONS: dict[OpportunityStatus, tuple[StatusAction, ...]] = {
    OS.DRAFT: (
        StatusAction(
            target_status=None,
            label=_SAVE,
            button_type="primary",
            description="Keep the changes as a draft.",
            is_primary=True,
        ),
        StatusAction(
            target_status=OS.PENDING,
            label="Submit for review",
            button_type="secondary",
            description="Send this opportunity to the platform for review.",
        ),
    ),
    OS.PENDING: (
        StatusAction(
            target_status=OS.DRAFT,
            label="Withdraw submission",
            button_type="secondary",
            description="Cancel the review request and go back to editing.",
            is_primary=True,
            needs_confirmation=True,
            confirm_message="Withdraw this opportunity from review?",
            host_only=True,
        ),
        StatusAction(
            target_status=OS.ACTIVE,
            label="Approve",
            button_type="primary",
            description="Publish this opportunity.",
            admin_only=True,
        ),
        StatusAction(
            target_status=OS.REJECTED,
            label="Reject",
            button_type="danger",
            description="Refuse to publish this opportunity.",
            needs_reason=True,
            reason_title="Rejection reason",
            reason_placeholder="Explain what the host needs to change...",
            admin_only=True,
        ),
    ),
    OS.REJECTED: (
        StatusAction(
            target_status=None,
            label=_SAVE,
            button_type="secondary",
            description="Keep the changes without resubmitting.",
        ),
        StatusAction(
            target_status=OS.PENDING,
            label="Resubmit for review",
            button_type="primary",
            description="Send the corrected opportunity for review again.",
            is_primary=True,
        ),
    ),
    OS.ACTIVE: (
        StatusAction(
            target_status=None,
            label="Update listing",
            button_type="primary",
            description="Save and update the published content.",
            is_primary=True,
        ),
        StatusAction(
            target_status=OS.PAUSED,
            label="Pause listing",
            button_type="danger",
            description="Stop accepting applications for now.",
            needs_confirmation=True,
            confirm_message="Pause this opportunity? No new applications will be accepted.",
            needs_reason=True,
            reason_title="Pause reason",
            reason_placeholder="This note is shown to visitors...",
            host_only=True,
        ),
        StatusAction(
            target_status=OS.ADMIN_PAUSED,
            label="Pause as admin",
            button_type="danger",
            description="Suspend this opportunity as an administrator.",
            needs_reason=True,
            reason_title="Admin pause reason",
            reason_placeholder="This note is shown to the host...",
            admin_only=True,
        ),
        StatusAction(
            target_status=OS.FILLED,
            label="Mark as filled",
            button_type="secondary",
            description="Close applications because all places are taken.",
            admin_only=True,
        ),
        StatusAction(
            target_status=OS.ARCHIVED,
            label="Archive",
            button_type="secondary",
            description="Hide the opportunity and keep it for the record.",
            needs_confirmation=True,
            confirm_message="Archive this opportunity?",
        ),
    ),
    OS.PAUSED: (
        StatusAction(
            target_status=None,
            label=_SAVE,
            button_type="secondary",
            description="Keep the changes while paused.",
        ),
        StatusAction(
            target_status=OS.ACTIVE,
            label="Reopen",
            button_type="primary",
            description="Accept applications again.",
            is_primary=True,
            needs_reason=True,
            reason_title="Reopening note",
            reason_placeholder="Describe what changed...",
        ),
    ),
    OS.EXPIRED: (
        StatusAction(
            target_status=None,
            label=_SAVE,
            button_type="secondary",
            description="Keep the changes while expired.",
        ),
        StatusAction(
            target_status=OS.ACTIVE,
            label="Reopen",
            button_type="primary",
            description="Update the dates and accept applications again.",
            is_primary=True,
        ),
        StatusAction(
            target_status=OS.PAUSED,
            label="Take down",
            button_type="danger",
            description="Stop showing this opportunity.",
            needs_confirmation=True,
            confirm_message="Take this opportunity down?",
        ),
    ),
    OS.FILLED: (
        StatusAction(
            target_status=OS.ACTIVE,
            label="Add places",
            button_type="primary",
            description="Add places and accept applications again.",
            is_primary=True,
        ),
        StatusAction(
            target_status=OS.PAUSED,
            label="Pause listing",
            button_type="secondary",
            description="Pause the opportunity.",
        ),
    ),
    OS.ADMIN_PAUSED: (
        StatusAction(
            target_status=OS.PENDING,
            label="Resubmit for review",
            button_type="primary",
            description="Send the corrected opportunity for review again.",
            is_primary=True,
            needs_reason=True,
            reason_title="What was fixed",
            reason_placeholder="Describe the changes made...",
        ),
        StatusAction(
            target_status=OS.REJECTED,
            label="Reject",
            button_type="danger",
            description="Refuse to publish this opportunity.",
            needs_reason=True,
            reason_title="Rejection reason",
            reason_placeholder="Explain what the host needs to change...",
            admin_only=True,
        ),
    ),
    OS.ARCHIVED: (),
    OS.DELETED: (),
}

STATUS_UPDATE_MESSAGES: dict[OpportunityStatus, str] = {
    OS.DRAFT: "Opportunity moved back to draft; you can keep editing.",
    OS.PENDING: "Submitted for review; an administrator will check it soon.",
    OS.ACTIVE: "Opportunity is live and accepting applications.",
    OS.PAUSED: "Opportunity paused; it no longer accepts applications.",
    OS.ADMIN_PAUSED: "Opportunity paused by an administrator.",
    OS.REJECTED: "Opportunity rejected; the host may edit and resubmit.",
    OS.EXPIRED: "Opportunity marked as expired.",
    OS.FILLED: "Opportunity marked as filled.",
    OS.ARCHIVED: "Opportunity archived.",
    OS.DELETED: "Opportunity deleted.",
}


def is_valid_transition(current: OpportunityStatus, target: OpportunityStatus) -> bool:
    """
    Return whether `current -> target` is listed in the opportunity transition table.

    Total and default-deny: unknown states and unlisted pairs return False.
    """
    return target in OPPORTUNITY_TRANSITIONS.get(current, frozenset())


def requires_reason(current: OpportunityStatus, target: OpportunityStatus) -> bool:
    """Return whether `current -> target` must carry a non-empty reason."""
    return (current, target) in REASON_REQUIRED


def get_next_allowed_states(status: OpportunityStatus) -> list[OpportunityStatus]:
    """List legal successors of `status` in declaration order of the enum."""
    allowed = OPPORTUNITY_TRANSITIONS.get(status, frozenset())
    return [candidate for candidate in OpportunityStatus if candidate in allowed]


def get_transition_permission(
    current: OpportunityStatus, target: OpportunityStatus
) -> StatusPermission:
    """Return the explicit permission for the pair, or the owner-or-admin default."""
    return TRANSITION_PERMISSIONS.get((current, target), DEFAULT_PERMISSION)


def can_perform_transition(
    current: OpportunityStatus,
    target: OpportunityStatus,
    role: UserRole,
    is_owner: bool,
) -> bool:
    """
    Decide whether a caller may attempt `current -> target`.

    Role membership is always required. Ownership is required when the
    permission says so, except for admin roles, which act on any listing.

    Parameters:
        current: Status the opportunity is in.
        target: Requested status.
        role: Caller's role.
        is_owner: Whether the caller owns the opportunity's host profile.

    Returns:
        bool: True when the caller is authorized for this specific transition.
    """
    permission = get_transition_permission(current, target)
    if role not in permission.allowed_roles:
        return False
    if permission.requires_ownership and not is_owner and role not in ADMIN_ROLES:
        return False
    return True


def can_edit(status: OpportunityStatus) -> bool | Literal["limited"]:
    return EDITABILITY.get(status, False)


def can_save(status: OpportunityStatus) -> bool:
    """True when the status offers a save-only action."""
    return any(action.target_status is None for action in STATUS_ACTIONS[status])


def get_primary_action(status: OpportunityStatus) -> StatusAction | None:
    return next((a for a in STATUS_ACTIONS[status] if a.is_primary), None)


def get_secondary_actions(status: OpportunityStatus) -> list[StatusAction]:
    return [a for a in STATUS_ACTIONS[status] if not a.is_primary]


def _find_action(
    status: OpportunityStatus, target: OpportunityStatus | None
) -> StatusAction | None:
    return next((a for a in STATUS_ACTIONS[status] if a.target_status == target), None)


def needs_confirmation(
    status: OpportunityStatus, target: OpportunityStatus | None
) -> bool:
    action = _find_action(status, target)
    return bool(action and action.needs_confirmation)


def get_confirmation_message(
    status: OpportunityStatus, target: OpportunityStatus | None
) -> str:
    action = _find_action(status, target)
    if action and action.confirm_message:
        return action.confirm_message
    return "Change the status of this opportunity?"


def get_reason_config(
    status: OpportunityStatus, target: OpportunityStatus | None
) -> dict[str, str | bool | None]:
    """Describe the reason input for an action: whether needed, its title and placeholder."""
    action = _find_action(status, target)
    return {
        "needs_reason": bool(action and action.needs_reason),
        "reason_title": action.reason_title if action else None,
        "reason_placeholder": action.reason_placeholder if action else None,
    }


def get_status_update_message(status: OpportunityStatus) -> str:
    return STATUS_UPDATE_MESSAGES.get(status, "Status updated.")


def available_actions(
    status: OpportunityStatus, role: UserRole, is_owner: bool = True
) -> list[StatusAction]:
    """
    Actions a caller should be offered for an opportunity in `status`.

    Host-only actions are hidden from admins and admin-only actions from
    everyone else. Status-changing actions are further filtered by the
    transition permission so that only performable buttons are returned.

    Parameters:
        status: Current opportunity status.
        role: Caller's role.
        is_owner: Whether the caller owns the opportunity.

    Returns:
        list[StatusAction]: The actions to render, in table order.
    """
    is_admin = role in ADMIN_ROLES
    actions = []
    for action in STATUS_ACTIONS[status]:
        if action.admin_only and not is_admin:
            continue
        if action.host_only and is_admin:
            continue
        if action.target_status is None:
            if is_owner or is_admin:
                actions.append(action)
            continue
        if can_perform_transition(status, action.target_status, role, is_owner):
            actions.append(action)
    return actions


# ---------------------------------------------------------------------------
# Application tables
# ---------------------------------------------------------------------------

APPLICATION_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    AS.DRAFT: frozenset({AS.PENDING, AS.WITHDRAWN}),
    AS.PENDING: frozenset(
        {AS.REVIEWING, AS.ACCEPTED, AS.REJECTED, AS.WITHDRAWN, AS.CANCELLED}
    ),
    AS.REVIEWING: frozenset({AS.ACCEPTED, AS.REJECTED, AS.WITHDRAWN}),
    AS.ACCEPTED: frozenset({AS.CONFIRMED, AS.WITHDRAWN, AS.CANCELLED}),
    AS.REJECTED: frozenset({AS.REVIEWING}),
    AS.CONFIRMED: frozenset({AS.COMPLETED, AS.CANCELLED}),
    AS.CANCELLED: frozenset(),
    AS.COMPLETED: frozenset(),
    AS.WITHDRAWN: frozenset(),
}

APPLICATION_TERMINAL_STATES = frozenset(
    status for status, targets in APPLICATION_TRANSITIONS.items() if not targets
)

APPLICANT_TARGETS = frozenset({AS.PENDING, AS.CONFIRMED, AS.WITHDRAWN})
HOST_TARGETS = frozenset(
    {AS.REVIEWING, AS.ACCEPTED, AS.REJECTED, AS.CANCELLED, AS.COMPLETED}
)

APPLICATION_STATUS_LABELS: dict[ApplicationStatus, str] = {
    AS.DRAFT: "Draft",
    AS.PENDING: "Pending",
    AS.REVIEWING: "Under review",
    AS.ACCEPTED: "Accepted",
    AS.REJECTED: "Rejected",
    AS.CONFIRMED: "Confirmed",
    AS.CANCELLED: "Cancelled",
    AS.COMPLETED: "Completed",
    AS.WITHDRAWN: "Withdrawn",
}


def is_valid_application_transition(
    current: ApplicationStatus, target: ApplicationStatus
) -> bool:
    """Default-deny lookup in the application adjacency list."""
    return target in APPLICATION_TRANSITIONS.get(current, frozenset())


def application_targets_for(
    *, is_applicant: bool, is_host: bool, is_admin: bool
) -> frozenset[ApplicationStatus]:
    """
    Target statuses a caller may request on an application, by relationship.

    Admins may request anything; an applicant who also owns the host gets
    the union of both sets.
    """
    if is_admin:
        return frozenset(ApplicationStatus)
    targets: frozenset[ApplicationStatus] = frozenset()
    if is_applicant:
        targets |= APPLICANT_TARGETS
    if is_host:
        targets |= HOST_TARGETS
    return targets
