"""Opportunity listings and their status lifecycle."""

from typing import Annotated
from fastapi import APIRouter, Depends, Path, Query, status
from sqlmodel import Session

from app.core import status_rules
from app.core.dependencies import (
    get_current_host_user,
    get_current_user,
    get_optional_user,
)
from app.database.database import get_session
from app.exceptions import InsufficientPermissionsError
from app.models.enums import OpportunityType
from app.models.opportunity import (
    Opportunity,
    OpportunityCreate,
    OpportunityDetail,
    OpportunityPublic,
    OpportunityStatusActions,
    OpportunityStatusChange,
    OpportunityStatusResult,
    OpportunityUpdate,
    StatusHistoryPublic,
)
from app.models.user import User
from app.services import opportunity as opportunity_service

router = APIRouter(prefix="/opportunities", tags=["opportunities"])

OpportunityRef = Annotated[
    str, Path(description="Numeric opportunity id or its slug")
]


def status_result(opportunity: Opportunity) -> OpportunityStatusResult:
    return OpportunityStatusResult(
        message=status_rules.get_status_update_message(opportunity.status),
        opportunity=opportunity_service.to_opportunity_detail(opportunity),
    )


@router.post(
    "/", response_model=OpportunityDetail, status_code=status.HTTP_201_CREATED
)
def create_opportunity(
    opportunity_in: OpportunityCreate,
    session: Annotated[Session, Depends(get_session)],
    host_user: Annotated[User, Depends(get_current_host_user)],
):
    """
    Create an opportunity for the caller's host profile.

    New opportunities are always **DRAFT**; submit them for review with
    `PATCH /opportunities/{id}/status` and `{"status": "PENDING"}`.
    """
    opportunity = opportunity_service.create_opportunity(
        session, host_user, opportunity_in
    )
    return opportunity_service.to_opportunity_detail(opportunity)


@router.get("/", response_model=list[OpportunityPublic])
def search_opportunities(
    session: Annotated[Session, Depends(get_session)],
    search: str | None = Query(
        default=None, description="Text search in title, descriptions and city"
    ),
    opportunity_type: OpportunityType | None = Query(default=None, alias="type"),
    city: str | None = Query(default=None),
    min_hours: int | None = Query(default=None, ge=1),
    max_hours: int | None = Query(default=None, ge=1),
    min_stay: int | None = Query(default=None, ge=1),
    sort: str = Query(default="newest", pattern="^(newest|oldest)$"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
):
    """
    Public search over **ACTIVE** opportunities.

    ### Filters:
    - **search**: case-insensitive match on title, descriptions and city
    - **type**: opportunity type (FARMING, HOSPITALITY, ...)
    - **city**: exact city
    - **min_hours / max_hours**: weekly work hours range
    - **min_stay**: minimum stay of at least this many days
    - **sort**: `newest` (default) or `oldest` by publication date
    """
    return opportunity_service.search_opportunities(
        session,
        search=search,
        opportunity_type=opportunity_type,
        city=city,
        min_hours=min_hours,
        max_hours=max_hours,
        min_stay=min_stay,
        sort=sort,
        offset=offset,
        limit=limit,
    )


@router.get("/{opportunity_ref}", response_model=OpportunityDetail)
def read_opportunity(
    opportunity_ref: OpportunityRef,
    session: Annotated[Session, Depends(get_session)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
):
    """
    Opportunity with its host and status history.

    Drafts, listings under review, rejected and deleted listings are only
    visible to the owning host and administrators.
    """
    opportunity = opportunity_service.get_visible_opportunity(
        session, opportunity_ref, viewer
    )
    return opportunity_service.to_opportunity_detail(opportunity)


@router.patch("/{opportunity_ref}", response_model=OpportunityDetail)
def update_opportunity(
    opportunity_ref: OpportunityRef,
    opportunity_update: OpportunityUpdate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Edit opportunity content without changing its status.

    - **DRAFT, REJECTED**: every field.
    - **ACTIVE, PAUSED, ADMIN_PAUSED, EXPIRED, FILLED**: title and type are frozen.
    - **PENDING, ARCHIVED, DELETED**: not editable (422).
    """
    opportunity = opportunity_service.update_opportunity(
        session, opportunity_ref, opportunity_update, current_user
    )
    return opportunity_service.to_opportunity_detail(opportunity)


@router.delete("/{opportunity_ref}", response_model=OpportunityStatusResult)
async def delete_opportunity(
    opportunity_ref: OpportunityRef,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Logically delete an opportunity (status **DELETED**). Rows are never
    removed. Allowed from DRAFT, PAUSED, REJECTED and ARCHIVED.
    """
    opportunity = await opportunity_service.delete_opportunity(
        session, opportunity_ref, current_user
    )
    return status_result(opportunity)


@router.patch("/{opportunity_ref}/status", response_model=OpportunityStatusResult)
async def change_opportunity_status(
    opportunity_ref: OpportunityRef,
    status_change: OpportunityStatusChange,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Change the status of an opportunity.

    ### Checks (first failure wins):
    1. **401**: not authenticated
    2. **404**: opportunity not found
    3. **403**: the caller's role or ownership does not allow this transition
       (for example a host requesting ADMIN_PAUSED)
    4. **400**: unknown status, or a transition not in the rule table
    5. **400**: the transition needs a `reason` and none was given
       (PENDING→REJECTED, ACTIVE→PAUSED, ACTIVE→ADMIN_PAUSED, PAUSED→ACTIVE,
       ADMIN_PAUSED→PENDING, ADMIN_PAUSED→REJECTED)

    On success the new status and a history entry are saved together and the
    host receives an email.
    """
    opportunity = await opportunity_service.change_opportunity_status(
        session,
        opportunity_ref,
        status_change.status,
        status_change.reason,
        current_user,
    )
    return status_result(opportunity)


@router.get(
    "/{opportunity_ref}/status/actions", response_model=OpportunityStatusActions
)
def read_status_actions(
    opportunity_ref: OpportunityRef,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Status label, editability and the actions the caller may take."""
    opportunity = opportunity_service.get_visible_opportunity(
        session, opportunity_ref, current_user
    )
    return opportunity_service.get_status_actions(opportunity, current_user)


@router.get(
    "/{opportunity_ref}/status/history", response_model=list[StatusHistoryPublic]
)
def read_status_history(
    opportunity_ref: OpportunityRef,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Full status history, oldest first (owner or admin)."""
    opportunity = opportunity_service.get_opportunity(session, opportunity_ref)
    if not (
        current_user.is_admin or opportunity_service.is_owner(opportunity, current_user)
    ):
        raise InsufficientPermissionsError("You do not manage this opportunity")
    return opportunity.status_history
