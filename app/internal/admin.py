"""Administrator endpoints. Every route requires an ADMIN or SUPER_ADMIN account."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.dependencies import get_current_admin
from app.database.database import get_session
from app.models.analytics import OverviewStats
from app.models.application import ApplicationPublic, ApplicationStatusChange
from app.models.enums import HostStatus, OpportunityStatus
from app.models.host import HostAdminPublic, HostStatusUpdate
from app.models.opportunity import (
    OpportunityPublic,
    OpportunityStatusChange,
    OpportunityStatusResult,
)
from app.models.user import User, UserPublic
from app.routers.opportunities import OpportunityRef, status_result
from app.services import analytics as analytics_service
from app.services import application as application_service
from app.services import host as host_service
from app.services import opportunity as opportunity_service
from app.services import user as user_service

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_admin)]
)


@router.get("/stats", response_model=OverviewStats)
def read_overview_stats(
    session: Annotated[Session, Depends(get_session)],
):
    """Counters for the admin dashboard, including the pending review queues."""
    return analytics_service.get_overview_statistics(session)


@router.get("/users", response_model=list[UserPublic])
def list_users(
    session: Annotated[Session, Depends(get_session)],
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    return user_service.get_users(session, offset=offset, limit=limit)


@router.delete("/users/{user_id}", response_model=UserPublic)
async def deactivate_user(
    user_id: int,
    session: Annotated[Session, Depends(get_session)],
):
    """
    Soft-delete an account: it can no longer log in or refresh tokens, but its
    history, applications and reviews are kept.
    """
    return await user_service.deactivate_user(session, user_id)


@router.get("/hosts", response_model=list[HostAdminPublic])
def list_hosts(
    session: Annotated[Session, Depends(get_session)],
    status_filter: HostStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    """Hosts in any status; filter with `status=PENDING` for the review queue."""
    return host_service.list_hosts(
        session, status=status_filter, offset=offset, limit=limit
    )


@router.put("/hosts/{host_id}/status", response_model=HostAdminPublic)
async def update_host_status(
    host_id: int,
    status_update: HostStatusUpdate,
    session: Annotated[Session, Depends(get_session)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """
    Moderate a host profile. **ACTIVE** verifies the host the first time.
    """
    return await host_service.update_host_status(
        session, host_id, status_update, admin
    )


@router.get("/opportunities", response_model=list[OpportunityPublic])
def list_opportunities(
    session: Annotated[Session, Depends(get_session)],
    status_filter: OpportunityStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    """Opportunities in any status, least recently updated first."""
    return opportunity_service.admin_list_opportunities(
        session, status=status_filter, offset=offset, limit=limit
    )


@router.patch(
    "/opportunities/{opportunity_ref}/status", response_model=OpportunityStatusResult
)
async def change_opportunity_status(
    opportunity_ref: OpportunityRef,
    status_change: OpportunityStatusChange,
    session: Annotated[Session, Depends(get_session)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """
    Moderation entry point for opportunity status (approve, reject, pause,
    mark filled or expired). Same rule table as the host endpoint; admin-only
    transitions are available here and there alike.
    """
    opportunity = await opportunity_service.change_opportunity_status(
        session, opportunity_ref, status_change.status, status_change.reason, admin
    )
    return status_result(opportunity)


@router.put("/applications/{application_id}/status", response_model=ApplicationPublic)
async def change_application_status(
    application_id: int,
    status_change: ApplicationStatusChange,
    session: Annotated[Session, Depends(get_session)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    return await application_service.change_application_status(
        session, application_id, status_change.status, status_change.note, admin
    )
