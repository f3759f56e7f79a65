"""Host profile router."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.dependencies import (
    get_current_user,
    get_optional_user,
)
from app.database.database import get_session
from app.exceptions import NotFoundError
from app.models.analytics import HostStats
from app.models.application import ApplicationPublic
from app.models.enums import ApplicationStatus, HostStatus, OpportunityStatus
from app.models.host import HostCreate, HostPublic, HostUpdate
from app.models.opportunity import OpportunityPublic
from app.models.review import ReviewPublic
from app.models.user import User
from app.services import analytics as analytics_service
from app.services import application as application_service
from app.services import host as host_service
from app.services import opportunity as opportunity_service
from app.services import review as review_service
from app.utils.validation import ensure_id

router = APIRouter(prefix="/hosts", tags=["hosts"])


@router.post("/", response_model=HostPublic, status_code=status.HTTP_201_CREATED)
def create_host(
    host_in: HostCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Create the caller's host profile.

    The profile starts **PENDING** until an administrator activates it; a
    volunteer account (USER) is promoted to HOST. One profile per account.
    """
    return host_service.create_host(session, current_user, host_in)


@router.get("/", response_model=list[HostPublic])
def list_hosts(
    session: Annotated[Session, Depends(get_session)],
    city: str | None = Query(default=None, description="Filter by city"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    """Public list of ACTIVE hosts."""
    return host_service.list_hosts(session, city=city, offset=offset, limit=limit)


@router.get("/me", response_model=HostPublic)
def read_my_host(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    host = host_service.get_host_by_user(
        session, ensure_id(current_user.id_user, "User")
    )
    if host is None:
        raise NotFoundError("Host", f"user_{current_user.id_user}")
    return host


@router.post("/me/reapply", response_model=HostPublic)
def reapply_my_host(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Resubmit a **REJECTED** host profile for review; it goes back to
    **PENDING**. Any other status is a 422.
    """
    return host_service.reapply_host(session, current_user)


@router.get("/{host_id}", response_model=HostPublic)
def read_host(
    host_id: int,
    session: Annotated[Session, Depends(get_session)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
):
    """
    Host profile. Profiles that are not ACTIVE are only visible to their
    owner and to administrators.
    """
    host = host_service.get_host(session, host_id)
    if host.status != HostStatus.ACTIVE and not (
        viewer and (viewer.is_admin or viewer.id_user == host.id_user)
    ):
        raise NotFoundError("Host", host_id)
    return host


@router.patch("/{host_id}", response_model=HostPublic)
def update_host(
    host_id: int,
    host_update: HostUpdate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return host_service.update_host(session, host_id, host_update, current_user)


@router.get("/{host_id}/opportunities", response_model=list[OpportunityPublic])
def list_host_opportunities(
    host_id: int,
    session: Annotated[Session, Depends(get_session)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
    status_filter: OpportunityStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    """
    Opportunities of a host.

    - Visitors see ACTIVE listings only.
    - The owner and administrators see every status except DELETED, or the
      one given in `status`.
    """
    host = host_service.get_host(session, host_id)
    return opportunity_service.list_host_opportunities(
        session, host, viewer, status=status_filter, offset=offset, limit=limit
    )


@router.get("/{host_id}/applications", response_model=list[ApplicationPublic])
def list_host_applications(
    host_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    """Applications received by the host (owner or admin)."""
    host = host_service.get_host(session, host_id)
    return application_service.list_host_applications(
        session, host, current_user, status=status_filter, offset=offset, limit=limit
    )


@router.get("/{host_id}/reviews", response_model=list[ReviewPublic])
def list_host_reviews(
    host_id: int,
    session: Annotated[Session, Depends(get_session)],
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
):
    return review_service.list_host_reviews(
        session, host_id, offset=offset, limit=limit
    )


@router.get("/{host_id}/stats", response_model=HostStats)
def read_host_stats(
    host_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Dashboard counters for the host (owner or admin)."""
    return analytics_service.get_host_statistics(session, host_id, current_user)
