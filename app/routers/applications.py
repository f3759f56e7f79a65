"""Volunteer applications router."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.dependencies import get_current_user
from app.database.database import get_session
from app.models.application import (
    ApplicationCreate,
    ApplicationPublic,
    ApplicationStatusChange,
)
from app.models.enums import ApplicationStatus
from app.models.user import User
from app.services import application as application_service

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("/", response_model=ApplicationPublic, status_code=status.HTTP_201_CREATED)
async def create_application(
    application_in: ApplicationCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Apply to an ACTIVE opportunity.

    Set `submit` to false to keep the application as a DRAFT; otherwise it is
    sent to the host as PENDING. One application per opportunity.
    """
    return await application_service.create_application(
        session, current_user, application_in
    )


@router.get("/me", response_model=list[ApplicationPublic])
def list_my_applications(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
):
    return application_service.list_user_applications(
        session, current_user, status=status_filter, offset=offset, limit=limit
    )


@router.get("/{application_id}", response_model=ApplicationPublic)
def read_application(
    application_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Visible to the applicant, the owning host and administrators."""
    return application_service.get_application(session, application_id, current_user)


@router.put("/{application_id}/status", response_model=ApplicationPublic)
async def change_application_status(
    application_id: int,
    status_change: ApplicationStatusChange,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Change an application's status.

    ### Who may request what:
    - **Applicant**: PENDING (submit a draft), CONFIRMED, WITHDRAWN
    - **Owning host**: REVIEWING, ACCEPTED, REJECTED, CANCELLED, COMPLETED
    - **Administrator**: any status

    A target outside the caller's set is 403; a transition not allowed from the
    current status is 400. `note` is kept as review notes or cancellation reason.
    """
    return await application_service.change_application_status(
        session,
        application_id,
        status_change.status,
        status_change.note,
        current_user,
    )
