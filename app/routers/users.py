"""Account endpoints for the authenticated user."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.dependencies import get_current_user
from app.database.database import get_session
from app.exceptions import NotFoundError
from app.models.user import User, UserPublic, UserUpdate
from app.services import user as user_service
from app.utils.validation import ensure_id

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserPublic)
def read_current_user(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user


@router.patch("/me", response_model=UserPublic)
def update_current_user(
    user_update: UserUpdate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Update the caller's email, display name or password.

    Role and activation state cannot be changed here.
    """
    return user_service.update_user(
        session, ensure_id(current_user.id_user, "User"), user_update
    )


@router.get("/{user_id}", response_model=UserPublic)
def read_user(
    user_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Public profile of another active user."""
    user = user_service.get_user(session, user_id)
    if not user or not user.is_active:
        raise NotFoundError("User", user_id)
    return user
