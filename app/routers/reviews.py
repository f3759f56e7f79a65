from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.dependencies import get_current_user
from app.database.database import get_session
from app.models.review import ReviewCreate, ReviewPublic
from app.models.user import User
from app.services import review as review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("/", response_model=ReviewPublic, status_code=status.HTTP_201_CREATED)
def create_review(
    review_in: ReviewCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Review a host after a completed stay (one review per host and opportunity).
    """
    return review_service.create_review(session, current_user, review_in)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Hide a review (author or administrator). The row is kept."""
    review_service.hide_review(session, review_id, current_user)
