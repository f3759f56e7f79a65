"""Bookmark router: the caller's saved opportunities."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.dependencies import get_current_user
from app.database.database import get_session
from app.models.bookmark import BookmarkState
from app.models.opportunity import OpportunityPublic
from app.models.user import User
from app.services import bookmark as bookmark_service

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("/", response_model=list[OpportunityPublic])
def list_bookmarks(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Saved opportunities that are still visible, most recently saved first."""
    return bookmark_service.list_bookmarked_opportunities(session, current_user)


@router.get("/{opportunity_ref}", response_model=BookmarkState)
def read_bookmark_state(
    opportunity_ref: str,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Whether the caller bookmarked the opportunity (id or slug)."""
    return bookmark_service.get_bookmark_state(session, current_user, opportunity_ref)


@router.post("/{opportunity_ref}", response_model=BookmarkState)
def toggle_bookmark(
    opportunity_ref: str,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Bookmark the opportunity, or remove the bookmark when it is already saved.

    Hidden listings (drafts, rejected, deleted) answer 404 like a missing one.
    """
    return bookmark_service.toggle_bookmark(session, current_user, opportunity_ref)
