"""Bookmarks: opportunities a user saved for later."""

from sqlmodel import Session, select

from app.models.bookmark import Bookmark, BookmarkState
from app.models.opportunity import Opportunity
from app.models.user import User
from app.services.opportunity import can_view, get_visible_opportunity
from app.utils.logger import logger
from app.utils.validation import ensure_id


def _find(session: Session, user_id: int, opportunity_id: int) -> Bookmark | None:
    return session.exec(
        select(Bookmark).where(
            Bookmark.id_user == user_id, Bookmark.id_opportunity == opportunity_id
        )
    ).first()


def list_bookmarked_opportunities(session: Session, user: User) -> list[Opportunity]:
    """
    Bookmarked opportunities, newest bookmark first.

    Listings that stopped being visible to the user (taken back to draft,
    rejected, deleted) are left out but their bookmarks are kept.
    """
    statement = (
        select(Opportunity)
        .join(Bookmark, Bookmark.id_opportunity == Opportunity.id_opportunity)  # type: ignore[arg-type]
        .where(Bookmark.id_user == user.id_user)
        .order_by(Bookmark.created_at.desc())  # type: ignore[union-attr]
    )
    return [o for o in session.exec(statement).all() if can_view(o, user)]


def get_bookmark_state(
    session: Session, user: User, opportunity_ref: int | str
) -> BookmarkState:
    """
    Raises:
        NotFoundError: If the opportunity does not exist or is hidden from the user.
    """
    opportunity = get_visible_opportunity(session, opportunity_ref, user)
    opportunity_id = ensure_id(opportunity.id_opportunity, "Opportunity")
    existing = _find(session, ensure_id(user.id_user, "User"), opportunity_id)
    return BookmarkState(id_opportunity=opportunity_id, is_bookmarked=existing is not None)


def toggle_bookmark(
    session: Session, user: User, opportunity_ref: int | str
) -> BookmarkState:
    """
    Bookmark the opportunity, or remove the bookmark if it already exists.

    Raises:
        NotFoundError: If the opportunity does not exist or is hidden from the user.
    """
    opportunity = get_visible_opportunity(session, opportunity_ref, user)
    user_id = ensure_id(user.id_user, "User")
    opportunity_id = ensure_id(opportunity.id_opportunity, "Opportunity")

    existing = _find(session, user_id, opportunity_id)
    if existing:
        session.delete(existing)
    else:
        session.add(Bookmark(id_user=user_id, id_opportunity=opportunity_id))
    session.commit()
    logger.debug(
        f"User {user_id} {'removed' if existing else 'added'} bookmark "
        f"on opportunity {opportunity_id}"
    )
    return BookmarkState(id_opportunity=opportunity_id, is_bookmarked=existing is None)
