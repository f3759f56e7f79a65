"""Review service: volunteers rating hosts they stayed with."""

from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError

from app.exceptions import (
    AlreadyExistsError,
    InsufficientPermissionsError,
    ValidationError,
)
from app.models.application import Application
from app.models.enums import ApplicationStatus
from app.models.host import Host
from app.models.review import Review, ReviewCreate
from app.models.user import User
from app.services.utils import get_or_404
from app.utils.validation import ensure_id


def create_review(session: Session, author: User, review_in: ReviewCreate) -> Review:
    """
    Publish a review of a host.

    Only volunteers with a COMPLETED application at that host (for the given
    opportunity, when one is named) may review it, and only once.

    Raises:
        NotFoundError: If the host does not exist.
        ValidationError: If the author has no completed stay there.
        AlreadyExistsError: If the author already reviewed this host/opportunity.
    """
    get_or_404(session, Host, review_in.id_host, "Host")
    author_id = ensure_id(author.id_user, "User")

    statement = select(Application).where(
        Application.id_applicant == author_id,
        Application.id_host == review_in.id_host,
        Application.status == ApplicationStatus.COMPLETED,
    )
    if review_in.id_opportunity is not None:
        statement = statement.where(
            Application.id_opportunity == review_in.id_opportunity
        )
    if session.exec(statement).first() is None:
        raise ValidationError(
            "Only volunteers who completed a stay can review this host",
            field="id_host",
        )

    # NULL opportunity ids are distinct for the unique constraint
    existing = session.exec(
        select(Review).where(
            Review.id_author == author_id,
            Review.id_host == review_in.id_host,
            Review.id_opportunity == review_in.id_opportunity,
        )
    ).first()
    if existing:
        raise AlreadyExistsError("Review", "id_host", review_in.id_host)

    review = Review.model_validate(review_in, update={"id_author": author_id})
    session.add(review)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("Review", "id_host", review_in.id_host)
    session.refresh(review)
    return review


def list_host_reviews(
    session: Session, host_id: int, *, offset: int = 0, limit: int = 50
) -> list[Review]:
    """Public reviews of a host, newest first."""
    get_or_404(session, Host, host_id, "Host")
    statement = (
        select(Review)
        .where(Review.id_host == host_id, Review.is_public == True)  # noqa: E712
        .order_by(Review.date_creation.desc())  # type: ignore[attr-defined]
        .offset(offset)
        .limit(limit)
    )
    return list(session.exec(statement).all())


def hide_review(session: Session, review_id: int, user: User) -> None:
    """
    Soft-delete a review (author or admin).

    Raises:
        NotFoundError: If the review does not exist.
        InsufficientPermissionsError: If the caller is neither author nor admin.
    """
    review = get_or_404(session, Review, review_id, "Review")
    if review.id_author != user.id_user and not user.is_admin:
        raise InsufficientPermissionsError("You cannot delete this review")
    review.is_public = False
    session.add(review)
    session.commit()
