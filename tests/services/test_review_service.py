from datetime import date

import pytest
from sqlmodel import Session

from app.exceptions import (
    AlreadyExistsError,
    InsufficientPermissionsError,
    ValidationError,
)
from app.models.application import Application
from app.models.enums import ApplicationStatus, OpportunityStatus
from app.models.review import ReviewCreate
from app.services import review as review_service


@pytest.fixture(name="completed_stay")
def completed_stay_fixture(session: Session, volunteer, host_user, make_opportunity):
    opportunity = make_opportunity(host_user, OpportunityStatus.ACTIVE)
    application = Application(
        id_applicant=volunteer.id_user,
        id_opportunity=opportunity.id_opportunity,
        id_host=opportunity.id_host,
        message="Done",
        start_date=date(2026, 6, 1),
        duration_days=30,
        status=ApplicationStatus.COMPLETED,
    )
    session.add(application)
    session.commit()
    return opportunity


class TestReviews:
    def test_completed_stay_can_review(self, session, volunteer, completed_stay):
        review = review_service.create_review(
            session,
            volunteer,
            ReviewCreate(id_host=completed_stay.id_host, rating=5, comment="Lovely"),
        )
        assert review.id_author == volunteer.id_user
        assert review_service.list_host_reviews(session, completed_stay.id_host) == [
            review
        ]

    def test_no_stay_no_review(self, session, make_user, completed_stay):
        with pytest.raises(ValidationError):
            review_service.create_review(
                session,
                make_user("tourist"),
                ReviewCreate(id_host=completed_stay.id_host, rating=1, comment="Meh"),
            )

    def test_single_review_per_host(self, session, volunteer, completed_stay):
        review_in = ReviewCreate(
            id_host=completed_stay.id_host,
            id_opportunity=completed_stay.id_opportunity,
            rating=4,
            comment="Good",
        )
        review_service.create_review(session, volunteer, review_in)
        with pytest.raises(AlreadyExistsError):
            review_service.create_review(session, volunteer, review_in)

    def test_hide_review(self, session, volunteer, admin_user, host_user, completed_stay):
        review = review_service.create_review(
            session,
            volunteer,
            ReviewCreate(id_host=completed_stay.id_host, rating=3, comment="Ok"),
        )
        with pytest.raises(InsufficientPermissionsError):
            review_service.hide_review(session, review.id_review, host_user)

        review_service.hide_review(session, review.id_review, admin_user)
        assert review_service.list_host_reviews(session, completed_stay.id_host) == []
