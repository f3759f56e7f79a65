"""Tests for analytics service."""

from datetime import date

import pytest
from sqlmodel import Session

from app.exceptions import InsufficientPermissionsError, NotFoundError
from app.models.application import Application
from app.models.enums import ApplicationStatus, HostStatus, OpportunityStatus
from app.models.host import Host
from app.services import analytics as analytics_service

AS = ApplicationStatus
OS = OpportunityStatus


@pytest.fixture(name="add_application")
def add_application_fixture(session: Session):
    def create(applicant, opportunity, status: ApplicationStatus) -> Application:
        application = Application(
            id_applicant=applicant.id_user,
            id_opportunity=opportunity.id_opportunity,
            id_host=opportunity.id_host,
            message="Happy to help with anything.",
            start_date=date(2026, 12, 1),
            duration_days=14,
            status=status,
        )
        session.add(application)
        session.commit()
        return application

    return create


class TestOverviewStatistics:
    def test_counts_accounts_and_queues(
        self,
        session: Session,
        host_user,
        volunteer,
        make_user,
        make_opportunity,
        add_application,
    ):
        newcomer = make_user("newcomer")
        session.add(
            Host(
                id_user=newcomer.id_user,
                name="Newcomer Hostel",
                slug="newcomer-hostel",
                city="Tainan",
                status=HostStatus.PENDING,
            )
        )
        session.commit()
        active = make_opportunity(host_user, OS.ACTIVE)
        make_opportunity(host_user, OS.PENDING)
        make_opportunity(host_user, OS.DRAFT)
        add_application(volunteer, active, AS.PENDING)
        add_application(newcomer, active, AS.DRAFT)

        stats = analytics_service.get_overview_statistics(session)

        assert stats.total_users == 3
        assert stats.total_hosts == 2
        assert stats.pending_hosts == 1
        assert stats.pending_opportunities == 1
        assert stats.active_opportunities == 1
        assert stats.pending_applications == 1


class TestHostStatistics:
    def test_counts_for_owner(
        self,
        session: Session,
        host_user,
        make_user,
        make_opportunity,
        add_application,
    ):
        active = make_opportunity(host_user, OS.ACTIVE)
        make_opportunity(host_user, OS.DRAFT)
        make_opportunity(host_user, OS.DELETED)
        add_application(make_user("a"), active, AS.PENDING)
        add_application(make_user("b"), active, AS.ACCEPTED)
        add_application(make_user("c"), active, AS.CONFIRMED)
        add_application(make_user("d"), active, AS.DRAFT)

        stats = analytics_service.get_host_statistics(
            session, host_user.host_profile.id_host, host_user
        )

        assert stats.opportunity_count == 2
        assert stats.published_opportunity_count == 1
        assert stats.application_count == 3
        assert stats.pending_application_count == 1
        assert stats.accepted_application_count == 2

    def test_admin_can_read(self, session: Session, host_user, admin_user):
        stats = analytics_service.get_host_statistics(
            session, host_user.host_profile.id_host, admin_user
        )
        assert stats.opportunity_count == 0

    def test_other_host_is_forbidden(self, session: Session, host_user, other_host_user):
        with pytest.raises(InsufficientPermissionsError):
            analytics_service.get_host_statistics(
                session, host_user.host_profile.id_host, other_host_user
            )

    def test_missing_host(self, session: Session, admin_user):
        with pytest.raises(NotFoundError):
            analytics_service.get_host_statistics(session, 4040, admin_user)
