"""Statistics for the admin and host dashboards."""

from sqlmodel import Session, select, func

from app.models.analytics import HostStats, OverviewStats
from app.models.application import Application
from app.models.enums import ApplicationStatus, HostStatus, OpportunityStatus
from app.models.host import Host
from app.models.opportunity import Opportunity
from app.models.user import User
from app.services.host import ensure_host_access, get_host


def _count(session: Session, model, *conditions) -> int:
    statement = select(func.count()).select_from(model)
    if conditions:
        statement = statement.where(*conditions)
    return session.exec(statement).one()


def get_overview_statistics(session: Session) -> OverviewStats:
    """
    Counters for the admin dashboard: accounts, hosts, and the review queues
    (hosts and opportunities waiting for a moderator, applications waiting
    for their host).
    """
    return OverviewStats(
        total_users=_count(session, User),
        total_hosts=_count(session, Host),
        pending_hosts=_count(session, Host, Host.status == HostStatus.PENDING),
        pending_opportunities=_count(
            session, Opportunity, Opportunity.status == OpportunityStatus.PENDING
        ),
        active_opportunities=_count(
            session, Opportunity, Opportunity.status == OpportunityStatus.ACTIVE
        ),
        pending_applications=_count(
            session, Application, Application.status == ApplicationStatus.PENDING
        ),
    )


def get_host_statistics(session: Session, host_id: int, user: User) -> HostStats:
    """
    Counters for one host's dashboard.

    DELETED listings and draft applications are left out; accepted counts
    ACCEPTED and CONFIRMED applications.

    Raises:
        NotFoundError: If the host does not exist.
        InsufficientPermissionsError: If the caller neither owns the host nor is an admin.
    """
    host = get_host(session, host_id)
    ensure_host_access(host, user)

    own_opportunity = Opportunity.id_host == host.id_host
    received = (
        Application.id_host == host.id_host,
        Application.status != ApplicationStatus.DRAFT,
    )
    return HostStats(
        opportunity_count=_count(
            session,
            Opportunity,
            own_opportunity,
            Opportunity.status != OpportunityStatus.DELETED,
        ),
        published_opportunity_count=_count(
            session,
            Opportunity,
            own_opportunity,
            Opportunity.status == OpportunityStatus.ACTIVE,
        ),
        application_count=_count(session, Application, *received),
        pending_application_count=_count(
            session,
            Application,
            Application.id_host == host.id_host,
            Application.status == ApplicationStatus.PENDING,
        ),
        accepted_application_count=_count(
            session,
            Application,
            Application.id_host == host.id_host,
            Application.status.in_(  # type: ignore[attr-defined]
                [ApplicationStatus.ACCEPTED, ApplicationStatus.CONFIRMED]
            ),
        ),
    )
