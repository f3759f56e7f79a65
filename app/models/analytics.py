"""Dashboard statistics models."""

from sqlmodel import SQLModel


class OverviewStats(SQLModel):
    """Platform counters for the admin dashboard."""

    total_users: int
    total_hosts: int
    pending_hosts: int
    pending_opportunities: int
    active_opportunities: int
    pending_applications: int


class HostStats(SQLModel):
    """Counters for one host's dashboard. Draft applications are not counted."""

    opportunity_count: int
    published_opportunity_count: int
    application_count: int
    pending_application_count: int
    accepted_application_count: int
