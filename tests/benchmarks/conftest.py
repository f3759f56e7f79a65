"""Shared fixtures for benchmark tests."""

import pytest
from sqlmodel import Session

from app.models.enums import OpportunityStatus, OpportunityType

CITIES = ["Taipei", "Hualien", "Taitung", "Tainan", "Yilan"]
TYPES = list(OpportunityType)


@pytest.fixture(name="seeded_opportunities")
def seeded_opportunities_fixture(session: Session, host_user, make_opportunity):
    """
    Fifty opportunities across cities, types and statuses for the owning host.

    Every fifth one is a DRAFT so search has rows to filter out.
    """
    opportunities = []
    for index in range(50):
        status = OpportunityStatus.DRAFT if index % 5 == 0 else OpportunityStatus.ACTIVE
        opportunities.append(
            make_opportunity(
                host_user,
                status,
                title=f"Bench opportunity {index}",
                city=CITIES[index % len(CITIES)],
                opportunity_type=TYPES[index % len(TYPES)],
                work_hours_per_week=10 + index % 30,
            )
        )
    return opportunities
