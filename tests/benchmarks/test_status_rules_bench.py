"""Performance benchmarks for the status rule tables."""

from pytest_codspeed import BenchmarkFixture

from app.core import status_rules
from app.models.enums import ApplicationStatus, OpportunityStatus, UserRole

ALL_PAIRS = [(a, b) for a in OpportunityStatus for b in OpportunityStatus]
ROLES = list(UserRole)


def test_transition_matrix_performance(benchmark: BenchmarkFixture):
    """Validity, reason and permission lookups over every status pair."""

    @benchmark
    def evaluate():
        allowed = 0
        for current, target in ALL_PAIRS:
            if status_rules.is_valid_transition(current, target):
                status_rules.requires_reason(current, target)
                for role in ROLES:
                    allowed += status_rules.can_perform_transition(
                        current, target, role, True
                    )
        return allowed


def test_available_actions_performance(benchmark: BenchmarkFixture):
    @benchmark
    def build_actions():
        return [
            status_rules.available_actions(status, role, is_owner)
            for status in OpportunityStatus
            for role in ROLES
            for is_owner in (True, False)
        ]


def test_application_rules_performance(benchmark: BenchmarkFixture):
    @benchmark
    def evaluate():
        targets = status_rules.application_targets_for(
            is_applicant=True, is_host=False, is_admin=False
        )
        return [
            status_rules.is_valid_application_transition(current, target)
            for current in ApplicationStatus
            for target in targets
        ]
