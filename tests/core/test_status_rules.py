"""Tests for the opportunity and application status rule tables."""

import itertools
import pytest

from app.core import status_rules
from app.models.enums import ApplicationStatus, OpportunityStatus, UserRole

OS = OpportunityStatus
AS = ApplicationStatus

EXPECTED_TRANSITIONS = {
    (OS.DRAFT, OS.PENDING),
    (OS.DRAFT, OS.DELETED),
    (OS.PENDING, OS.DRAFT),
    (OS.PENDING, OS.ACTIVE),
    (OS.PENDING, OS.REJECTED),
    (OS.ACTIVE, OS.PAUSED),
    (OS.ACTIVE, OS.ADMIN_PAUSED),
    (OS.ACTIVE, OS.FILLED),
    (OS.ACTIVE, OS.EXPIRED),
    (OS.ACTIVE, OS.ARCHIVED),
    (OS.PAUSED, OS.ACTIVE),
    (OS.PAUSED, OS.ARCHIVED),
    (OS.PAUSED, OS.DELETED),
    (OS.EXPIRED, OS.DRAFT),
    (OS.EXPIRED, OS.ACTIVE),
    (OS.EXPIRED, OS.PAUSED),
    (OS.EXPIRED, OS.ARCHIVED),
    (OS.FILLED, OS.ACTIVE),
    (OS.FILLED, OS.PAUSED),
    (OS.FILLED, OS.ARCHIVED),
    (OS.REJECTED, OS.PENDING),
    (OS.REJECTED, OS.DELETED),
    (OS.ADMIN_PAUSED, OS.PENDING),
    (OS.ADMIN_PAUSED, OS.REJECTED),
    (OS.ARCHIVED, OS.DELETED),
}

EXPECTED_REASON_REQUIRED = {
    (OS.PENDING, OS.REJECTED),
    (OS.ACTIVE, OS.PAUSED),
    (OS.ACTIVE, OS.ADMIN_PAUSED),
    (OS.PAUSED, OS.ACTIVE),
    (OS.ADMIN_PAUSED, OS.PENDING),
    (OS.ADMIN_PAUSED, OS.REJECTED),
}


class TestOpportunityTransitions:
    """Adjacency and reason tables."""

    @pytest.mark.parametrize(
        "current,target", list(itertools.product(OpportunityStatus, repeat=2))
    )
    def test_every_pair_matches_table(self, current, target):
        """Listed pairs are valid, every other pair (self-loops included) is not."""
        expected = (current, target) in EXPECTED_TRANSITIONS
        assert status_rules.is_valid_transition(current, target) is expected

    @pytest.mark.parametrize("current,target", sorted(EXPECTED_TRANSITIONS))
    def test_reason_flag_for_listed_pairs(self, current, target):
        expected = (current, target) in EXPECTED_REASON_REQUIRED
        assert status_rules.requires_reason(current, target) is expected

    def test_reason_pairs_are_all_legal(self):
        assert EXPECTED_REASON_REQUIRED <= EXPECTED_TRANSITIONS

    def test_deleted_is_terminal(self):
        assert status_rules.get_next_allowed_states(OS.DELETED) == []

    def test_next_allowed_states_in_enum_order(self):
        assert status_rules.get_next_allowed_states(OS.ACTIVE) == [
            OS.PAUSED,
            OS.ADMIN_PAUSED,
            OS.EXPIRED,
            OS.FILLED,
            OS.ARCHIVED,
        ]

    def test_every_status_has_labels_and_actions(self):
        for status in OpportunityStatus:
            assert status in status_rules.STATUS_LABELS
            assert status in status_rules.STATUS_DESCRIPTIONS
            assert status in status_rules.STATUS_ACTIONS
            assert status in status_rules.EDITABILITY

    def test_actions_only_target_legal_successors(self):
        """No button may offer a transition the validator would reject."""
        for status, actions in status_rules.STATUS_ACTIONS.items():
            for action in actions:
                if action.target_status is not None:
                    assert status_rules.is_valid_transition(
                        status, action.target_status
                    )


class TestTransitionPermissions:
    """Role and ownership checks."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (OS.PENDING, OS.ACTIVE),
            (OS.PENDING, OS.REJECTED),
            (OS.ACTIVE, OS.ADMIN_PAUSED),
            (OS.ACTIVE, OS.FILLED),
            (OS.ACTIVE, OS.EXPIRED),
            (OS.ADMIN_PAUSED, OS.REJECTED),
        ],
    )
    def test_admin_only_pairs(self, current, target):
        assert not status_rules.can_perform_transition(
            current, target, UserRole.HOST, is_owner=True
        )
        assert status_rules.can_perform_transition(
            current, target, UserRole.ADMIN, is_owner=False
        )
        assert status_rules.can_perform_transition(
            current, target, UserRole.SUPER_ADMIN, is_owner=False
        )

    def test_pause_is_owner_host_only(self):
        assert status_rules.can_perform_transition(
            OS.ACTIVE, OS.PAUSED, UserRole.HOST, is_owner=True
        )
        assert not status_rules.can_perform_transition(
            OS.ACTIVE, OS.PAUSED, UserRole.HOST, is_owner=False
        )
        assert not status_rules.can_perform_transition(
            OS.ACTIVE, OS.PAUSED, UserRole.ADMIN, is_owner=False
        )

    def test_default_requires_owner_for_hosts(self):
        assert status_rules.can_perform_transition(
            OS.DRAFT, OS.PENDING, UserRole.HOST, is_owner=True
        )
        assert not status_rules.can_perform_transition(
            OS.DRAFT, OS.PENDING, UserRole.HOST, is_owner=False
        )

    def test_default_lets_admins_act_on_any_listing(self):
        assert status_rules.can_perform_transition(
            OS.REJECTED, OS.PENDING, UserRole.ADMIN, is_owner=False
        )

    def test_plain_users_are_denied(self):
        for current, target in EXPECTED_TRANSITIONS:
            assert not status_rules.can_perform_transition(
                current, target, UserRole.USER, is_owner=True
            )


class TestEditabilityAndActions:
    def test_editability(self):
        assert status_rules.can_edit(OS.DRAFT) is True
        assert status_rules.can_edit(OS.REJECTED) is True
        assert status_rules.can_edit(OS.PENDING) is False
        assert status_rules.can_edit(OS.DELETED) is False
        assert status_rules.can_edit(OS.ACTIVE) == "limited"

    def test_can_save(self):
        assert status_rules.can_save(OS.DRAFT)
        assert not status_rules.can_save(OS.PENDING)
        assert not status_rules.can_save(OS.DELETED)

    def test_primary_and_secondary_actions(self):
        primary = status_rules.get_primary_action(OS.DRAFT)
        assert primary is not None and primary.target_status is None
        secondary = status_rules.get_secondary_actions(OS.DRAFT)
        assert [a.target_status for a in secondary] == [OS.PENDING]
        assert status_rules.get_primary_action(OS.DELETED) is None

    def test_reason_config_follows_action(self):
        config = status_rules.get_reason_config(OS.PENDING, OS.REJECTED)
        assert config["needs_reason"] is True
        assert config["reason_title"]
        assert status_rules.get_reason_config(OS.DRAFT, OS.PENDING)[
            "needs_reason"
        ] is False

    def test_confirmation(self):
        assert status_rules.needs_confirmation(OS.PENDING, OS.DRAFT)
        assert status_rules.get_confirmation_message(OS.PENDING, OS.DRAFT)
        assert not status_rules.needs_confirmation(OS.DRAFT, OS.PENDING)
        assert status_rules.get_confirmation_message(OS.DRAFT, OS.PENDING)

    def test_host_does_not_see_admin_actions(self):
        targets = {
            a.target_status
            for a in status_rules.available_actions(OS.ACTIVE, UserRole.HOST)
        }
        assert OS.ADMIN_PAUSED not in targets
        assert OS.FILLED not in targets
        assert OS.PAUSED in targets

    def test_admin_does_not_see_host_only_actions(self):
        targets = {
            a.target_status
            for a in status_rules.available_actions(
                OS.ACTIVE, UserRole.ADMIN, is_owner=False
            )
        }
        assert OS.PAUSED not in targets
        assert OS.ADMIN_PAUSED in targets

    def test_volunteer_gets_no_actions(self):
        assert status_rules.available_actions(
            OS.DRAFT, UserRole.USER, is_owner=False
        ) == []

    def test_status_update_message(self):
        for status in OpportunityStatus:
            assert status_rules.get_status_update_message(status)


class TestApplicationRules:
    def test_terminal_states(self):
        assert status_rules.APPLICATION_TERMINAL_STATES == {
            AS.CANCELLED,
            AS.COMPLETED,
            AS.WITHDRAWN,
        }

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            (AS.DRAFT, AS.PENDING, True),
            (AS.PENDING, AS.ACCEPTED, True),
            (AS.ACCEPTED, AS.CONFIRMED, True),
            (AS.CONFIRMED, AS.COMPLETED, True),
            (AS.REJECTED, AS.REVIEWING, True),
            (AS.PENDING, AS.COMPLETED, False),
            (AS.COMPLETED, AS.PENDING, False),
            (AS.REJECTED, AS.ACCEPTED, False),
            (AS.WITHDRAWN, AS.PENDING, False),
        ],
    )
    def test_application_transitions(self, current, target, expected):
        assert status_rules.is_valid_application_transition(current, target) is expected

    def test_role_targets(self):
        applicant = status_rules.application_targets_for(
            is_applicant=True, is_host=False, is_admin=False
        )
        host = status_rules.application_targets_for(
            is_applicant=False, is_host=True, is_admin=False
        )
        admin = status_rules.application_targets_for(
            is_applicant=False, is_host=False, is_admin=True
        )
        stranger = status_rules.application_targets_for(
            is_applicant=False, is_host=False, is_admin=False
        )
        assert applicant == {AS.PENDING, AS.CONFIRMED, AS.WITHDRAWN}
        assert host == {
            AS.REVIEWING,
            AS.ACCEPTED,
            AS.REJECTED,
            AS.CANCELLED,
            AS.COMPLETED,
        }
        assert admin == set(ApplicationStatus)
        assert stranger == set()
