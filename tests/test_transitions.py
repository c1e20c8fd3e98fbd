"""Unit tests for the status transition engine."""

import pytest

from record_lifecycle.lifecycle.actor import ActorContext
from record_lifecycle.lifecycle.enums import DISALLOWED_UPDATE_STATUSES, Status
from record_lifecycle.lifecycle.transitions import (
    DEFAULT_TRANSITIONS,
    StatusTransitionEngine,
    TransitionTable,
)


@pytest.fixture
def engine(translator):
    return StatusTransitionEngine(DEFAULT_TRANSITIONS, translator)


class TestDefaultTable:
    @pytest.mark.parametrize(
        "old,new",
        [
            (Status.DRAFT, Status.ACTIVE),
            (Status.DRAFT, Status.DELETED),
            (Status.ACTIVE, Status.COMPLETED),
            (Status.INACTIVE, Status.DRAFT),
            (Status.MAINTENANCE, Status.INACTIVE),
            (Status.APPROVED, Status.REJECTED),
        ],
    )
    def test_allowed_pairs(self, engine, old, new):
        assert engine.can_transition(old, new, is_superadmin=False)

    @pytest.mark.parametrize(
        "old,new",
        [
            (Status.DRAFT, Status.COMPLETED),
            (Status.ACTIVE, Status.DRAFT),
            (Status.INACTIVE, Status.APPROVED),
        ],
    )
    def test_pairs_missing_from_row(self, engine, old, new):
        reason = engine.rejection(old, new, is_superadmin=True)
        assert reason == f"Cannot change status from {old.label} to {new.label}."

    def test_every_allowed_pair_passes_for_superadmin(self, engine):
        for old, new in DEFAULT_TRANSITIONS.pairs():
            assert engine.can_transition(old, new, is_superadmin=True), (old, new)

    def test_pairs_outside_table_are_rejected(self, engine):
        allowed = set(DEFAULT_TRANSITIONS.pairs())
        for old in Status:
            for new in Status:
                if old == new or (old, new) in allowed:
                    continue
                assert not engine.can_transition(old, new, is_superadmin=True), (old, new)


class TestLockedStatuses:
    @pytest.mark.parametrize("old", [Status.COMPLETED, Status.REJECTED])
    def test_terminal_statuses_have_no_way_out(self, engine, old):
        assert engine.rejection(old, Status.ACTIVE, is_superadmin=True) is not None

    def test_completed_to_active_is_rejected(self, engine):
        reason = engine.rejection(Status.COMPLETED, Status.ACTIVE, is_superadmin=False)
        assert reason == "Status transition is not allowed."

    def test_disallowed_row_reports_locked_status(self, translator):
        table = TransitionTable({Status.COMPLETED: [Status.ACTIVE]})
        engine = StatusTransitionEngine(table, translator)

        reason = engine.rejection(Status.COMPLETED, Status.ACTIVE, is_superadmin=True)
        assert reason == "Cannot change status because data already Completed."


class TestUndelete:
    def test_regular_actor_cannot_leave_deleted(self, engine):
        reason = engine.rejection(Status.DELETED, Status.DRAFT, is_superadmin=False)
        assert reason.startswith("You do not have permission to change the status from Deleted")

    @pytest.mark.parametrize("new", [Status.DRAFT, Status.INACTIVE])
    def test_superadmin_can_undelete(self, engine, new):
        assert Status.DELETED in DISALLOWED_UPDATE_STATUSES
        assert engine.can_transition(Status.DELETED, new, is_superadmin=True)

    def test_superadmin_still_limited_to_row(self, engine):
        assert not engine.can_transition(Status.DELETED, Status.ACTIVE, is_superadmin=True)


class TestCheck:
    def test_no_check_on_create(self, engine, user):
        assert engine.check(None, Status.ACTIVE, user) is None

    def test_same_status_is_not_a_transition(self, engine, user):
        assert engine.check(Status.COMPLETED, Status.COMPLETED, user) is None

    def test_uses_actor_capability(self, engine, user, superadmin):
        assert engine.check(Status.DELETED, Status.DRAFT, user) is not None
        assert engine.check(Status.DELETED, Status.DRAFT, superadmin) is None

    def test_custom_table(self, translator):
        table = TransitionTable({Status.DRAFT: [Status.APPROVED]}, disallowed=[])
        engine = StatusTransitionEngine(table, translator)
        actor = ActorContext()

        assert engine.check(Status.DRAFT, Status.APPROVED, actor) is None
        assert engine.check(Status.DRAFT, Status.ACTIVE, actor) is not None
        assert engine.check(Status.ACTIVE, Status.DRAFT, actor) == "Status transition is not allowed."
