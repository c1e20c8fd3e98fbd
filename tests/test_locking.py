"""Tests for the optimistic lock guard and the conditional write."""

from functools import partial

import pytest

from conftest import TestSessionLocal
from record_lifecycle.db.models import ExampleModel
from record_lifecycle.db.store import RecordStore
from record_lifecycle.lifecycle.errors import LockVersionOutdated, ValidationFailed
from record_lifecycle.lifecycle.locking import OptimisticLockGuard


@pytest.fixture
def guard(translator):
    return OptimisticLockGuard(translator)


class TestSuppliedVersion:
    def test_reads_integer(self, guard):
        assert guard.supplied_version({"lock_version": "3"}) == 3

    @pytest.mark.parametrize("params", [{}, {"lock_version": None}, {"lock_version": ""}])
    def test_required(self, guard, params):
        with pytest.raises(ValidationFailed) as exc_info:
            guard.supplied_version(params)

        assert exc_info.value.status_code == 422
        assert exc_info.value.errors[0].message == "lock_version cannot be blank."

    def test_must_be_integer(self, guard):
        with pytest.raises(ValidationFailed) as exc_info:
            guard.supplied_version({"lock_version": "v2"})

        assert exc_info.value.errors[0].message == "lock_version must be an integer."


class TestApply:
    def test_successful_write_bumps_version(self, guard):
        assert guard.apply(lambda *args: 1, 1, 4, {"name": "x"}) == 5

    def test_zero_rows_is_a_conflict(self, guard):
        with pytest.raises(LockVersionOutdated) as exc_info:
            guard.apply(lambda *args: 0, 1, 4, {"name": "x"})

        assert exc_info.value.status_code == 409


class TestConditionalUpdate:
    def test_only_one_of_two_writers_wins(self, store, guard):
        record_id = store.insert(ExampleModel, {"name": "a", "lock_version": 1}).id
        first, second = TestSessionLocal(), TestSessionLocal()
        try:
            # Both writers read the row before either of them writes
            seen = [
                session.get(ExampleModel, record_id).lock_version
                for session in (first, second)
            ]
            assert seen == [1, 1]

            first_write = partial(RecordStore(first).conditional_update, ExampleModel)
            second_write = partial(RecordStore(second).conditional_update, ExampleModel)

            assert guard.apply(first_write, record_id, seen[0], {"name": "first"}) == 2
            with pytest.raises(LockVersionOutdated):
                guard.apply(second_write, record_id, seen[1], {"name": "second"})
        finally:
            first.close()
            second.close()

        reloaded = store.reload(ExampleModel, record_id)
        assert reloaded.name == "first"
        assert reloaded.lock_version == 2

    def test_rowcount_for_stale_version(self, store):
        record = store.insert(ExampleModel, {"name": "a"})

        assert store.conditional_update(ExampleModel, record.id, 7, {"name": "b"}) == 0
        assert store.conditional_update(ExampleModel, record.id, 1, {"name": "b"}) == 1
        assert store.conditional_update(ExampleModel, record.id, 1, {"name": "c"}) == 0

    def test_missing_record_matches_nothing(self, store):
        assert store.conditional_update(ExampleModel, 999, 1, {"name": "b"}) == 0
