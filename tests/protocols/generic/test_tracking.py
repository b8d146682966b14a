# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for DirtyTracker and ActionLog."""

import pytest

from pinnable.protocols.generic.tracking import Action, ActionLog, DirtyTracker


@pytest.fixture
def transitions():
    return []


@pytest.fixture
def tracker(transitions):
    return DirtyTracker(lambda new, old: transitions.append((new, old)))


class TestDirtyTracker:
    def test_starts_clean(self, tracker):
        assert not tracker.dirty
        assert tracker.count == 0

    def test_notifies_only_on_boundary(self, tracker, transitions):
        tracker.update(1)
        tracker.update(1)
        tracker.update(-1)
        tracker.update(-1)
        assert transitions == [(True, False), (False, True)]

    def test_negative_count_is_dirty(self, tracker, transitions):
        tracker.update(-1)
        assert tracker.dirty
        assert transitions == [(True, False)]

    def test_zero_delta_is_ignored(self, tracker, transitions):
        tracker.update(0)
        assert transitions == []

    def test_zero(self, tracker, transitions):
        tracker.update(3)
        tracker.zero()
        assert tracker.count == 0
        assert transitions == [(True, False), (False, True)]

    def test_hold_reports_net_transition(self, tracker, transitions):
        with tracker.hold():
            tracker.update(1)
            tracker.update(-1)
        assert transitions == []
        with tracker.hold():
            tracker.update(2)
            tracker.update(-1)
        assert transitions == [(True, False)]

    def test_nested_hold_reports_once(self, tracker, transitions):
        with tracker.hold():
            with tracker.hold():
                tracker.update(1)
            assert transitions == []
        assert transitions == [(True, False)]

    def test_hold_reports_on_error(self, tracker, transitions):
        with pytest.raises(RuntimeError):
            with tracker.hold():
                tracker.update(1)
                raise RuntimeError("boom")
        assert transitions == [(True, False)]


class TestActionLog:
    def test_record_and_pop(self):
        log = ActionLog()
        log.record("remove", 0)
        log.record("move", 2, 1)
        assert len(log) == 2
        assert log.pop() == Action("move", (2, 1))
        assert log.pop() == Action("remove", (0,))
        assert not log

    def test_suppress(self):
        log = ActionLog()
        with log.suppress():
            assert log.suppressed
            log.record("remove", 0)
        assert not log.suppressed
        assert len(log) == 0

    def test_suppress_released_on_error(self):
        log = ActionLog()
        with pytest.raises(ValueError):
            with log.suppress():
                raise ValueError("replay failed")
        log.record("remove", 0)
        assert len(log) == 1

    def test_iteration_is_a_snapshot(self):
        log = ActionLog()
        log.record("remove", 0)
        for _ in log:
            log.record("remove", 1)
        assert len(log) == 2

    def test_clear(self):
        log = ActionLog()
        log.record("remove", 0)
        log.clear()
        assert len(log) == 0

    def test_action_str(self):
        assert str(Action("insert", (object(), 3))) == "insert(object, 3)"
