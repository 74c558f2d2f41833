from __future__ import annotations

import pytest

from leadtracker.core.enums import LifecycleState
from leadtracker.orchestration.state_machine import (
    LEAD_LIFECYCLE,
    InvalidTransitionError,
    StateMachine,
    lifecycle_state,
)


def test_state_machine_allows_valid_transition():
    sm = StateMachine({"new": {"running"}, "running": {"completed"}})
    assert sm.can_transition("new", "running") is True
    sm.assert_transition("new", "running")


def test_state_machine_rejects_invalid_transition():
    sm = StateMachine({"new": {"running"}})
    with pytest.raises(InvalidTransitionError):
        sm.assert_transition("new", "completed")


def test_lead_lifecycle_allows_restore_but_not_from_removed():
    assert LEAD_LIFECYCLE.can_transition(LifecycleState.SOFT_DELETED, LifecycleState.ACTIVE)
    assert LEAD_LIFECYCLE.can_transition(LifecycleState.ACTIVE, LifecycleState.PERMANENTLY_REMOVED)
    with pytest.raises(InvalidTransitionError):
        LEAD_LIFECYCLE.assert_transition(LifecycleState.PERMANENTLY_REMOVED, LifecycleState.ACTIVE)


def test_lifecycle_state_from_flag():
    assert lifecycle_state(False) == LifecycleState.ACTIVE
    assert lifecycle_state(True) == LifecycleState.SOFT_DELETED
