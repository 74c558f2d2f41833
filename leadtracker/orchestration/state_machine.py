"""Canonical state transition helpers for lead lifecycles."""

from __future__ import annotations

from leadtracker.core.enums import LifecycleState


class InvalidTransitionError(ValueError):
    """Raised when a disallowed state transition is attempted."""


class StateMachine:
    """Simple in-memory state machine over string or enum states."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {current} -> {target}")


# Permanent removal is terminal; only soft deletion can be undone.
LEAD_LIFECYCLE = StateMachine(
    {
        LifecycleState.ACTIVE: {LifecycleState.SOFT_DELETED, LifecycleState.PERMANENTLY_REMOVED},
        LifecycleState.SOFT_DELETED: {LifecycleState.ACTIVE, LifecycleState.PERMANENTLY_REMOVED},
        LifecycleState.PERMANENTLY_REMOVED: set(),
    }
)


def lifecycle_state(is_deleted: bool) -> LifecycleState:
    """State of a lead still present in the collection."""
    return LifecycleState.SOFT_DELETED if is_deleted else LifecycleState.ACTIVE
