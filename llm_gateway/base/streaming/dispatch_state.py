"""Dispatch lifecycle states and the legal transitions between them."""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class DispatchState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[DispatchState] = frozenset(
    {DispatchState.COMPLETED, DispatchState.FAILED, DispatchState.CANCELLED}
)

_ANY_ACTIVE = frozenset({DispatchState.FAILED, DispatchState.CANCELLED})

# FAILED and CANCELLED are reachable from every non-terminal state.
TRANSITIONS: Dict[DispatchState, FrozenSet[DispatchState]] = {
    DispatchState.IDLE: frozenset({DispatchState.VALIDATING}) | _ANY_ACTIVE,
    DispatchState.VALIDATING: frozenset({DispatchState.RESOLVING}) | _ANY_ACTIVE,
    DispatchState.RESOLVING: frozenset({DispatchState.CONNECTING}) | _ANY_ACTIVE,
    DispatchState.CONNECTING: frozenset({DispatchState.STREAMING}) | _ANY_ACTIVE,
    DispatchState.STREAMING: frozenset({DispatchState.COMPLETED}) | _ANY_ACTIVE,
    DispatchState.COMPLETED: frozenset(),
    DispatchState.FAILED: frozenset(),
    DispatchState.CANCELLED: frozenset(),
}


def can_transition(current: DispatchState, target: DispatchState) -> bool:
    return target in TRANSITIONS[current]


__all__ = ["DispatchState", "TERMINAL_STATES", "TRANSITIONS", "can_transition"]
