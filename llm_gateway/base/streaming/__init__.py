"""Streaming package.

Exposes the dispatcher state machine, its controller facade, and the
per-dispatch metrics under a single namespace.
"""

from .dispatch_state import DispatchState, TERMINAL_STATES, can_transition
from .dispatcher import StreamingDispatcher
from .finalize import finalize_dispatch
from .metrics import StreamMetrics, apply_token_usage
from .stream_controller import StreamController

__all__ = [
    "DispatchState",
    "TERMINAL_STATES",
    "can_transition",
    "StreamingDispatcher",
    "StreamController",
    "StreamMetrics",
    "apply_token_usage",
    "finalize_dispatch",
]
