"""Finalize helper: one consolidated log line per dispatch outcome."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..errors import NormalizedError
from ..logging import LogContext, normalized_log_event
from .dispatch_state import DispatchState
from .metrics import StreamMetrics

_EVENT_NAMES = {
    DispatchState.COMPLETED: "stream.end",
    DispatchState.FAILED: "stream.error",
    DispatchState.CANCELLED: "stream.cancelled",
}


def finalize_dispatch(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    state: DispatchState,
    metrics: StreamMetrics,
    error: Optional[NormalizedError] = None,
    cancel_reason: Optional[str] = None,
    secrets: Iterable[str] = (),
) -> None:
    """Emit the terminal ``stream.*`` event with the collected metrics."""
    normalized_log_event(
        logger,
        _EVENT_NAMES.get(state, "stream.end"),
        ctx,
        phase="finalize",
        attempt=None,
        emitted=metrics.emitted > 0,
        tokens=metrics.tokens,
        error_code=error.kind.value if error is not None else None,
        level=logging.WARNING if state is DispatchState.FAILED else logging.INFO,
        secrets=secrets,
        emitted_count=metrics.emitted,
        time_to_first_token_ms=metrics.time_to_first_token_ms,
        total_duration_ms=metrics.total_duration_ms,
        retry_after=error.retry_after if error is not None else None,
        cancel_reason=cancel_reason,
    )


__all__ = ["finalize_dispatch"]
