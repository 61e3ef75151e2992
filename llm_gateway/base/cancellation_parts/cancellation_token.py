"""Cooperative cancellation token implementation.

Besides polling (``cancelled`` / ``raise_if_cancelled``), the token runs
registered callbacks at cancel time, on the cancelling thread. The
dispatcher registers one that aborts the upstream response, so a read
blocked in another thread returns as soon as the token is cancelled.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, List

from ..logging import get_logger, log_event
from .cancelled_error import CancelledError
from .state import State

Callback = Callable[[], None]

_logger = get_logger("gateway.cancellation")


def _run(callback: Callback) -> None:
    try:
        callback()
    except Exception as exc:  # noqa: BLE001 - one failing release must not block the others
        log_event(
            _logger,
            "cancellation.callback_failed",
            level=logging.WARNING,
            failure_class=exc.__class__.__name__,
        )


class CancellationToken:
    """A thread-safe cooperative cancellation token."""

    def __init__(self) -> None:
        self._state = State()
        self._lock = Lock()
        self._callbacks: List[Callback] = []

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation and run the registered callbacks once."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            _run(callback)

    def on_cancel(self, callback: Callback) -> Callback:
        """Register ``callback`` to run at cancel time.

        Runs immediately if the token is already cancelled. Returns the
        callback so it can later be passed to :meth:`remove_callback`.
        """
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)
                return callback
        _run(callback)
        return callback

    def remove_callback(self, callback: Callback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
