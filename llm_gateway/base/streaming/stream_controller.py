"""StreamController: cancellable iterator facade over one dispatch.

The controller owns the :class:`CancellationToken` shared with its
dispatcher, so any thread holding the controller can stop the stream;
the dispatcher's token callback closes the upstream response at once.
"""
from __future__ import annotations

from typing import Iterator, Optional, Sequence

from ..cancellation import CancellationToken
from ..models import ChatMessage, Done, ErrorEvent, GenerationParameters, ModelConfiguration, StreamEvent
from .dispatch_state import DispatchState
from .dispatcher import StreamingDispatcher


class StreamController:
    """High-level cancellable iterator wrapping :class:`StreamingDispatcher`.

    Responsibilities:
      * Iterate over stream events.
      * Expose ``cancel(reason)`` for cooperative cancellation.
      * Track the terminal event for post-hoc inspection.
    """

    def __init__(
        self,
        dispatcher: StreamingDispatcher,
        config: ModelConfiguration,
        messages: Sequence[ChatMessage],
        params: Optional[GenerationParameters] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._events = dispatcher.dispatch(config, messages, params)
        self._terminal_event: Optional[StreamEvent] = None

    @property
    def token(self) -> CancellationToken:
        return self._dispatcher.token

    def __iter__(self) -> Iterator[StreamEvent]:
        for evt in self._events:
            if isinstance(evt, (Done, ErrorEvent)):
                self._terminal_event = evt
            yield evt

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation; safe to call repeatedly or after completion."""
        self._dispatcher.token.cancel(reason or "cancelled by caller")

    def close(self) -> None:
        """Close the event generator, releasing the upstream connection."""
        self._events.close()

    @property
    def state(self) -> DispatchState:
        return self._dispatcher.state

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the dispatch reached a terminal state."""
        return self._dispatcher.state.terminal

    @property
    def terminal_event(self) -> Optional[StreamEvent]:  # noqa: D401 - short property
        """Return the captured terminal event, if one was yielded."""
        return self._terminal_event

    @property
    def error(self):
        """The :class:`NormalizedError` of a failed dispatch, else ``None``."""
        return self._dispatcher.failure


__all__ = ["StreamController"]
