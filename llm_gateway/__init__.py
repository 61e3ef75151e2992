"""llm_gateway package

Streaming gateway in front of several chat-completion providers.

Purpose:
    Accept a model configuration and a message history, validate the
    provider-specific parameters, resolve endpoint and credential, and relay
    the provider's token stream as uniform ``delta`` / ``done`` / ``error``
    events. Upstream failures are normalized into a fixed taxonomy with
    credentials redacted.

Public API (re-exported):
    - Version: ``__version__``
    - Dispatch: :class:`StreamingDispatcher`, :class:`StreamController`,
      :func:`stream_chat`
    - Records: :class:`ModelConfiguration`, :class:`ChatMessage`,
      :class:`GenerationParameters`, stream events
    - Errors: :class:`ErrorKind`, :class:`NormalizedError`,
      :func:`classify_error`

The HTTP service lives in ``llm_gateway.service`` (FastAPI) and is not
imported here.
"""

from typing import Iterator, Optional, Sequence

from .base import (
    CancellationToken,
    ChatMessage,
    Done,
    ErrorEvent,
    ErrorKind,
    GenerationParameters,
    ModelConfiguration,
    NormalizedError,
    ProviderRegistry,
    StreamController,
    StreamEvent,
    StreamingDispatcher,
    TextDelta,
    classify_error,
    get_default_registry,
)

__version__ = "0.1.0"


def stream_chat(
    config: ModelConfiguration,
    messages: Sequence[ChatMessage],
    params: Optional[GenerationParameters] = None,
    *,
    token: Optional[CancellationToken] = None,
) -> Iterator[StreamEvent]:
    """Dispatch one chat request with default collaborators.

    Equivalent to ``StreamingDispatcher(token=token).dispatch(...)``.
    """
    return StreamingDispatcher(token=token).dispatch(config, messages, params)


__all__ = [
    "__version__",
    "stream_chat",
    "CancellationToken",
    "ChatMessage",
    "Done",
    "ErrorEvent",
    "ErrorKind",
    "GenerationParameters",
    "ModelConfiguration",
    "NormalizedError",
    "ProviderRegistry",
    "StreamController",
    "StreamEvent",
    "StreamingDispatcher",
    "TextDelta",
    "classify_error",
    "get_default_registry",
]
