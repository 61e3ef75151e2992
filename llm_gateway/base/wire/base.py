"""Wire adapter contract shared by every provider family.

A wire adapter owns exactly two concerns for its family:

1. ``build_request``: translate the resolved target, model, message history
   and validated parameters into one POST (:class:`WireRequest`).
2. ``new_decoder``: return a fresh :class:`StreamDecoder` that turns framed
   upstream records into :class:`TextDelta` / :class:`Done` events.

Decoders raise :class:`MalformedChunkError` for records that are not the
expected JSON and :class:`UpstreamStreamError` for well-formed error
payloads; the dispatcher classifies both.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Literal, Optional, Protocol, Sequence, runtime_checkable

from ..credentials import ResolvedTarget
from ..errors import MalformedChunkError, StreamTruncatedError
from ..models import ChatMessage, Done, GenerationParameters, ModelSpec, StreamEvent, build_token_usage
from .framing import Record, iter_ndjson_records, iter_sse_records

Framing = Literal["sse", "ndjson"]


@dataclass(frozen=True)
class WireRequest:
    """One upstream POST. Headers may carry the credential and are kept out of ``repr``."""

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict, repr=False)
    framing: Framing = "sse"

    def records(self, lines: Iterable[str]) -> Iterator[Record]:
        """Frame decoded response lines according to :attr:`framing`."""
        if self.framing == "ndjson":
            return iter_ndjson_records(lines)
        return iter_sse_records(lines)


class StreamDecoder:
    """Stateful record decoder for one upstream response.

    Subclasses implement :meth:`feed`. Usage and finish reason are
    accumulated across records because several providers report them in a
    separate trailing chunk.
    """

    wire_format = "unknown"
    completes_at_eof = False

    def __init__(self) -> None:
        self.done = False
        self.finish_reason: Optional[str] = None
        self.prompt_tokens: Optional[int] = None
        self.completion_tokens: Optional[int] = None
        self.total_tokens: Optional[int] = None

    def feed(self, event: Optional[str], data: str) -> Iterator[StreamEvent]:  # pragma: no cover - abstract
        raise NotImplementedError

    def close(self) -> Optional[Done]:
        """Settle a body that ended without a terminal record.

        Families whose protocol has no terminator (``completes_at_eof``)
        finish with :class:`Done`; for the others the body was cut short and
        :class:`StreamTruncatedError` is raised.
        """
        if self.done:
            return None
        if not self.completes_at_eof:
            raise StreamTruncatedError(self.wire_format)
        return self._finish()

    # helpers -------------------------------------------------------------
    def _finish(self) -> Done:
        self.done = True
        usage = None
        if any(v is not None for v in (self.prompt_tokens, self.completion_tokens, self.total_tokens)):
            usage = build_token_usage(self.prompt_tokens, self.completion_tokens, self.total_tokens)
        return Done(finish_reason=self.finish_reason, usage=usage)

    @staticmethod
    def _load(data: str) -> Dict[str, Any]:
        try:
            payload = json.loads(data)
        except ValueError:
            raise MalformedChunkError(f"invalid JSON ({len(data)} bytes)") from None
        if not isinstance(payload, dict):
            raise MalformedChunkError(f"expected a JSON object, got {type(payload).__name__}")
        return payload


def as_int(value: Any) -> Optional[int]:
    """Return ``value`` when it is a non-negative integer, else ``None``."""
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def join_system(messages: Sequence[ChatMessage]) -> Optional[str]:
    """Concatenate system messages, for families that take them out of band."""
    parts = [m.content for m in messages if m.role == "system"]
    return "\n\n".join(parts) if parts else None


@runtime_checkable
class WireAdapter(Protocol):
    """Request encoder and stream decoder factory for one wire format."""

    wire_format: str

    def build_request(
        self,
        target: ResolvedTarget,
        model: ModelSpec,
        messages: Sequence[ChatMessage],
        params: GenerationParameters,
    ) -> WireRequest:
        """Build the single upstream POST for a dispatch."""
        ...

    def new_decoder(self) -> StreamDecoder:
        """Return a decoder for one response body."""
        ...


__all__ = [
    "Framing",
    "WireRequest",
    "StreamDecoder",
    "WireAdapter",
    "as_int",
    "join_system",
]
