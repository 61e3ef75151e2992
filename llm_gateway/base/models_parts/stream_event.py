"""
Uniform stream events observed by callers.

Whatever the upstream wire format, a dispatch yields only these three
shapes. ``to_frame`` renders the NDJSON frame sent over HTTP.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from ..errors_parts.normalized_error import NormalizedError

_USAGE_FRAME_KEYS = (
    ("prompt", "promptTokens"),
    ("completion", "completionTokens"),
    ("total", "totalTokens"),
)


@dataclass(frozen=True)
class TextDelta:
    text: str

    def to_frame(self) -> Dict[str, Any]:
        return {"type": "delta", "text": self.text}


@dataclass(frozen=True)
class Done:
    """Terminal success event.

    Attributes:
        finish_reason: Upstream stop reason (``stop``, ``length``, ...), when reported.
        usage: Canonical token usage mapping (``prompt``, ``completion``,
            ``total``), when reported.
    """

    finish_reason: Optional[str] = None
    usage: Optional[Mapping[str, Optional[int]]] = None

    def to_frame(self) -> Dict[str, Any]:
        frame: Dict[str, Any] = {"type": "done"}
        if self.finish_reason is not None:
            frame["finishReason"] = self.finish_reason
        if self.usage:
            frame["usage"] = {
                out: self.usage.get(key) for key, out in _USAGE_FRAME_KEYS if self.usage.get(key) is not None
            }
        return frame


@dataclass(frozen=True)
class ErrorEvent:
    """Terminal failure event; always the last event of a dispatch."""

    error: NormalizedError

    def to_frame(self) -> Dict[str, Any]:
        frame: Dict[str, Any] = {"type": "error"}
        frame.update(self.error.to_dict())
        return frame


def build_token_usage(
    prompt: Optional[int], completion: Optional[int], total: Optional[int] = None
) -> Dict[str, Optional[int]]:
    """Return a canonical token usage mapping."""
    derived_total = total
    if derived_total is None and (prompt is not None and completion is not None):
        derived_total = prompt + completion
    return {"prompt": prompt, "completion": completion, "total": derived_total}


StreamEvent = Union[TextDelta, Done, ErrorEvent]


__all__ = ["TextDelta", "Done", "ErrorEvent", "StreamEvent", "build_token_usage"]
