"""Per-dispatch streaming metrics.

Isolated within the streaming package to keep the dispatcher loop small.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..models import build_token_usage


@dataclass
class StreamMetrics:
    """Collected metrics for a single dispatch.

    Attributes:
        emitted: Number of text deltas yielded to the caller.
        time_to_first_token_ms: Latency from dispatch start to the first delta.
        total_duration_ms: Latency from dispatch start to the terminal state.
        tokens: Canonical usage mapping (``prompt``, ``completion``, ``total``)
            when the provider reported one.
    """

    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    tokens: Optional[Dict[str, Any]] = None


def apply_token_usage(metrics: StreamMetrics, usage: Optional[Mapping[str, Optional[int]]]) -> None:
    """Copy a canonical usage mapping onto ``metrics`` (no-op for ``None``)."""
    if not usage:
        return
    metrics.prompt_tokens = usage.get("prompt")
    metrics.completion_tokens = usage.get("completion")
    metrics.tokens = build_token_usage(metrics.prompt_tokens, metrics.completion_tokens, usage.get("total"))
    metrics.total_tokens = metrics.tokens["total"]


__all__ = ["StreamMetrics", "apply_token_usage"]
