"""
Typed exceptions raised inside the gateway core.

Each type corresponds to one seam (registry lookup, parameter validation,
credential resolution, upstream transport, wire decoding). None of them is
shown to callers directly: the dispatcher hands them to the classifier,
which turns them into a :class:`NormalizedError`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple


def _fmt_bound(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_range(allowed_range: Optional[Tuple[float, float]]) -> str:
    """Render ``(lo, hi)`` as ``[lo, hi]`` with integral floats shortened."""
    if allowed_range is None:
        return "unsupported"
    lo, hi = allowed_range
    return f"[{_fmt_bound(lo)}, {_fmt_bound(hi)}]"


class GatewayError(Exception):
    """Base class for errors raised by the gateway core."""


@dataclass(eq=False)
class ParameterValidationError(GatewayError):
    """A generation parameter is out of range or unsupported.

    ``allowed_range`` is ``None`` when the provider does not accept the
    parameter at all.
    """

    field: str
    value: Any
    allowed_range: Optional[Tuple[float, float]]
    provider: str
    reason: str = "out_of_range"

    def __str__(self) -> str:
        if self.allowed_range is None:
            return f"{self.field} is not supported by provider '{self.provider}'"
        if self.reason in ("not_integer", "not_number"):
            expected = "an integer" if self.reason == "not_integer" else "a number"
            return (
                f"{self.field}={self.value!r} must be {expected} in the allowed range "
                f"{format_range(self.allowed_range)}"
            )
        return (
            f"{self.field}={self.value!r} is outside the allowed range "
            f"{format_range(self.allowed_range)}"
        )

    def details(self) -> dict:
        value = self.value
        if isinstance(value, float) and not math.isfinite(value):
            value = str(value)
        return {
            "field": self.field,
            "value": value,
            "allowedRange": list(self.allowed_range) if self.allowed_range is not None else None,
        }


@dataclass(eq=False)
class InvalidRequestError(GatewayError):
    """The request is unusable before any provider is involved (e.g. no messages)."""

    reason: str

    def __str__(self) -> str:
        return self.reason


@dataclass(eq=False)
class UnknownProviderError(GatewayError):
    provider: str

    def __str__(self) -> str:
        return f"Unknown provider '{self.provider}'"


@dataclass(eq=False)
class UnknownModelError(GatewayError):
    provider: str
    model_id: Optional[str]

    def __str__(self) -> str:
        if self.model_id is None:
            return f"Provider '{self.provider}' requires an explicit model id"
        return f"Model '{self.model_id}' is not offered by provider '{self.provider}'"


@dataclass(eq=False)
class UnresolvableCredentialError(GatewayError):
    """No usable credential or endpoint could be determined."""

    provider: str
    reason: str

    def __str__(self) -> str:
        return f"{self.provider}: {self.reason}"


@dataclass(eq=False)
class UpstreamHTTPError(GatewayError):
    """The provider answered with a non-2xx status.

    ``body`` is the raw response text; it is only ever read by the classifier.
    """

    status_code: int
    body: str = ""
    retry_after: Optional[str] = None
    provider: Optional[str] = None

    def __str__(self) -> str:
        return f"upstream HTTP {self.status_code}: {self.body}"


@dataclass(eq=False)
class UpstreamStreamError(GatewayError):
    """A well-formed error payload arrived inside the stream."""

    message: str
    code: Optional[str] = None
    status_code: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if self.code else self.message


@dataclass(eq=False)
class MalformedChunkError(GatewayError):
    detail: str

    def __str__(self) -> str:
        return f"malformed upstream chunk: {self.detail}"


@dataclass(eq=False)
class StreamIdleTimeout(GatewayError):
    """No upstream data arrived within the idle window."""

    idle_seconds: float

    def __str__(self) -> str:
        return f"upstream stream idle for more than {self.idle_seconds:g}s"


@dataclass(eq=False)
class StreamTruncatedError(GatewayError):
    """The upstream body ended before the provider's terminal record."""

    wire_format: str

    def __str__(self) -> str:
        return f"{self.wire_format} stream ended without a terminal record"


__all__ = [
    "format_range",
    "GatewayError",
    "ParameterValidationError",
    "InvalidRequestError",
    "UnknownProviderError",
    "UnknownModelError",
    "UnresolvableCredentialError",
    "UpstreamHTTPError",
    "UpstreamStreamError",
    "MalformedChunkError",
    "StreamIdleTimeout",
    "StreamTruncatedError",
]
