"""
Normalized error value handed to callers and logs.

Instances are produced by :class:`~llm_gateway.base.errors.ErrorClassifier`
only; the message is a fixed, redacted, user-safe sentence.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .error_kind import ErrorKind


@dataclass(frozen=True)
class NormalizedError:
    """Classified failure.

    Attributes:
        kind: Taxonomy bucket.
        message: Short actionable message, free of upstream text and secrets.
        retry_after: Suggested wait in whole seconds, when retrying makes sense.
        details: Structured hints for local validation failures
            (``field``, ``value``, ``allowedRange``).
    """

    kind: ErrorKind
    message: str
    retry_after: Optional[int] = None
    details: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase wire shape used by ``error`` frames."""
        out: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.retry_after is not None:
            out["retryAfter"] = self.retry_after
        if self.details:
            out["details"] = dict(self.details)
        return out


__all__ = ["NormalizedError"]
