"""
Normalized error kinds (taxonomy).

Values are lowercase kebab-case and form the stable public contract carried
in ``error`` stream frames and log events.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Fixed-cardinality failure categories, in classification priority order."""

    RATE_LIMIT = "rate-limit"
    AUTHENTICATION = "authentication"
    MODEL_NOT_FOUND = "model-not-found"
    CONTEXT_LENGTH_EXCEEDED = "context-length-exceeded"
    CONTENT_POLICY_VIOLATION = "content-policy-violation"
    INVALID_REQUEST = "invalid-request"
    NETWORK_ERROR = "network-error"
    SERVICE_UNAVAILABLE = "service-unavailable"
    PAYMENT_REQUIRED = "payment-required"
    UNKNOWN = "unknown"


__all__ = ["ErrorKind"]
