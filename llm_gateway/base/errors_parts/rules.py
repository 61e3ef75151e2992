"""
Ordered classification rule table.

Rules are listed in kind priority order. Each rule carries lowercase
substring patterns (matched against the upstream message, error code and
error type) and the HTTP statuses it claims. The classifier walks the table
twice: patterns first, statuses second, first match wins in each pass.

Payment patterns deliberately include ``quota`` while the rate-limit rule
does not, so a 429 carrying ``insufficient_quota`` lands on billing rather
than on a generic rate limit.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from .error_kind import ErrorKind


@dataclass(frozen=True)
class ClassificationRule:
    kind: ErrorKind
    patterns: Tuple[str, ...]
    statuses: FrozenSet[int] = frozenset()

    def matches_text(self, haystack: str) -> bool:
        return any(p in haystack for p in self.patterns)

    def matches_status(self, status: int | None) -> bool:
        return status is not None and status in self.statuses


CLASSIFICATION_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        ErrorKind.RATE_LIMIT,
        (
            "rate limit",
            "rate_limit",
            "ratelimit",
            "rate-limit",
            "too many requests",
            "requests exceeded",
            "resource_exhausted",
        ),
        frozenset({429}),
    ),
    ClassificationRule(
        ErrorKind.AUTHENTICATION,
        (
            "api key",
            "api_key",
            "apikey",
            "x-api-key",
            "unauthorized",
            "unauthenticated",
            "authentication",
            "permission_denied",
            "permission denied",
            "forbidden",
        ),
        frozenset({401, 403}),
    ),
    ClassificationRule(
        ErrorKind.MODEL_NOT_FOUND,
        (
            "model not found",
            "model_not_found",
            "no such model",
            "invalid model",
            "unknown model",
            "model does not exist",
            "does not exist",
            "is not found for api version",
        ),
        frozenset({404}),
    ),
    ClassificationRule(
        ErrorKind.CONTEXT_LENGTH_EXCEEDED,
        (
            "context_length_exceeded",
            "context length",
            "context window",
            "maximum context",
            "too many tokens",
            "prompt is too long",
            "input is too long",
            "exceeds the maximum",
            "reduce the length",
        ),
        frozenset({413}),
    ),
    ClassificationRule(
        ErrorKind.CONTENT_POLICY_VIOLATION,
        (
            "content policy",
            "content_policy",
            "content_filter",
            "content management policy",
            "safety",
            "moderation",
            "policy violation",
            "flagged",
        ),
    ),
    ClassificationRule(
        ErrorKind.INVALID_REQUEST,
        (
            "invalid_request",
            "invalid request",
            "invalid_argument",
            "validation",
            "malformed",
            "bad request",
            "invalid",
        ),
        frozenset({400, 422}),
    ),
    ClassificationRule(
        ErrorKind.NETWORK_ERROR,
        (
            "network",
            "connection",
            "econnrefused",
            "econnreset",
            "etimedout",
            "getaddrinfo",
            "name resolution",
            "dns",
        ),
        frozenset({408}),
    ),
    ClassificationRule(
        ErrorKind.SERVICE_UNAVAILABLE,
        (
            "service unavailable",
            "temporarily unavailable",
            "unavailable",
            "overloaded",
            "maintenance",
            "bad gateway",
            "internal server error",
        ),
        frozenset({500, 502, 503, 504, 529}),
    ),
    ClassificationRule(
        ErrorKind.PAYMENT_REQUIRED,
        (
            "payment",
            "billing",
            "quota",
            "insufficient",
            "credit balance",
        ),
        frozenset({402}),
    ),
)


USER_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT: "Rate limit exceeded. Please wait a moment and try again.",
    ErrorKind.AUTHENTICATION: "Invalid API key. Please check your provider credentials.",
    ErrorKind.MODEL_NOT_FOUND: "The specified model is not available or you do not have access to it.",
    ErrorKind.CONTEXT_LENGTH_EXCEEDED: (
        "The conversation is too long. Please start a new chat or reduce the message length."
    ),
    ErrorKind.CONTENT_POLICY_VIOLATION: (
        "The content was flagged by the safety filter. Please modify your message and try again."
    ),
    ErrorKind.INVALID_REQUEST: "Invalid request format. Please check your input and try again.",
    ErrorKind.NETWORK_ERROR: "Network error. Please check your connection and try again.",
    ErrorKind.SERVICE_UNAVAILABLE: "The service is temporarily unavailable. Please try again later.",
    ErrorKind.PAYMENT_REQUIRED: "Payment required or quota exceeded. Please check your billing details.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}


__all__ = ["ClassificationRule", "CLASSIFICATION_RULES", "USER_MESSAGES"]
