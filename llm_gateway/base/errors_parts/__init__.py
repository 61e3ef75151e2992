"""Errors parts package.

Prefer importing from ``llm_gateway.base.errors`` for the stable surface.
"""

from .error_kind import ErrorKind
from .normalized_error import NormalizedError
from .exceptions import (
    GatewayError,
    InvalidRequestError,
    MalformedChunkError,
    ParameterValidationError,
    StreamIdleTimeout,
    StreamTruncatedError,
    UnknownModelError,
    UnknownProviderError,
    UnresolvableCredentialError,
    UpstreamHTTPError,
    UpstreamStreamError,
)
from .rules import CLASSIFICATION_RULES, USER_MESSAGES, ClassificationRule
from .classification import ErrorClassifier, classify_error

__all__ = [
    "ErrorKind",
    "NormalizedError",
    "GatewayError",
    "InvalidRequestError",
    "MalformedChunkError",
    "ParameterValidationError",
    "StreamIdleTimeout",
    "StreamTruncatedError",
    "UnknownModelError",
    "UnknownProviderError",
    "UnresolvableCredentialError",
    "UpstreamHTTPError",
    "UpstreamStreamError",
    "CLASSIFICATION_RULES",
    "USER_MESSAGES",
    "ClassificationRule",
    "ErrorClassifier",
    "classify_error",
]
