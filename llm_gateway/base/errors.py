"""Gateway error taxonomy public surface.

Re-exports the implementations under ``llm_gateway.base.errors_parts`` so
callers depend on one stable import path.
"""

from .errors_parts import (
    CLASSIFICATION_RULES,
    USER_MESSAGES,
    ClassificationRule,
    ErrorClassifier,
    ErrorKind,
    GatewayError,
    InvalidRequestError,
    MalformedChunkError,
    NormalizedError,
    ParameterValidationError,
    StreamIdleTimeout,
    StreamTruncatedError,
    UnknownModelError,
    UnknownProviderError,
    UnresolvableCredentialError,
    UpstreamHTTPError,
    UpstreamStreamError,
    classify_error,
)
from .redaction import redact_mapping, redact_text

__all__ = [
    "CLASSIFICATION_RULES",
    "USER_MESSAGES",
    "ClassificationRule",
    "ErrorClassifier",
    "ErrorKind",
    "GatewayError",
    "InvalidRequestError",
    "MalformedChunkError",
    "NormalizedError",
    "ParameterValidationError",
    "StreamIdleTimeout",
    "StreamTruncatedError",
    "UnknownModelError",
    "UnknownProviderError",
    "UnresolvableCredentialError",
    "UpstreamHTTPError",
    "UpstreamStreamError",
    "classify_error",
    "redact_mapping",
    "redact_text",
]
