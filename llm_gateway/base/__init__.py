"""
Gateway Base Package

Exports the provider-agnostic core: the read-only provider registry,
parameter validation, credential resolution, the streaming dispatcher and
the error taxonomy.

Leaf-to-root:
- Models: immutable domain records and stream events
- Registry: static provider descriptor table
- Validation / Credentials: per-request checks before any network call
- Wire: per-format request encoders and stream decoders
- Streaming: dispatcher state machine and controller
- Errors: classification and redaction
"""

from .cancellation import CancellationToken, CancelledError
from .credentials import CredentialResolver, ResolvedTarget
from .errors import ErrorClassifier, ErrorKind, NormalizedError, classify_error
from .models import (
    ChatMessage,
    Done,
    ErrorEvent,
    GenerationParameters,
    ModelConfiguration,
    ModelSpec,
    ParameterRange,
    ProviderDescriptor,
    StreamEvent,
    TextDelta,
)
from .registry import ProviderRegistry, get_default_registry
from .streaming import DispatchState, StreamController, StreamingDispatcher, StreamMetrics
from .timeouts import TimeoutConfig, get_timeout_config
from .validation import ParameterValidator

__all__ = [
    "CancellationToken",
    "CancelledError",
    "CredentialResolver",
    "ResolvedTarget",
    "ErrorClassifier",
    "ErrorKind",
    "NormalizedError",
    "classify_error",
    "ChatMessage",
    "Done",
    "ErrorEvent",
    "GenerationParameters",
    "ModelConfiguration",
    "ModelSpec",
    "ParameterRange",
    "ProviderDescriptor",
    "StreamEvent",
    "TextDelta",
    "ProviderRegistry",
    "get_default_registry",
    "DispatchState",
    "StreamController",
    "StreamingDispatcher",
    "StreamMetrics",
    "TimeoutConfig",
    "get_timeout_config",
    "ParameterValidator",
]
