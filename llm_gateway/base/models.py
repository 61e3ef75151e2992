"""
Provider-agnostic domain records public surface.

Re-exports the one-class-per-file implementations under
``llm_gateway.base.models_parts``.
"""

from .models_parts import (
    ROLES,
    PARAMETER_ORDER,
    ChatMessage,
    GenerationParameters,
    ModelConfiguration,
    ModelSpec,
    ParameterRange,
    ProviderDescriptor,
    Role,
    WireFormat,
    Done,
    ErrorEvent,
    StreamEvent,
    TextDelta,
    build_token_usage,
)

__all__ = [
    "ROLES",
    "PARAMETER_ORDER",
    "ChatMessage",
    "GenerationParameters",
    "ModelConfiguration",
    "ModelSpec",
    "ParameterRange",
    "ProviderDescriptor",
    "Role",
    "WireFormat",
    "Done",
    "ErrorEvent",
    "StreamEvent",
    "TextDelta",
    "build_token_usage",
]
