"""Domain record implementations re-exported by ``llm_gateway.base.models``."""

from .chat_message import ChatMessage, Role, ROLES
from .generation_parameters import GenerationParameters, PARAMETER_ORDER
from .model_configuration import ModelConfiguration
from .model_spec import ModelSpec
from .parameter_range import ParameterRange
from .provider_descriptor import ProviderDescriptor, WireFormat
from .stream_event import Done, ErrorEvent, StreamEvent, TextDelta, build_token_usage

__all__ = [
    "ChatMessage",
    "Role",
    "ROLES",
    "GenerationParameters",
    "PARAMETER_ORDER",
    "ModelConfiguration",
    "ModelSpec",
    "ParameterRange",
    "ProviderDescriptor",
    "WireFormat",
    "Done",
    "ErrorEvent",
    "StreamEvent",
    "TextDelta",
    "build_token_usage",
]
