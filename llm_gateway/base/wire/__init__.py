"""Wire adapters: one per upstream wire format.

``get_wire_adapter(descriptor.wire_format)`` is the only per-provider branch
in the dispatch path. Adding a provider that speaks an existing format is a
catalog row; a new format adds one module here and one table entry.
"""

from types import MappingProxyType
from typing import Mapping

from .anthropic import AnthropicAdapter, AnthropicStreamDecoder
from .base import StreamDecoder, WireAdapter, WireRequest
from .framing import iter_ndjson_records, iter_sse_records
from .gemini import GeminiAdapter, GeminiStreamDecoder
from .ollama import OllamaAdapter, OllamaStreamDecoder
from .openai_compatible import OpenAICompatibleAdapter, OpenAIStreamDecoder

WIRE_ADAPTERS: Mapping[str, WireAdapter] = MappingProxyType(
    {
        "openai": OpenAICompatibleAdapter(),
        "anthropic": AnthropicAdapter(),
        "gemini": GeminiAdapter(),
        "ollama": OllamaAdapter(),
    }
)


def get_wire_adapter(wire_format: str) -> WireAdapter:
    """Return the adapter for ``wire_format``.

    Raises:
        KeyError: When no adapter handles the format (a catalog error).
    """
    try:
        return WIRE_ADAPTERS[wire_format]
    except KeyError:
        raise KeyError(f"no wire adapter for format '{wire_format}'") from None


__all__ = [
    "WIRE_ADAPTERS",
    "get_wire_adapter",
    "WireAdapter",
    "WireRequest",
    "StreamDecoder",
    "iter_sse_records",
    "iter_ndjson_records",
    "OpenAICompatibleAdapter",
    "OpenAIStreamDecoder",
    "AnthropicAdapter",
    "AnthropicStreamDecoder",
    "GeminiAdapter",
    "GeminiStreamDecoder",
    "OllamaAdapter",
    "OllamaStreamDecoder",
]
