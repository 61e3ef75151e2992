"""Anthropic Messages API wire format.

Request:
    ``POST {endpoint}/v1/messages`` (``/messages`` when the endpoint already
    ends in ``/v1``) with ``x-api-key`` and ``anthropic-version`` headers.
    System messages travel in the top-level ``system`` field; ``max_tokens``
    is mandatory upstream and defaults to the model's output ceiling.

Stream:
    Named SSE events. ``message_start`` carries prompt usage,
    ``content_block_delta`` carries ``text_delta`` chunks, ``message_delta``
    the stop reason and output usage, ``message_stop`` terminates and
    ``error`` reports a failure (e.g. ``overloaded_error``) mid-stream.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ...config.defaults import ANTHROPIC_API_VERSION, ANTHROPIC_DEFAULT_MAX_TOKENS
from ..credentials import ResolvedTarget
from ..errors import UpstreamStreamError
from ..models import ChatMessage, GenerationParameters, ModelSpec, StreamEvent, TextDelta
from .base import StreamDecoder, WireRequest, as_int, join_system

# Anthropic accepts the sampling tunables under the same names
_PASSTHROUGH = ("temperature", "top_p", "top_k")


class AnthropicStreamDecoder(StreamDecoder):
    wire_format = "anthropic"

    def feed(self, event: Optional[str], data: str) -> Iterator[StreamEvent]:
        payload = self._load(data)
        kind = payload.get("type") or event
        if kind == "message_start":
            usage = (payload.get("message") or {}).get("usage") or {}
            self.prompt_tokens = as_int(usage.get("input_tokens"))
        elif kind == "content_block_delta":
            delta = payload.get("delta") or {}
            text = delta.get("text")
            if isinstance(text, str) and text:
                yield TextDelta(text)
        elif kind == "message_delta":
            delta = payload.get("delta") or {}
            if delta.get("stop_reason"):
                self.finish_reason = str(delta["stop_reason"])
            usage = payload.get("usage") or {}
            if "output_tokens" in usage:
                self.completion_tokens = as_int(usage.get("output_tokens"))
        elif kind == "message_stop":
            yield self._finish()
        elif kind == "error":
            error = payload.get("error") or {}
            if not isinstance(error, Mapping):
                raise UpstreamStreamError(message=str(error))
            raise UpstreamStreamError(
                message=str(error.get("message") or "upstream stream error"),
                code=error.get("type"),
            )


def _messages_url(endpoint: str) -> str:
    if endpoint.lower().endswith("/v1"):
        return f"{endpoint}/messages"
    return f"{endpoint}/v1/messages"


class AnthropicAdapter:
    wire_format = "anthropic"

    def build_request(
        self,
        target: ResolvedTarget,
        model: ModelSpec,
        messages: Sequence[ChatMessage],
        params: GenerationParameters,
    ) -> WireRequest:
        max_tokens = params.max_tokens or model.max_output_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS
        body: Dict[str, Any] = {
            "model": model.model_id,
            "max_tokens": max_tokens,
            "messages": [{"role": m.role, "content": m.content} for m in messages if m.role != "system"],
            "stream": True,
        }
        system = join_system(messages)
        if system:
            body["system"] = system
        for name in _PASSTHROUGH:
            value = getattr(params, name)
            if value is not None:
                body[name] = value
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "anthropic-version": ANTHROPIC_API_VERSION,
        }
        if target.credential:
            headers["x-api-key"] = target.credential
        return WireRequest(url=_messages_url(target.endpoint), body=body, headers=headers)

    def new_decoder(self) -> StreamDecoder:
        return AnthropicStreamDecoder()


__all__ = ["AnthropicAdapter", "AnthropicStreamDecoder"]
