"""OpenAI Chat Completions wire format.

Used by OpenAI itself and by the families that mirror its API (Groq,
OpenRouter, self-hosted "custom" servers).

Request:
    ``POST {endpoint}/chat/completions`` with ``Authorization: Bearer`` and
    ``stream: true``; usage is requested through ``stream_options``.

Stream:
    SSE ``data:`` records holding ``chat.completion.chunk`` objects. Text
    arrives in ``choices[0].delta.content``, ``finish_reason`` on the last
    content chunk, usage in a trailing chunk with empty ``choices``, and the
    literal ``[DONE]`` terminates. Some compatible servers report failures
    mid-stream as ``{"error": {...}}``.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ..credentials import ResolvedTarget
from ..errors import UpstreamStreamError
from ..models import ChatMessage, GenerationParameters, ModelSpec, StreamEvent, TextDelta
from .base import StreamDecoder, WireRequest, as_int

_DONE_SENTINEL = "[DONE]"


def _error_from_payload(error: Any) -> UpstreamStreamError:
    if isinstance(error, Mapping):
        code = error.get("code") or error.get("type")
        status = as_int(error.get("status") or error.get("status_code"))
        return UpstreamStreamError(
            message=str(error.get("message") or "upstream stream error"),
            code=str(code) if code else None,
            status_code=status,
        )
    return UpstreamStreamError(message=str(error))


class OpenAIStreamDecoder(StreamDecoder):
    wire_format = "openai"

    def feed(self, event: Optional[str], data: str) -> Iterator[StreamEvent]:
        if data.strip() == _DONE_SENTINEL:
            yield self._finish()
            return
        payload = self._load(data)
        if payload.get("error"):
            raise _error_from_payload(payload["error"])
        usage = payload.get("usage")
        if isinstance(usage, Mapping):
            self.prompt_tokens = as_int(usage.get("prompt_tokens"))
            self.completion_tokens = as_int(usage.get("completion_tokens"))
            self.total_tokens = as_int(usage.get("total_tokens"))
        choices = payload.get("choices") or []
        if not choices or not isinstance(choices[0], Mapping):
            return
        choice = choices[0]
        delta = choice.get("delta") or {}
        text = delta.get("content") if isinstance(delta, Mapping) else None
        if isinstance(text, str) and text:
            yield TextDelta(text)
        if choice.get("finish_reason"):
            self.finish_reason = str(choice["finish_reason"])


class OpenAICompatibleAdapter:
    wire_format = "openai"

    def build_request(
        self,
        target: ResolvedTarget,
        model: ModelSpec,
        messages: Sequence[ChatMessage],
        params: GenerationParameters,
    ) -> WireRequest:
        body: Dict[str, Any] = {
            "model": model.model_id,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        body.update(params.as_dict())
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if target.credential:
            headers["Authorization"] = f"Bearer {target.credential}"
        return WireRequest(url=f"{target.endpoint}/chat/completions", body=body, headers=headers)

    def new_decoder(self) -> StreamDecoder:
        return OpenAIStreamDecoder()


__all__ = ["OpenAICompatibleAdapter", "OpenAIStreamDecoder"]
