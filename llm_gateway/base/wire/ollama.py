"""Ollama native chat wire format.

Request:
    ``POST {host}/api/chat`` with ``stream: true``. A pasted OpenAI-compat
    base (``.../v1``) is reduced to the host. Tunables go into ``options``
    using Ollama's names (``num_predict`` for the output limit). Ollama runs
    keyless; a bearer header is sent only when a credential was resolved
    (authenticating reverse proxies).

Stream:
    Newline-delimited JSON. Each line carries ``message.content``; the line
    with ``done: true`` terminates and reports ``done_reason`` plus
    ``prompt_eval_count`` / ``eval_count``. Failures arrive as
    ``{"error": "..."}``, possibly after some content.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Sequence

from ..credentials import ResolvedTarget
from ..errors import UpstreamStreamError
from ..models import ChatMessage, GenerationParameters, ModelSpec, StreamEvent, TextDelta
from .base import StreamDecoder, WireRequest, as_int

_OPTION_NAMES = {
    "temperature": "temperature",
    "max_tokens": "num_predict",
    "top_p": "top_p",
    "top_k": "top_k",
    "frequency_penalty": "frequency_penalty",
    "presence_penalty": "presence_penalty",
}


class OllamaStreamDecoder(StreamDecoder):
    wire_format = "ollama"

    def feed(self, event: Optional[str], data: str) -> Iterator[StreamEvent]:
        payload = self._load(data)
        if payload.get("error"):
            raise UpstreamStreamError(message=str(payload["error"]))
        message = payload.get("message") or {}
        text = message.get("content")
        if isinstance(text, str) and text:
            yield TextDelta(text)
        if payload.get("done") is True:
            if payload.get("done_reason"):
                self.finish_reason = str(payload["done_reason"])
            self.prompt_tokens = as_int(payload.get("prompt_eval_count"))
            self.completion_tokens = as_int(payload.get("eval_count"))
            yield self._finish()


def _chat_url(endpoint: str) -> str:
    host = endpoint
    if host.lower().endswith("/v1"):
        host = host[: -len("/v1")]
    return f"{host}/api/chat"


class OllamaAdapter:
    wire_format = "ollama"

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
        }
        options = {_OPTION_NAMES[name]: value for name, value in params.items_set()}
        if options:
            body["options"] = options
        headers = {"Content-Type": "application/json", "Accept": "application/x-ndjson"}
        if target.credential:
            headers["Authorization"] = f"Bearer {target.credential}"
        return WireRequest(url=_chat_url(target.endpoint), body=body, headers=headers, framing="ndjson")

    def new_decoder(self) -> StreamDecoder:
        return OllamaStreamDecoder()


__all__ = ["OllamaAdapter", "OllamaStreamDecoder"]
