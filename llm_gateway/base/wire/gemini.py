"""Google Gemini (Generative Language API) wire format.

Request:
    ``POST {endpoint}/v1beta/models/{model}:streamGenerateContent?alt=sse``
    with the key in ``x-goog-api-key``. Assistant turns use role ``model``;
    system messages become ``systemInstruction``; tunables live under
    ``generationConfig`` with camelCase names.

Stream:
    SSE ``data:`` records, each a ``GenerateContentResponse``. There is no
    terminal record: the body simply ends, which the decoder treats as
    completion. A prompt rejected by the safety system carries
    ``promptFeedback.blockReason``; a candidate stopped by it carries a
    blocking ``finishReason``. Both surface as a content-policy failure.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from ..credentials import ResolvedTarget
from ..errors import UpstreamStreamError
from ..models import ChatMessage, GenerationParameters, ModelSpec, StreamEvent, TextDelta
from .base import StreamDecoder, WireRequest, as_int, join_system

_GENERATION_CONFIG_NAMES = {
    "temperature": "temperature",
    "max_tokens": "maxOutputTokens",
    "top_p": "topP",
    "top_k": "topK",
    "frequency_penalty": "frequencyPenalty",
    "presence_penalty": "presencePenalty",
}
_BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"})
_API_VERSIONS = ("/v1beta", "/v1")


class GeminiStreamDecoder(StreamDecoder):
    wire_format = "gemini"
    completes_at_eof = True

    def feed(self, event: Optional[str], data: str) -> Iterator[StreamEvent]:
        payload = self._load(data)
        error = payload.get("error")
        if isinstance(error, Mapping):
            raise UpstreamStreamError(
                message=str(error.get("message") or "upstream stream error"),
                code=error.get("status"),
                status_code=as_int(error.get("code")),
            )
        feedback = payload.get("promptFeedback") or {}
        if feedback.get("blockReason"):
            raise UpstreamStreamError(
                message="Prompt blocked by safety filters",
                code=str(feedback["blockReason"]),
            )
        self._read_usage(payload.get("usageMetadata"))
        candidates = payload.get("candidates") or []
        if not candidates:
            return
        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(p["text"] for p in parts if isinstance(p, Mapping) and isinstance(p.get("text"), str))
        if text:
            yield TextDelta(text)
        reason = candidate.get("finishReason")
        if reason in _BLOCKING_FINISH_REASONS:
            raise UpstreamStreamError(message="Response blocked by safety filters", code=reason)
        if reason:
            self.finish_reason = str(reason).lower()

    def _read_usage(self, usage: Any) -> None:
        if not isinstance(usage, Mapping):
            return
        self.prompt_tokens = as_int(usage.get("promptTokenCount"))
        self.completion_tokens = as_int(usage.get("candidatesTokenCount"))
        self.total_tokens = as_int(usage.get("totalTokenCount"))


def _stream_url(endpoint: str, model_id: str) -> str:
    model = model_id[len("models/"):] if model_id.startswith("models/") else model_id
    base = endpoint
    if not base.lower().endswith(_API_VERSIONS):
        base = f"{base}/v1beta"
    return f"{base}/models/{model}:streamGenerateContent?alt=sse"


class GeminiAdapter:
    wire_format = "gemini"

    def build_request(
        self,
        target: ResolvedTarget,
        model: ModelSpec,
        messages: Sequence[ChatMessage],
        params: GenerationParameters,
    ) -> WireRequest:
        body: Dict[str, Any] = {
            "contents": [
                {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
                for m in messages
                if m.role != "system"
            ],
        }
        system = join_system(messages)
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        generation_config = {_GENERATION_CONFIG_NAMES[name]: value for name, value in params.items_set()}
        if generation_config:
            body["generationConfig"] = generation_config
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if target.credential:
            headers["x-goog-api-key"] = target.credential
        return WireRequest(url=_stream_url(target.endpoint, model.model_id), body=body, headers=headers)

    def new_decoder(self) -> StreamDecoder:
        return GeminiStreamDecoder()


__all__ = ["GeminiAdapter", "GeminiStreamDecoder"]
