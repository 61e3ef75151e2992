"""
Pydantic DTOs for inbound chat stream requests.

Purpose
-------
Validate the JSON body of ``POST /api/chat/stream`` before it is turned into
the immutable domain records consumed by the dispatcher. Field names accept
both the camelCase wire spelling (``modelId``, ``maxTokens``) and the Python
spelling.

External dependencies: Pydantic only (no network calls). No timeouts.

Fallback semantics: Not applicable. Validation either succeeds or raises a
``pydantic.ValidationError``; FastAPI turns it into a 422 response.

Design
------
- Shape checks only (types, roles, non-empty content). Numeric bounds are
  provider-specific and belong to ``ParameterValidator``, which reports them
  as an ``error`` frame carrying the offending field and allowed range.
- ``extra="forbid"`` so a misspelled tunable is rejected instead of being
  silently dropped.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import ChatMessage, GenerationParameters, ModelConfiguration

_STRICT = ConfigDict(populate_by_name=True, extra="forbid", protected_namespaces=())


class ModelConfigurationDTO(BaseModel):
    model_config = _STRICT

    provider: str = Field(min_length=1)
    model_id: Optional[str] = Field(default=None, alias="modelId")
    endpoint_override: Optional[str] = Field(default=None, alias="endpointOverride")
    credential_ref: Optional[str] = Field(default=None, alias="credentialRef")

    def to_domain(self) -> ModelConfiguration:
        return ModelConfiguration(
            provider=self.provider.strip(),
            model_id=(self.model_id or "").strip() or None,
            endpoint_override=self.endpoint_override or None,
            credential_ref=self.credential_ref or None,
        )


class ChatMessageDTO(BaseModel):
    """A role-tagged text message.

    Failure Modes:
        Raises ``ValidationError`` for unknown roles or blank content.
    """

    model_config = _STRICT

    role: Literal["system", "user", "assistant"]
    content: str

    @field_validator("content")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value

    def to_domain(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)


class GenerationParametersDTO(BaseModel):
    model_config = _STRICT

    temperature: Optional[float] = None
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens")
    top_p: Optional[float] = Field(default=None, alias="topP")
    top_k: Optional[int] = Field(default=None, alias="topK")
    frequency_penalty: Optional[float] = Field(default=None, alias="frequencyPenalty")
    presence_penalty: Optional[float] = Field(default=None, alias="presencePenalty")

    def to_domain(self) -> GenerationParameters:
        return GenerationParameters(**self.model_dump(by_alias=False))


class ChatStreamRequestDTO(BaseModel):
    """Body of ``POST /api/chat/stream``.

    Example::

        {
          "modelConfig": {"provider": "openai", "modelId": "gpt-4o-mini"},
          "messages": [{"role": "user", "content": "hi"}],
          "params": {"temperature": 0.2}
        }
    """

    model_config = _STRICT

    configuration: ModelConfigurationDTO = Field(alias="modelConfig")
    messages: List[ChatMessageDTO] = Field(min_length=1)
    parameters: GenerationParametersDTO = Field(default_factory=GenerationParametersDTO, alias="params")

    def to_domain(self):
        """Return ``(ModelConfiguration, [ChatMessage], GenerationParameters)``."""
        return (
            self.configuration.to_domain(),
            [m.to_domain() for m in self.messages],
            self.parameters.to_domain(),
        )


__all__ = [
    "ModelConfigurationDTO",
    "ChatMessageDTO",
    "GenerationParametersDTO",
    "ChatStreamRequestDTO",
]
