"""Pydantic DTOs validating HTTP request bodies before they reach the core."""

from .chat import ChatMessageDTO, ChatStreamRequestDTO, GenerationParametersDTO, ModelConfigurationDTO

__all__ = [
    "ChatMessageDTO",
    "ChatStreamRequestDTO",
    "GenerationParametersDTO",
    "ModelConfigurationDTO",
]
