"""Static provider catalog.

One :class:`ProviderDescriptor` row per supported provider family. Ranges
reflect what each upstream API accepts; a tunable missing from a row's
``parameters`` is rejected by the validator instead of being forwarded.
"""
from __future__ import annotations

from typing import Tuple

from ...config.defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    GOOGLE_DEFAULT_BASE_URL,
    GROQ_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_HOST,
    OPENAI_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_BASE_URL,
)
from ..models import ModelSpec, ParameterRange, ProviderDescriptor

MAX_TOKENS_RANGE = ParameterRange(1, 1_000_000, integer=True)
TOP_P_RANGE = ParameterRange(0, 1)
TOP_K_RANGE = ParameterRange(0, 100, integer=True)
PENALTY_RANGE = ParameterRange(-2, 2)
TEMPERATURE_WIDE = ParameterRange(0, 2)
TEMPERATURE_UNIT = ParameterRange(0, 1)

OPENAI = ProviderDescriptor(
    provider_id="openai",
    display_name="OpenAI",
    default_endpoint=OPENAI_DEFAULT_BASE_URL,
    wire_format="openai",
    models=(
        ModelSpec("gpt-4o", "GPT-4o", 128_000, 4_096),
        ModelSpec("gpt-4o-mini", "GPT-4o Mini", 128_000, 16_384),
        ModelSpec("gpt-4-turbo", "GPT-4 Turbo", 128_000, 4_096),
        ModelSpec("gpt-4", "GPT-4", 8_192, 8_192),
        ModelSpec("gpt-3.5-turbo", "GPT-3.5 Turbo", 16_385, 4_096),
    ),
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "frequency_penalty": PENALTY_RANGE,
        "presence_penalty": PENALTY_RANGE,
    },
)

ANTHROPIC = ProviderDescriptor(
    provider_id="anthropic",
    display_name="Anthropic",
    default_endpoint=ANTHROPIC_DEFAULT_BASE_URL,
    wire_format="anthropic",
    models=(
        ModelSpec("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", 200_000, 8_192),
        ModelSpec("claude-3-5-haiku-20241022", "Claude 3.5 Haiku", 200_000, 8_192),
        ModelSpec("claude-3-opus-20240229", "Claude 3 Opus", 200_000, 4_096),
        ModelSpec("claude-3-sonnet-20240229", "Claude 3 Sonnet", 200_000, 4_096),
        ModelSpec("claude-3-haiku-20240307", "Claude 3 Haiku", 200_000, 4_096),
    ),
    parameters={
        "temperature": TEMPERATURE_UNIT,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "top_k": TOP_K_RANGE,
    },
)

GOOGLE = ProviderDescriptor(
    provider_id="google",
    display_name="Google Gemini",
    default_endpoint=GOOGLE_DEFAULT_BASE_URL,
    wire_format="gemini",
    models=(
        ModelSpec("gemini-2.0-flash-exp", "Gemini 2.0 Flash (Experimental)", 1_000_000, 8_192),
        ModelSpec("gemini-1.5-pro", "Gemini 1.5 Pro", 2_000_000, 8_192),
        ModelSpec("gemini-1.5-flash", "Gemini 1.5 Flash", 1_000_000, 8_192),
        ModelSpec("gemini-1.0-pro", "Gemini 1.0 Pro", 32_000, 2_048),
    ),
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "top_k": TOP_K_RANGE,
        "frequency_penalty": PENALTY_RANGE,
        "presence_penalty": PENALTY_RANGE,
    },
)

GROQ = ProviderDescriptor(
    provider_id="groq",
    display_name="Groq",
    default_endpoint=GROQ_DEFAULT_BASE_URL,
    wire_format="openai",
    models=(
        ModelSpec("llama-3.3-70b-versatile", "Llama 3.3 70B Versatile", 128_000, 8_192),
        ModelSpec("llama-3.1-70b-versatile", "Llama 3.1 70B Versatile", 128_000, 8_192),
        ModelSpec("mixtral-8x7b-32768", "Mixtral 8x7B", 32_768, 32_768),
        ModelSpec("gemma2-9b-it", "Gemma 2 9B", 8_192, 8_192),
    ),
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
    },
)

OLLAMA = ProviderDescriptor(
    provider_id="ollama",
    display_name="Ollama (local)",
    default_endpoint=OLLAMA_DEFAULT_HOST,
    wire_format="ollama",
    models=(
        ModelSpec("llama3.3", "Llama 3.3", 128_000, 4_096),
        ModelSpec("llama3.2", "Llama 3.2", 128_000, 4_096),
        ModelSpec("mistral", "Mistral", 8_192, 4_096),
        ModelSpec("codellama", "Code Llama", 16_384, 4_096),
        ModelSpec("qwen2.5", "Qwen 2.5", 128_000, 8_192),
    ),
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "top_k": TOP_K_RANGE,
        "frequency_penalty": PENALTY_RANGE,
        "presence_penalty": PENALTY_RANGE,
    },
    allows_custom_models=True,
    requires_credential=False,
)

OPENROUTER = ProviderDescriptor(
    provider_id="openrouter",
    display_name="OpenRouter",
    default_endpoint=OPENROUTER_DEFAULT_BASE_URL,
    wire_format="openai",
    models=(
        ModelSpec("openai/gpt-4o", "GPT-4o (OpenRouter)", 128_000, 16_384),
        ModelSpec("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet (OpenRouter)", 200_000, 8_192),
        ModelSpec("google/gemini-pro-1.5", "Gemini 1.5 Pro (OpenRouter)", 2_000_000, 8_192),
        ModelSpec("meta-llama/llama-3.3-70b-instruct", "Llama 3.3 70B (OpenRouter)", 128_000, 8_192),
    ),
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "top_k": TOP_K_RANGE,
        "frequency_penalty": PENALTY_RANGE,
        "presence_penalty": PENALTY_RANGE,
    },
    allows_custom_models=True,
)

CUSTOM = ProviderDescriptor(
    provider_id="custom",
    display_name="Custom (OpenAI-compatible)",
    default_endpoint=None,
    wire_format="openai",
    parameters={
        "temperature": TEMPERATURE_WIDE,
        "max_tokens": MAX_TOKENS_RANGE,
        "top_p": TOP_P_RANGE,
        "frequency_penalty": PENALTY_RANGE,
        "presence_penalty": PENALTY_RANGE,
    },
    allows_custom_models=True,
    requires_credential=False,
)

DEFAULT_CATALOG: Tuple[ProviderDescriptor, ...] = (
    OPENAI,
    ANTHROPIC,
    GOOGLE,
    GROQ,
    OLLAMA,
    OPENROUTER,
    CUSTOM,
)


__all__ = ["DEFAULT_CATALOG", "MAX_TOKENS_RANGE"]
