"""llm_gateway.config.defaults
===========================

Central place for small, stable default values used across the gateway core
and the service layer. These defaults can be overridden via environment
variables or the external config file, but provide sensible fallbacks for
local development and tests.

Module Purpose
--------------
- Provide a single import location for conservative default constants (no I/O).
- Keep the service and wire layers free of magic literals.

This module avoids importing from other gateway packages to prevent circular
dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Service / HTTP layer ----

# Comma-separated list of allowed origins for the dev server.
GATEWAY_SERVICE_CORS_DEFAULT_ORIGINS = "http://localhost:3001,http://127.0.0.1:3001"
GATEWAY_SERVICE_DEFAULT_HOST = "127.0.0.1"
GATEWAY_SERVICE_DEFAULT_PORT = 8091

# ---- Cache windows (seconds) ----
CACHE_MAX_AGE_SHORT = 60
CACHE_MAX_AGE_MEDIUM = 300
CACHE_MAX_AGE_LONG = 900

# Per-endpoint freshness windows. Keys are the endpoint names used by the
# service layer; values are overridable per deployment.
CACHE_ENDPOINT_DEFAULTS = {
    "providers": CACHE_MAX_AGE_LONG,
    "provider": CACHE_MAX_AGE_LONG,
    "models": CACHE_MAX_AGE_MEDIUM,
}

# ---- Streaming timeouts (seconds) ----
CONNECT_TIMEOUT_DEFAULT_SECONDS = 10.0
IDLE_TIMEOUT_DEFAULT_SECONDS = 60.0

# ---- Retry hints (seconds) used when upstream gives none ----
RETRY_AFTER_DEFAULTS = {
    "rate-limit": 20,
    "service-unavailable": 30,
    "network-error": 5,
}

# ---- Provider endpoints ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com"
GOOGLE_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
OLLAMA_DEFAULT_HOST = "http://localhost:11434"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

ANTHROPIC_API_VERSION = "2023-06-01"
# used when neither the request nor the catalog gives an output ceiling
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096

# ---- CLI Defaults ----
GATEWAY_CLI_DEFAULT_PROVIDER = "openai"


__all__ = [
    "GATEWAY_SERVICE_CORS_DEFAULT_ORIGINS",
    "GATEWAY_SERVICE_DEFAULT_HOST",
    "GATEWAY_SERVICE_DEFAULT_PORT",
    "CACHE_MAX_AGE_SHORT",
    "CACHE_MAX_AGE_MEDIUM",
    "CACHE_MAX_AGE_LONG",
    "CACHE_ENDPOINT_DEFAULTS",
    "CONNECT_TIMEOUT_DEFAULT_SECONDS",
    "IDLE_TIMEOUT_DEFAULT_SECONDS",
    "RETRY_AFTER_DEFAULTS",
    "OPENAI_DEFAULT_BASE_URL",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "GOOGLE_DEFAULT_BASE_URL",
    "GROQ_DEFAULT_BASE_URL",
    "OLLAMA_DEFAULT_HOST",
    "OPENROUTER_DEFAULT_BASE_URL",
    "ANTHROPIC_API_VERSION",
    "ANTHROPIC_DEFAULT_MAX_TOKENS",
    "GATEWAY_CLI_DEFAULT_PROVIDER",
]
