"""llm_gateway.config.env
======================

Environment variable mapping and helpers for the process-wide credential
fallback used by the credential resolver.

Purpose
-------
- Single source of truth mapping provider identifiers to the environment
  variable names holding their API keys (canonical and aliases).
- Small lookup utilities shared by the resolver, the CLI and the service.

Design Notes
------------
- Canonical mapping is ``ENV_MAP``. Providers with several historical names
  list them in ``ENV_ALIASES`` with the canonical name first.
- Self-hosted providers (ollama) have no entry; they run keyless.

Failure Modes
-------------
- Helpers never raise on unknown providers or unset variables; they return
  ``None`` and let callers decide.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_MAP: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GOOGLE_GENERATIVE_AI_API_KEY",
    "groq": "GROQ_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "custom": "CUSTOM_API_KEY",
}


ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "google": ("GOOGLE_GENERATIVE_AI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', 'your-api-key'
    or starts with 'test_'. Case-insensitive, surrounding spaces ignored.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or "your-api-key" in v
        or v.startswith("test_")
    )


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Yield acceptable environment variable names for a provider.

    The canonical name is yielded first, followed by any aliases. Providers
    without a mapping fall back to ``<PROVIDER>_API_KEY``.
    """
    p = (provider or "").lower().strip()
    canonical = ENV_MAP.get(p)
    if canonical is None and p:
        canonical = f"{p.upper().replace('-', '_')}_API_KEY"
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):
        if alias != canonical:
            yield alias


def resolve_provider_key(
    provider: str, environ: Optional[Dict[str, str]] = None
) -> Tuple[Optional[str], Optional[str]]:
    """Resolve an API key for a provider from the environment.

    Iterates the candidate names in priority order and returns the first
    non-empty value that is not a placeholder.

    Parameters
    ----------
    provider: str
        Provider identifier (case-insensitive).
    environ: Optional[Dict[str, str]]
        Mapping to read from; defaults to ``os.environ``.

    Returns
    -------
    Tuple[Optional[str], Optional[str]]
        ``(value, env_var_used)``, or ``(None, None)`` when nothing usable is set.
    """
    env = os.environ if environ is None else environ
    for name in get_env_var_candidates(provider):
        val = env.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
