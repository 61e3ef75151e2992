"""Unified configuration layer for the gateway.

Goals
-----
* Centralize defaults (base URLs, cache windows, CORS origins).
* Merge sources in a predictable order:
    1. Built-in defaults (``config.defaults``)
    2. Optional external config file (JSON or YAML) pointed to by GATEWAY_CONFIG_FILE
    3. Environment variables (e.g. OPENAI_BASE_URL, OPENAI_API_KEY)
    4. In-code overrides passed to helpers
* Provide small call sites: ``get_provider_config``, ``get_cache_max_age``,
  ``get_cors_origins``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_API_KEY, <PROVIDER>_BASE_URL, e.g. OPENAI_BASE_URL.
GATEWAY_CACHE_<ENDPOINT>_MAX_AGE, e.g. GATEWAY_CACHE_MODELS_MAX_AGE=120.

External Config File (Optional)
-------------------------------
If GATEWAY_CONFIG_FILE is set to a path, JSON is attempted first, then YAML.
Structure example:

```
openai:
  base_url: https://proxy.internal/v1
ollama:
  base_url: http://gpu-box:11434
cache:
  providers: 1800
  models: 120
credentials:
  team-openai: env:TEAM_OPENAI_KEY
```

The ``credentials`` section is the key store consulted for a model
configuration's ``credential_ref``; an ``env:NAME`` value is read from the
environment instead of being stored in the file.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    CACHE_ENDPOINT_DEFAULTS,
    GATEWAY_SERVICE_CORS_DEFAULT_ORIGINS,
    GOOGLE_DEFAULT_BASE_URL,
    GROQ_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_HOST,
    OPENAI_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_BASE_URL,
)
from .env import is_placeholder


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"base_url": OPENAI_DEFAULT_BASE_URL},
    "anthropic": {"base_url": ANTHROPIC_DEFAULT_BASE_URL},
    "google": {"base_url": GOOGLE_DEFAULT_BASE_URL},
    "groq": {"base_url": GROQ_DEFAULT_BASE_URL},
    "ollama": {"base_url": OLLAMA_DEFAULT_HOST},
    "openrouter": {"base_url": OPENROUTER_DEFAULT_BASE_URL},
    "custom": {},
}


ENV_FIELD_MAP = {
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Safe to call
    multiple times. Existing environment variables are overridden only when
    their current value looks like a placeholder.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("GATEWAY_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def reset_config_cache() -> None:
    """Forget the parsed config file and .env state (tests, reload)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None:
            out[field] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars -> overrides
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_cache_max_age(endpoint: str, default: Optional[int] = None) -> int:
    """Return the freshness window (seconds) configured for ``endpoint``.

    Merge order (later wins): ``CACHE_ENDPOINT_DEFAULTS`` -> ``cache`` section
    of the external config file -> ``GATEWAY_CACHE_<ENDPOINT>_MAX_AGE``.
    Negative or unparsable values are ignored.
    """
    _load_dotenv_once()
    name = endpoint.lower().strip()
    value = CACHE_ENDPOINT_DEFAULTS.get(name, default if default is not None else 0)
    candidates: List[Any] = []
    file_section = _load_external_config().get("cache")
    if isinstance(file_section, dict):
        candidates.append(file_section.get(name))
    candidates.append(os.getenv(f"GATEWAY_CACHE_{name.upper()}_MAX_AGE"))
    for raw in candidates:
        if raw is None:
            continue
        try:
            parsed = int(raw)
        except (TypeError, ValueError):
            continue
        if parsed >= 0:
            value = parsed
    return int(value)


def get_credential_store() -> Dict[str, str]:
    """Return the ``credentials`` section of the config file as ``ref -> secret``.

    ``env:NAME`` values are dereferenced; unset variables, placeholders and
    non-string entries are dropped.
    """
    _load_dotenv_once()
    section = _load_external_config().get("credentials")
    if not isinstance(section, dict):
        return {}
    store: Dict[str, str] = {}
    for ref, raw in section.items():
        if not isinstance(raw, str):
            continue
        value = os.getenv(raw[4:].strip()) if raw.startswith("env:") else raw
        if value and value.strip() and not is_placeholder(value):
            store[str(ref)] = value.strip()
    return store


def get_cors_origins() -> List[str]:
    """Return the allowed CORS origins from GATEWAY_CORS_ORIGINS (comma-separated)."""
    raw = os.getenv("GATEWAY_CORS_ORIGINS", GATEWAY_SERVICE_CORS_DEFAULT_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


__all__ = [
    "DEFAULTS",
    "get_provider_config",
    "get_cache_max_age",
    "get_cors_origins",
    "get_credential_store",
    "reset_config_cache",
]
