"""Pytest configuration for the gateway test suite.

Every test runs with provider credentials, config-file pointers and cache
overrides removed from the environment so results never depend on the
developer's shell. ``.env`` loading is pointed at a path that does not exist.
"""

from __future__ import annotations

import os
from typing import Iterator

import pytest

from llm_gateway.config import reset_config_cache
from llm_gateway.config.env import ENV_ALIASES, ENV_MAP
from llm_gateway.tests.helpers import ALPHA_KEY, build_alpha_registry

_EXTRA_VARS = ("ALPHA_API_KEY", "OLLAMA_API_KEY", "DOTENV_FILE")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip gateway-relevant variables and reset the config caches."""
    names = set(ENV_MAP.values()) | set(_EXTRA_VARS)
    names.update(k for k in os.environ if k.startswith("GATEWAY_") or k.endswith("_BASE_URL"))
    for aliases in ENV_ALIASES.values():
        names.update(aliases)
    for name in names:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def alpha_registry():
    """Registry with the single ``alpha`` provider (model ``alpha-large``)."""
    return build_alpha_registry()


@pytest.fixture()
def alpha_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Expose the alpha credential through the environment fallback."""
    monkeypatch.setenv("ALPHA_API_KEY", ALPHA_KEY)
    return ALPHA_KEY


@pytest.fixture()
def direct_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep httpx from routing loopback requests through a proxy."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
