"""Streaming timeout configuration.

Key Components
--------------
TimeoutConfig
    Connect and idle-read timeouts bounding the ``CONNECTING`` and
    ``STREAMING`` dispatch states.

get_timeout_config()
    Returns a process-cached configuration, re-parsed only when the relevant
    environment variables change. Supported variables (all optional):
        GATEWAY_CONNECT_TIMEOUT_SECONDS
        GATEWAY_IDLE_TIMEOUT_SECONDS

Failure Modes
-------------
Unset, unparsable or non-positive values fall back to the defaults in
``config.defaults``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from ..config.defaults import CONNECT_TIMEOUT_DEFAULT_SECONDS, IDLE_TIMEOUT_DEFAULT_SECONDS

_ENV_CONNECT = "GATEWAY_CONNECT_TIMEOUT_SECONDS"
_ENV_IDLE = "GATEWAY_IDLE_TIMEOUT_SECONDS"


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Limit for establishing the upstream connection.
        idle_timeout_seconds: Longest silence tolerated between two upstream
            reads once the response has started.
    """

    connect_timeout_seconds: float = CONNECT_TIMEOUT_DEFAULT_SECONDS
    idle_timeout_seconds: float = IDLE_TIMEOUT_DEFAULT_SECONDS

    def to_httpx(self) -> httpx.Timeout:
        """Map onto an ``httpx.Timeout`` (read timeout == idle timeout)."""
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.idle_timeout_seconds,
            write=self.connect_timeout_seconds,
            pool=self.connect_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, else return ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = f"{os.getenv(_ENV_CONNECT, '')}/{os.getenv(_ENV_IDLE, '')}"
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_CONNECT, CONNECT_TIMEOUT_DEFAULT_SECONDS),
        idle_timeout_seconds=_parse_env_float(_ENV_IDLE, IDLE_TIMEOUT_DEFAULT_SECONDS),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
