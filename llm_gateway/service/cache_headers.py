"""
Conditional-response caching for the read-only gateway endpoints.

Purpose
-------
Attach a content-hash validator (``ETag``) and a private freshness directive
(``Cache-Control``) to JSON responses, and answer a request that repeats the
current validator in ``If-None-Match`` with ``304 Not Modified`` and an empty
body.

Design
------
- Stateless: the validator is a pure function of the serialized body
  (SHA-256 over canonical JSON: sorted keys, compact separators), so two
  processes answering from identical data produce identical validators.
  Nothing is stored between requests.
- The freshness window is a per-endpoint policy (:class:`CachePolicy`); the
  service reads it from configuration (``get_cache_max_age``).
- The wrapped handler's result is serialized, never mutated.

External dependencies: FastAPI/Starlette ``Request`` and ``Response``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Optional, Union

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder

from ..base.logging import get_logger, log_event
from ..config import get_cache_max_age
from ..config.defaults import CACHE_MAX_AGE_LONG, CACHE_MAX_AGE_MEDIUM, CACHE_MAX_AGE_SHORT

HeaderSource = Union[Request, Mapping[str, str], None]


@dataclass(frozen=True)
class CachePolicy:
    """Freshness directive for one endpoint.

    Attributes:
        max_age: Seconds a response may be reused without revalidation.
        no_transform: Emit ``no-transform``.
        must_revalidate: Emit ``must-revalidate``.
    """

    max_age: int
    no_transform: bool = True
    must_revalidate: bool = False

    SHORT: ClassVar["CachePolicy"]
    MEDIUM: ClassVar["CachePolicy"]
    LONG: ClassVar["CachePolicy"]

    def __post_init__(self) -> None:
        if isinstance(self.max_age, bool) or not isinstance(self.max_age, int) or self.max_age < 0:
            raise ValueError(f"max_age must be a non-negative integer, got {self.max_age!r}")

    @classmethod
    def for_endpoint(cls, endpoint: str, default: Optional[int] = None) -> "CachePolicy":
        """Build the policy configured for ``endpoint`` (see ``get_cache_max_age``)."""
        return cls(max_age=get_cache_max_age(endpoint, default))


CachePolicy.SHORT = CachePolicy(CACHE_MAX_AGE_SHORT)
CachePolicy.MEDIUM = CachePolicy(CACHE_MAX_AGE_MEDIUM)
CachePolicy.LONG = CachePolicy(CACHE_MAX_AGE_LONG)


def serialize_payload(payload: Any) -> bytes:
    """Return canonical JSON bytes for ``payload``."""
    return json.dumps(
        jsonable_encoder(payload),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def compute_validator(body: bytes) -> str:
    """Return the quoted SHA-256 hex digest of ``body``."""
    return f'"{hashlib.sha256(body).hexdigest()}"'


def _opaque(tag: str) -> str:
    tag = tag.strip()
    if tag[:2].upper() == "W/":
        tag = tag[2:].strip()
    return tag.strip('"')


def validator_matches(current: str, if_none_match: Optional[str]) -> bool:
    """Whether an ``If-None-Match`` value names ``current``.

    Accepts quoted or unquoted tags, the weak ``W/`` prefix, comma-separated
    lists and ``*``.
    """
    if not if_none_match or not if_none_match.strip():
        return False
    wanted = _opaque(current)
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate and _opaque(candidate) == wanted:
            return True
    return False


def build_cache_control(policy: CachePolicy) -> str:
    """Render ``private, max-age=N[, no-transform][, must-revalidate]``."""
    directives = ["private", f"max-age={policy.max_age}"]
    if policy.no_transform:
        directives.append("no-transform")
    if policy.must_revalidate:
        directives.append("must-revalidate")
    return ", ".join(directives)


def _header(source: HeaderSource, name: str) -> Optional[str]:
    if source is None:
        return None
    headers = source.headers if isinstance(source, Request) else source
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


class CacheMiddleware:
    """Wraps a read-only handler with validator and freshness headers."""

    def __init__(self, policy: CachePolicy, *, logger: Optional[logging.Logger] = None) -> None:
        self.policy = policy
        self._logger = logger or get_logger("gateway.cache")

    def respond(self, request: HeaderSource, produce: Callable[[], Any]) -> Response:
        """Run ``produce`` and return a ``200`` or ``304`` response.

        Parameters
        ----------
        request:
            Incoming request, or a plain header mapping.
        produce:
            Zero-argument handler returning the JSON-serializable payload.
        """
        if_none_match = _header(request, "if-none-match")
        body = serialize_payload(produce())
        etag = compute_validator(body)
        headers = {"ETag": etag, "Cache-Control": build_cache_control(self.policy)}
        if validator_matches(etag, if_none_match):
            log_event(
                self._logger,
                "cache.not_modified",
                None,
                level=logging.DEBUG,
                path=request.url.path if isinstance(request, Request) else None,
                etag=etag,
            )
            return Response(status_code=304, headers=headers)
        return Response(content=body, status_code=200, media_type="application/json", headers=headers)

    def wrap(self, handler: Callable[..., Any]) -> Callable[..., Response]:
        """Return ``f(request, *args, **kwargs)`` answering through :meth:`respond`."""

        def _wrapped(request: HeaderSource, *args: Any, **kwargs: Any) -> Response:
            return self.respond(request, lambda: handler(*args, **kwargs))

        return _wrapped


__all__ = [
    "CachePolicy",
    "CacheMiddleware",
    "serialize_payload",
    "compute_validator",
    "validator_matches",
    "build_cache_control",
]
