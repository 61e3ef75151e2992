"""Secret redaction for error text and structured log payloads.

Purpose
-------
Strip credential-shaped substrings (provider API keys, bearer tokens, JWTs,
key-bearing query parameters) from free text, and blank out values stored
under sensitive field names in nested mappings, before anything is logged
or returned to a caller.

Design Notes
------------
- Pure functions; no logging here so that the logging layer can depend on
  this module without an import cycle.
- Literal secrets known to the caller (e.g. the credential resolved for the
  current request) are removed first, then the pattern table runs. Both
  passes always run.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Pattern, Tuple

REDACTED = "[REDACTED]"

# (pattern, replacement) pairs applied in order.
_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/\-]+=*"), f"Bearer {REDACTED}"),
    (re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"), REDACTED),
    (re.compile(r"\bsk-[A-Za-z0-9_\-]{16,}"), REDACTED),
    (re.compile(r"\bAIza[0-9A-Za-z_\-]{35}"), REDACTED),
    (re.compile(r"\bgsk_[A-Za-z0-9]{20,}"), REDACTED),
    (re.compile(r"(?i)([?&](?:key|api_key|apikey|access_token|token)=)[^&\s\"']+"), rf"\1{REDACTED}"),
    (
        re.compile(r"(?i)(\"?(?:api[_-]?key|x-api-key|x-goog-api-key|authorization)\"?\s*[:=]\s*\"?)[^\"\s,}]+"),
        rf"\1{REDACTED}",
    ),
)

_SENSITIVE_FIELDS = frozenset(
    {
        "apikey",
        "key",
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "sessiontoken",
        "secret",
        "authorization",
        "bearer",
        "credential",
        "credentials",
        "xapikey",
        "xgoogapikey",
        "cookie",
    }
)

# Literal secrets shorter than this are not substituted (avoids mangling text).
_MIN_LITERAL_SECRET = 4


def _normalize_field(name: str) -> str:
    return name.lower().replace("_", "").replace("-", "")


def is_sensitive_field(name: Any) -> bool:
    """Return True when ``name`` is a field whose value must never be logged."""
    return isinstance(name, str) and _normalize_field(name) in _SENSITIVE_FIELDS


def redact_text(text: Any, secrets: Iterable[str] = ()) -> str:
    """Return ``text`` with credential-shaped substrings replaced.

    Non-string input is converted with ``str`` first; the result is always a
    string.
    """
    out = text if isinstance(text, str) else str(text)
    for secret in secrets:
        if secret and len(secret) >= _MIN_LITERAL_SECRET:
            out = out.replace(secret, REDACTED)
    for pattern, replacement in _PATTERNS:
        out = pattern.sub(replacement, out)
    return out


def redact_mapping(value: Any, secrets: Iterable[str] = ()) -> Any:
    """Recursively redact a JSON-like structure.

    Mapping values under sensitive keys become ``REDACTED``; strings anywhere
    pass through :func:`redact_text`; other scalars are returned unchanged.
    The input is never mutated.
    """
    secrets = tuple(secrets)
    if isinstance(value, Mapping):
        out = {}
        for k, v in value.items():
            if is_sensitive_field(k) and v is not None:
                out[k] = REDACTED
            else:
                out[k] = redact_mapping(v, secrets)
        return out
    if isinstance(value, (list, tuple)):
        return [redact_mapping(v, secrets) for v in value]
    if isinstance(value, str):
        return redact_text(value, secrets)
    return value


__all__ = ["REDACTED", "is_sensitive_field", "redact_text", "redact_mapping"]
