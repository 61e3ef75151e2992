"""
Error classification: raw failure -> :class:`NormalizedError`.

Precedence:
    1. Typed local errors (validation, registry, credentials, idle timeout,
       malformed chunks) and httpx transport errors map directly.
    2. Upstream message/code/type text against the ordered rule table.
    3. Upstream HTTP status against the same table.
    4. ``unknown`` fallback.

The raw text is redacted before it is logged, and the message returned to
callers is a fixed sentence that also passes through redaction.
"""
from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import httpx

from ...config.defaults import RETRY_AFTER_DEFAULTS
from ..log_support import LogContext
from ..logging import get_logger, log_event
from ..redaction import redact_text
from .error_kind import ErrorKind
from .exceptions import (
    InvalidRequestError,
    MalformedChunkError,
    ParameterValidationError,
    StreamIdleTimeout,
    StreamTruncatedError,
    UnknownModelError,
    UnknownProviderError,
    UnresolvableCredentialError,
    UpstreamHTTPError,
    UpstreamStreamError,
)
from .normalized_error import NormalizedError
from .rules import CLASSIFICATION_RULES, USER_MESSAGES, ClassificationRule

_RETRY_IN_RE = re.compile(
    r"(?:try again|retry|retrying)\s+(?:in|after)\s+(\d+(?:\.\d+)?)\s*(ms|milliseconds|s|sec|secs|seconds?)?",
    re.IGNORECASE,
)
_RETRY_DELAY_RE = re.compile(r"\"retryDelay\"\s*:\s*\"(\d+(?:\.\d+)?)s\"")
_RAW_LOG_LIMIT = 500


def _extract_status(exc: Any) -> Optional[int]:
    """Attempt to extract an HTTP status code from a raw error.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Mappings are read by key (``status``, ``status_code``, ``statusCode``).
    Returns ``None`` if no valid status can be found.
    """
    if isinstance(exc, Mapping):
        for key in ("status", "status_code", "statusCode"):
            val = exc.get(key)
            if isinstance(val, int) and not isinstance(val, bool) and 100 <= val < 600:
                return val
        return None
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and not isinstance(val, bool) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def _extract_code(exc: Any) -> Optional[str]:
    """Return ``exc.code`` or ``exc.__cause__.code`` when it is a string."""
    if isinstance(exc, Mapping):
        code = exc.get("code")
        return code if isinstance(code, str) and code else None
    for candidate in (exc, getattr(exc, "__cause__", None)):
        code = getattr(candidate, "code", None)
        if isinstance(code, str) and code:
            return code
    return None


def _fields_from_body(body: str) -> Tuple[str, ...]:
    """Pull message/code/type/status strings out of a JSON error body.

    Handles the common envelopes: ``{"error": {...}}``, ``[{"error": {...}}]``
    and flat ``{"message": ...}``. Falls back to the raw body text.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return (body,)
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, Mapping):
        return (body,)
    err = data.get("error", data)
    if isinstance(err, str):
        return (err,)
    if not isinstance(err, Mapping):
        return (body,)
    out = []
    for key in ("message", "code", "type", "status"):
        val = err.get(key)
        if isinstance(val, (str, int)) and not isinstance(val, bool):
            out.append(str(val))
    return tuple(out) or (body,)


def _parse_retry_after_header(value: Optional[str]) -> Optional[int]:
    """Parse a ``Retry-After`` header given as seconds or as an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return int(math.ceil(seconds))


def _parse_retry_from_text(text: str) -> Optional[int]:
    m = _RETRY_DELAY_RE.search(text)
    if m:
        return int(math.ceil(float(m.group(1))))
    m = _RETRY_IN_RE.search(text)
    if not m:
        return None
    amount = float(m.group(1))
    unit = (m.group(2) or "s").lower()
    if unit.startswith("m"):
        amount /= 1000.0
    return max(1, int(math.ceil(amount)))


class ErrorClassifier:
    """Maps any raw failure onto the fixed taxonomy.

    ``classify`` is total: whatever it is handed, it returns a
    :class:`NormalizedError` and never raises.
    """

    def __init__(
        self,
        rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES,
        *,
        retry_defaults: Optional[Mapping[str, int]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._rules = tuple(rules)
        self._retry_defaults = dict(RETRY_AFTER_DEFAULTS if retry_defaults is None else retry_defaults)
        self._logger = logger or get_logger("gateway.errors")

    def classify(
        self,
        raw: Any,
        *,
        secrets: Iterable[str] = (),
        ctx: Optional[LogContext] = None,
    ) -> NormalizedError:
        """Classify ``raw`` and log the redacted original.

        Parameters
        ----------
        raw: Any
            Exception, string, mapping or arbitrary object.
        secrets: Iterable[str]
            Literal secrets (e.g. the credential used for the request) to
            strip from anything logged or returned.
        ctx: Optional[LogContext]
            Logging context of the surrounding dispatch.
        """
        secrets = tuple(s for s in secrets if s)
        try:
            result, status, code = self._classify(raw, secrets)
        except Exception as exc:  # noqa: BLE001 - classification must stay total
            log_event(
                self._logger,
                "error.classifier_failure",
                ctx,
                level=logging.WARNING,
                failure_class=exc.__class__.__name__,
            )
            result = NormalizedError(kind=ErrorKind.UNKNOWN, message=USER_MESSAGES[ErrorKind.UNKNOWN])
            status, code = None, None
        log_event(
            self._logger,
            "error.classified",
            ctx,
            secrets=secrets,
            kind=result.kind.value,
            status=status,
            upstream_code=code,
            retry_after=result.retry_after,
            raw_type=type(raw).__name__,
            raw=redact_text(_safe_str(raw), secrets)[:_RAW_LOG_LIMIT],
        )
        return result

    # ------------------------------------------------------------------
    def _classify(self, raw: Any, secrets: Tuple[str, ...]) -> Tuple[NormalizedError, Optional[int], Optional[str]]:
        direct = self._classify_local(raw, secrets)
        if direct is not None:
            return direct, None, None

        status = _extract_status(raw)
        code = _extract_code(raw)
        texts = list(self._texts(raw))
        if code:
            texts.append(code)
        haystack = " ".join(texts).lower()

        kind = self._match(haystack, status)
        retry_after = self._retry_after(kind, raw, " ".join(texts))
        return self._build(kind, secrets, retry_after=retry_after), status, code

    def _classify_local(self, raw: Any, secrets: Tuple[str, ...]) -> Optional[NormalizedError]:
        if isinstance(raw, ParameterValidationError):
            return NormalizedError(
                kind=ErrorKind.INVALID_REQUEST,
                message=redact_text(str(raw), secrets),
                details=raw.details(),
            )
        if isinstance(raw, InvalidRequestError):
            return NormalizedError(kind=ErrorKind.INVALID_REQUEST, message=redact_text(str(raw), secrets))
        if isinstance(raw, UnknownProviderError):
            return NormalizedError(
                kind=ErrorKind.INVALID_REQUEST,
                message=redact_text(f"{raw}. Please choose a supported provider.", secrets),
            )
        if isinstance(raw, UnknownModelError):
            return self._build(ErrorKind.MODEL_NOT_FOUND, secrets)
        if isinstance(raw, UnresolvableCredentialError):
            return NormalizedError(
                kind=ErrorKind.AUTHENTICATION,
                message=redact_text(
                    f"No usable credential or endpoint for provider '{raw.provider}'. "
                    "Please check your provider credentials.",
                    secrets,
                ),
            )
        if isinstance(raw, (StreamIdleTimeout, httpx.ReadTimeout, httpx.PoolTimeout)):
            return self._build(
                ErrorKind.SERVICE_UNAVAILABLE,
                secrets,
                retry_after=self._retry_defaults.get(ErrorKind.SERVICE_UNAVAILABLE.value),
            )
        if isinstance(raw, MalformedChunkError):
            return self._build(ErrorKind.UNKNOWN, secrets)
        if isinstance(raw, (StreamTruncatedError, httpx.TransportError, ConnectionError)):
            return self._build(
                ErrorKind.NETWORK_ERROR,
                secrets,
                retry_after=self._retry_defaults.get(ErrorKind.NETWORK_ERROR.value),
            )
        return None

    @staticmethod
    def _texts(raw: Any) -> Iterable[str]:
        if isinstance(raw, UpstreamHTTPError):
            yield from _fields_from_body(raw.body)
            return
        if isinstance(raw, UpstreamStreamError):
            yield raw.message
            return
        if isinstance(raw, Mapping):
            yield from _fields_from_body(json.dumps(raw, default=str))
            return
        yield _safe_str(raw)

    def _match(self, haystack: str, status: Optional[int]) -> ErrorKind:
        for rule in self._rules:
            if rule.matches_text(haystack):
                return rule.kind
        for rule in self._rules:
            if rule.matches_status(status):
                return rule.kind
        return ErrorKind.UNKNOWN

    def _retry_after(self, kind: ErrorKind, raw: Any, text: str) -> Optional[int]:
        hint = _parse_retry_after_header(getattr(raw, "retry_after", None)) if isinstance(raw, UpstreamHTTPError) else None
        if hint is None and kind in (ErrorKind.RATE_LIMIT, ErrorKind.SERVICE_UNAVAILABLE):
            hint = _parse_retry_from_text(text)
        if hint is None:
            hint = self._retry_defaults.get(kind.value)
        return hint

    @staticmethod
    def _build(kind: ErrorKind, secrets: Tuple[str, ...], *, retry_after: Optional[int] = None) -> NormalizedError:
        return NormalizedError(
            kind=kind,
            message=redact_text(USER_MESSAGES[kind], secrets),
            retry_after=retry_after,
        )


def _safe_str(raw: Any) -> str:
    try:
        return str(raw)
    except Exception:  # noqa: BLE001 - arbitrary __str__ implementations
        return f"<unprintable {type(raw).__name__}>"


_DEFAULT_CLASSIFIER: Optional[ErrorClassifier] = None


def classify_error(raw: Any, *, secrets: Iterable[str] = (), ctx: Optional[LogContext] = None) -> NormalizedError:
    """Classify with a process-wide default :class:`ErrorClassifier`."""
    global _DEFAULT_CLASSIFIER  # noqa: PLW0603 - lazily built stateless helper
    if _DEFAULT_CLASSIFIER is None:
        _DEFAULT_CLASSIFIER = ErrorClassifier()
    return _DEFAULT_CLASSIFIER.classify(raw, secrets=secrets, ctx=ctx)


__all__ = [
    "ErrorClassifier",
    "classify_error",
    "_extract_status",
    "_extract_code",
]
