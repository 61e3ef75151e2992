"""Structured logging helpers."""
from __future__ import annotations

import json
import logging

from llm_gateway.base.log_support import JsonFormatter, LogContext
from llm_gateway.base.logging import REQUIRED_NORMALIZED_KEYS, get_logger, log_event, normalized_log_event
from llm_gateway.tests.helpers import EventCapture


def test_get_logger_returns_gateway_children() -> None:
    assert get_logger("dispatch").name == "gateway.dispatch"  # nosec B101
    assert get_logger("gateway.cache").name == "gateway.cache"  # nosec B101


def test_log_event_merges_context_and_drops_none() -> None:
    ctx = LogContext(provider="alpha", model="alpha-large", request_id="r1")
    with EventCapture() as cap:
        log_event(get_logger("test"), "unit.event", ctx, count=2, missing=None)
    (record,) = cap.named("unit.event")
    assert record["provider"] == "alpha" and record["request_id"] == "r1"  # nosec B101
    assert record["count"] == 2  # nosec B101
    assert "missing" not in record  # nosec B101


def test_log_event_redacts_fields_and_literals() -> None:
    with EventCapture() as cap:
        log_event(
            get_logger("test"),
            "unit.secret",
            None,
            secrets=["literal-secret-77"],
            api_key="abc",
            note="value literal-secret-77 inside",
        )
    assert "abc" not in cap.text and "literal-secret-77" not in cap.text  # nosec B101


def test_normalized_event_carries_required_keys() -> None:
    with EventCapture() as cap:
        normalized_log_event(get_logger("test"), "unit.normalized", None, phase="start", emitted=True)
    (record,) = cap.named("unit.normalized")
    for key in REQUIRED_NORMALIZED_KEYS:
        if key == "error_code":
            continue
        assert key in record  # nosec B101
    assert "error_code" not in record  # nosec B101


def test_normalized_event_extras_never_override_core_keys() -> None:
    with EventCapture() as cap:
        normalized_log_event(get_logger("test"), "unit.override", None, phase="finalize", error_code="rate-limit", phase_extra=1)
    (record,) = cap.named("unit.override")
    assert record["error_code"] == "rate-limit" and record["phase"] == "finalize"  # nosec B101


def test_json_formatter_wraps_plain_and_json_messages() -> None:
    fmt = JsonFormatter()
    plain = logging.LogRecord("gateway", logging.INFO, __file__, 1, "hello", None, None)
    structured = logging.LogRecord("gateway", logging.INFO, __file__, 1, json.dumps({"event": "x"}), None, None)
    assert json.loads(fmt.format(plain))["msg"] == "hello"  # nosec B101
    assert json.loads(fmt.format(structured))["event"] == "x"  # nosec B101
