"""Error classification: taxonomy mapping, retry hints, redaction, totality."""
from __future__ import annotations

import json

import httpx
import pytest

from llm_gateway.base.errors import (
    ErrorClassifier,
    ErrorKind,
    InvalidRequestError,
    MalformedChunkError,
    NormalizedError,
    ParameterValidationError,
    StreamIdleTimeout,
    StreamTruncatedError,
    UnknownModelError,
    UnknownProviderError,
    UnresolvableCredentialError,
    UpstreamHTTPError,
    UpstreamStreamError,
    classify_error,
)
from llm_gateway.base.errors_parts.rules import USER_MESSAGES
from llm_gateway.tests.helpers import EventCapture


def _openai_error(message: str, code: str, type_: str = "invalid_request_error") -> str:
    return json.dumps({"error": {"message": message, "type": type_, "code": code}})


@pytest.fixture()
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


def test_rate_limit_uses_retry_after_header(classifier) -> None:
    raw = UpstreamHTTPError(429, _openai_error("Rate limit reached for requests", "rate_limit_exceeded", "requests"), "7")
    err = classifier.classify(raw)
    assert err.kind is ErrorKind.RATE_LIMIT  # nosec B101
    assert err.retry_after == 7  # nosec B101
    assert err.message == USER_MESSAGES[ErrorKind.RATE_LIMIT]  # nosec B101


def test_rate_limit_retry_hint_parsed_from_text(classifier) -> None:
    raw = UpstreamHTTPError(429, _openai_error("Rate limit reached. Please try again in 12.5s.", "rate_limit_exceeded"))
    assert classifier.classify(raw).retry_after == 13  # nosec B101


def test_rate_limit_default_retry_hint(classifier) -> None:
    err = classifier.classify(UpstreamHTTPError(429, "slow down"))
    assert (err.kind, err.retry_after) == (ErrorKind.RATE_LIMIT, 20)  # nosec B101


def test_insufficient_quota_on_429_is_payment_required(classifier) -> None:
    raw = UpstreamHTTPError(429, _openai_error("You exceeded your current quota", "insufficient_quota", "insufficient_quota"))
    err = classifier.classify(raw)
    assert err.kind is ErrorKind.PAYMENT_REQUIRED  # nosec B101
    assert err.retry_after is None  # nosec B101


@pytest.mark.parametrize(
    "status,body,kind",
    [
        (401, _openai_error("Incorrect API key provided", "invalid_api_key"), ErrorKind.AUTHENTICATION),
        (404, _openai_error("The model `gpt-9` does not exist", "model_not_found"), ErrorKind.MODEL_NOT_FOUND),
        (400, _openai_error("This model's maximum context length is 8192 tokens", "context_length_exceeded"), ErrorKind.CONTEXT_LENGTH_EXCEEDED),
        (400, _openai_error("Your request was rejected by the content_filter", "content_filter"), ErrorKind.CONTENT_POLICY_VIOLATION),
        (400, "{}", ErrorKind.INVALID_REQUEST),
        (503, "upstream connection reset by peer", ErrorKind.NETWORK_ERROR),
        (503, "", ErrorKind.SERVICE_UNAVAILABLE),
        (529, json.dumps({"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}), ErrorKind.SERVICE_UNAVAILABLE),
        (402, "", ErrorKind.PAYMENT_REQUIRED),
        (418, "teapot", ErrorKind.UNKNOWN),
    ],
)
def test_upstream_http_errors(classifier, status, body, kind) -> None:
    assert classifier.classify(UpstreamHTTPError(status, body)).kind is kind  # nosec B101


def test_gemini_list_envelope(classifier) -> None:
    body = json.dumps([{"error": {"code": 400, "message": "API key not valid. Please pass a valid API key.", "status": "INVALID_ARGUMENT"}}])
    assert classifier.classify(UpstreamHTTPError(400, body)).kind is ErrorKind.AUTHENTICATION  # nosec B101


def test_in_stream_error_payload(classifier) -> None:
    raw = UpstreamStreamError("Overloaded", code="overloaded_error")
    assert classifier.classify(raw).kind is ErrorKind.SERVICE_UNAVAILABLE  # nosec B101


@pytest.mark.parametrize(
    "raw,kind",
    [
        (UnknownProviderError("beta"), ErrorKind.INVALID_REQUEST),
        (UnknownModelError("alpha", "nope"), ErrorKind.MODEL_NOT_FOUND),
        (UnresolvableCredentialError("alpha", "no credential"), ErrorKind.AUTHENTICATION),
        (StreamIdleTimeout(60.0), ErrorKind.SERVICE_UNAVAILABLE),
        (MalformedChunkError("invalid JSON"), ErrorKind.UNKNOWN),
        (StreamTruncatedError("openai"), ErrorKind.NETWORK_ERROR),
        (InvalidRequestError("At least one message is required."), ErrorKind.INVALID_REQUEST),
        (httpx.ConnectError("connection refused"), ErrorKind.NETWORK_ERROR),
        (httpx.ConnectTimeout("connect timed out"), ErrorKind.NETWORK_ERROR),
        (httpx.ReadTimeout("read timed out"), ErrorKind.SERVICE_UNAVAILABLE),
        (ConnectionResetError("reset"), ErrorKind.NETWORK_ERROR),
    ],
)
def test_local_and_transport_failures(classifier, raw, kind) -> None:
    assert classifier.classify(raw).kind is kind  # nosec B101


def test_validation_failure_carries_details(classifier) -> None:
    err = classifier.classify(ParameterValidationError("temperature", 5.0, (0, 1), "alpha"))
    assert err.kind is ErrorKind.INVALID_REQUEST  # nosec B101
    assert err.to_dict()["details"] == {"field": "temperature", "value": 5.0, "allowedRange": [0, 1]}  # nosec B101


class _Unprintable:
    def __str__(self) -> str:
        raise RuntimeError("no")


@pytest.mark.parametrize("raw", [None, 42, "", "???", {"weird": object()}, [1, 2], _Unprintable(), ValueError()])
def test_classification_is_total(classifier, raw) -> None:
    err = classifier.classify(raw)
    assert isinstance(err, NormalizedError)  # nosec B101
    assert err.message  # nosec B101


def test_credentials_never_leak_into_message_or_logs(classifier) -> None:
    secret = "sk-live-abcdefghijklmnop1234567890"
    raw = UpstreamHTTPError(401, _openai_error(f"Incorrect API key provided: {secret}", "invalid_api_key"))
    with EventCapture() as cap:
        err = classifier.classify(raw, secrets=[secret])
    assert secret not in err.message  # nosec B101
    assert secret not in json.dumps(err.to_dict())  # nosec B101
    assert cap.named("error.classified")  # nosec B101
    assert secret not in cap.text  # nosec B101


@pytest.mark.parametrize("pass_secret", [True, False])
def test_secret_straddling_the_log_cut_is_fully_redacted(classifier, pass_secret) -> None:
    secret = "sk-proj-ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    prefix = "upstream HTTP 401: "
    lead = "Incorrect API key provided: "
    body = "x" * (490 - len(prefix) - len(lead)) + lead + secret
    raw = UpstreamHTTPError(401, body)
    assert str(raw).index(secret) == 490  # nosec B101

    with EventCapture() as cap:
        classifier.classify(raw, secrets=[secret] if pass_secret else [])

    (event,) = cap.named("error.classified")
    assert "sk-proj" not in event["raw"]  # nosec B101
    assert secret[:10] not in cap.text  # nosec B101


def test_literal_secret_redacted_even_without_known_shape(classifier) -> None:
    secret = "opaque-token-value-42"
    with EventCapture() as cap:
        classifier.classify(RuntimeError(f"auth failed for {secret}"), secrets=[secret])
    assert secret not in cap.text  # nosec B101


def test_module_level_helper() -> None:
    assert classify_error(UpstreamHTTPError(401, "")).kind is ErrorKind.AUTHENTICATION  # nosec B101


def test_error_frame_shape() -> None:
    err = NormalizedError(ErrorKind.RATE_LIMIT, "slow", retry_after=3)
    assert err.to_dict() == {"kind": "rate-limit", "message": "slow", "retryAfter": 3}  # nosec B101
