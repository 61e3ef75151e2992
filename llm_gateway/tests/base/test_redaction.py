"""Secret redaction in free text and nested payloads."""
from __future__ import annotations

from llm_gateway.base.redaction import REDACTED, is_sensitive_field, redact_mapping, redact_text


def test_bearer_tokens_are_masked() -> None:
    out = redact_text("Authorization: Bearer abc.def-ghi")
    assert "abc.def-ghi" not in out  # nosec B101


def test_provider_key_shapes_are_masked() -> None:
    text = "keys sk-proj-ABCDEFGHIJKLMNOPQRST and AIza" + "A" * 35 + " and gsk_" + "b" * 24
    out = redact_text(text)
    assert "sk-proj-ABCDEFGHIJKLMNOPQRST" not in out  # nosec B101
    assert "AIza" + "A" * 35 not in out  # nosec B101
    assert "gsk_" + "b" * 24 not in out  # nosec B101


def test_query_parameter_keys_are_masked() -> None:
    out = redact_text("GET https://h.invalid/v1beta/models?key=abc123&alt=sse")
    assert out.endswith(f"?key={REDACTED}&alt=sse")  # nosec B101


def test_literal_secrets_are_masked_first() -> None:
    out = redact_text("token plain-value-99 leaked", secrets=["plain-value-99"])
    assert out == f"token {REDACTED} leaked"  # nosec B101


def test_short_literals_are_ignored() -> None:
    assert redact_text("a b c", secrets=["a"]) == "a b c"  # nosec B101


def test_non_string_input_is_stringified() -> None:
    assert redact_text(404) == "404"  # nosec B101


def test_mapping_redaction_is_recursive_and_non_mutating() -> None:
    payload = {"api_key": "k", "nested": {"Authorization": "Bearer x", "note": "sk-" + "z" * 20}, "items": ["ok"]}
    out = redact_mapping(payload)
    assert out["api_key"] == REDACTED  # nosec B101
    assert out["nested"]["Authorization"] == REDACTED  # nosec B101
    assert "z" * 20 not in out["nested"]["note"]  # nosec B101
    assert payload["api_key"] == "k"  # nosec B101


def test_sensitive_field_names() -> None:
    assert is_sensitive_field("X-Api-Key")  # nosec B101
    assert is_sensitive_field("access_token")  # nosec B101
    assert not is_sensitive_field("provider")  # nosec B101
