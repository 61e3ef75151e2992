"""SSE and NDJSON record framing."""
from __future__ import annotations

from llm_gateway.base.wire import iter_ndjson_records, iter_sse_records


def test_sse_records_with_event_names_and_comments() -> None:
    lines = [
        ": keep-alive",
        "event: message_start",
        'data: {"a": 1}',
        "",
        "data: first",
        "data: second",
        "",
        "id: 7",
        "retry: 1000",
        "",
    ]
    assert list(iter_sse_records(lines)) == [("message_start", '{"a": 1}'), (None, "first\nsecond")]  # nosec B101


def test_sse_pending_record_is_flushed_at_eof() -> None:
    assert list(iter_sse_records(["data: tail"])) == [(None, "tail")]  # nosec B101


def test_sse_accepts_crlf_and_missing_space() -> None:
    assert list(iter_sse_records(["data:x\r\n", "\r\n"])) == [(None, "x")]  # nosec B101


def test_sse_is_lazy() -> None:
    def lines():
        yield "data: one"
        yield ""
        raise AssertionError("read past the first record")

    records = iter_sse_records(lines())
    assert next(records) == (None, "one")  # nosec B101


def test_ndjson_skips_blank_lines() -> None:
    assert list(iter_ndjson_records(['{"a":1}', "  ", '{"b":2}\n'])) == [(None, '{"a":1}'), (None, '{"b":2}')]  # nosec B101
