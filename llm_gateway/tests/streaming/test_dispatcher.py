"""End-to-end dispatch against an in-process upstream (httpx.MockTransport).

Scenarios use the ``alpha`` test provider: OpenAI wire format, one model
(``alpha-large``) and a temperature range of ``[0, 1]``.
"""
from __future__ import annotations

import threading
import time

import httpx
import pytest

from llm_gateway.base.errors import ErrorKind
from llm_gateway.base.models import ChatMessage, Done, ErrorEvent, GenerationParameters, ModelConfiguration, TextDelta
from llm_gateway.base.streaming import DispatchState, StreamController, StreamingDispatcher
from llm_gateway.base.timeouts import TimeoutConfig
from llm_gateway.tests.helpers import (
    ALPHA_ENDPOINT,
    ChunkStream,
    EventCapture,
    StallingUpstream,
    Upstream,
    build_alpha_registry,
    openai_chunk,
    sse_body,
    streaming,
)

CONFIG = ModelConfiguration("alpha", "alpha-large")
MESSAGES = [ChatMessage("user", "Say hello")]


def _dispatcher(registry, upstream: Upstream, **kwargs) -> StreamingDispatcher:
    return StreamingDispatcher(registry, client_factory=upstream.factory(), **kwargs)


def test_successful_stream_yields_deltas_then_single_done(alpha_registry, alpha_key) -> None:
    body = sse_body(
        openai_chunk("Hel"),
        openai_chunk("lo"),
        openai_chunk(finish_reason="stop"),
        openai_chunk(usage={"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}),
    )
    upstream = Upstream(streaming(body))
    dispatcher = _dispatcher(alpha_registry, upstream)

    events = list(dispatcher.dispatch(CONFIG, MESSAGES, GenerationParameters(temperature=0.5)))

    assert events == [  # nosec B101
        TextDelta("Hel"),
        TextDelta("lo"),
        Done(finish_reason="stop", usage={"prompt": 3, "completion": 2, "total": 5}),
    ]
    assert dispatcher.state is DispatchState.COMPLETED  # nosec B101
    assert dispatcher.history == (  # nosec B101
        DispatchState.IDLE,
        DispatchState.VALIDATING,
        DispatchState.RESOLVING,
        DispatchState.CONNECTING,
        DispatchState.STREAMING,
        DispatchState.COMPLETED,
    )
    assert upstream.calls == 1  # nosec B101
    sent = upstream.requests[0]
    assert str(sent.url) == f"{ALPHA_ENDPOINT}/chat/completions"  # nosec B101
    assert sent.headers["authorization"] == f"Bearer {alpha_key}"  # nosec B101
    assert upstream.json_body()["temperature"] == 0.5  # nosec B101
    assert dispatcher.metrics.emitted == 2 and dispatcher.metrics.total_tokens == 5  # nosec B101


def test_out_of_range_parameter_fails_before_any_network_call(alpha_registry, alpha_key) -> None:
    upstream = Upstream(streaming(sse_body(openai_chunk("never"))))
    dispatcher = _dispatcher(alpha_registry, upstream)

    events = list(dispatcher.dispatch(CONFIG, MESSAGES, GenerationParameters(temperature=5.0)))

    assert upstream.calls == 0  # nosec B101
    assert len(events) == 1 and isinstance(events[0], ErrorEvent)  # nosec B101
    error = events[0].error
    assert error.kind is ErrorKind.INVALID_REQUEST  # nosec B101
    assert error.details == {"field": "temperature", "value": 5.0, "allowedRange": [0, 1]}  # nosec B101
    assert dispatcher.state is DispatchState.FAILED  # nosec B101
    assert DispatchState.CONNECTING not in dispatcher.history  # nosec B101


def test_rate_limit_response_maps_to_rate_limit_with_retry_hint(alpha_registry, alpha_key) -> None:
    body = b'{"error": {"message": "Rate limit reached", "type": "requests", "code": "rate_limit_exceeded"}}'
    upstream = Upstream(streaming(body, 429, {"content-type": "application/json", "retry-after": "12"}))

    events = list(_dispatcher(alpha_registry, upstream).dispatch(CONFIG, MESSAGES))

    assert len(events) == 1  # nosec B101
    frame = events[0].to_frame()
    assert frame["type"] == "error" and frame["kind"] == "rate-limit"  # nosec B101
    assert frame["retryAfter"] == 12  # nosec B101


def test_insufficient_quota_maps_to_payment_required(alpha_registry, alpha_key) -> None:
    body = b'{"error": {"message": "You exceeded your current quota", "type": "insufficient_quota", "code": "insufficient_quota"}}'
    upstream = Upstream(streaming(body, 429, {"content-type": "application/json"}))

    (event,) = list(_dispatcher(alpha_registry, upstream).dispatch(CONFIG, MESSAGES))

    assert event.error.kind is ErrorKind.PAYMENT_REQUIRED  # nosec B101


def test_mid_stream_error_keeps_delivered_deltas(alpha_registry, alpha_key) -> None:
    body = sse_body(openai_chunk("partial"), {"error": {"message": "The server is overloaded", "type": "server_error"}}, done=False)
    dispatcher = _dispatcher(alpha_registry, Upstream(streaming(body)))

    events = list(dispatcher.dispatch(CONFIG, MESSAGES))

    assert events[0] == TextDelta("partial")  # nosec B101
    assert isinstance(events[-1], ErrorEvent) and len(events) == 2  # nosec B101
    assert events[-1].error.kind is ErrorKind.SERVICE_UNAVAILABLE  # nosec B101
    assert dispatcher.failure == events[-1].error  # nosec B101


def test_malformed_chunk_is_reported_as_unknown(alpha_registry, alpha_key) -> None:
    body = sse_body(openai_chunk("ok"), "{broken", done=False)
    events = list(_dispatcher(alpha_registry, Upstream(streaming(body))).dispatch(CONFIG, MESSAGES))
    assert [type(e) for e in events] == [TextDelta, ErrorEvent]  # nosec B101
    assert events[-1].error.kind is ErrorKind.UNKNOWN  # nosec B101


def test_idle_timeout_while_streaming_is_service_unavailable(alpha_registry, alpha_key) -> None:
    def stall(index: int) -> None:
        if index == 1:
            raise httpx.ReadTimeout("no data")

    chunks = [sse_body(openai_chunk("first"), done=False), b"data: never\n\n"]

    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream(chunks, stall), headers={"content-type": "text/event-stream"})

    events = list(_dispatcher(alpha_registry, Upstream(respond)).dispatch(CONFIG, MESSAGES))

    assert events[0] == TextDelta("first")  # nosec B101
    assert events[-1].error.kind is ErrorKind.SERVICE_UNAVAILABLE  # nosec B101
    assert events[-1].error.retry_after is not None  # nosec B101


def test_connect_failure_is_network_error(alpha_registry, alpha_key) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    (event,) = list(_dispatcher(alpha_registry, Upstream(refuse)).dispatch(CONFIG, MESSAGES))
    assert event.error.kind is ErrorKind.NETWORK_ERROR  # nosec B101


def test_connect_timeout_is_network_error(alpha_registry, alpha_key) -> None:
    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    dispatcher = _dispatcher(alpha_registry, Upstream(stall))
    (event,) = list(dispatcher.dispatch(CONFIG, MESSAGES))
    assert event.error.kind is ErrorKind.NETWORK_ERROR  # nosec B101
    assert dispatcher.state is DispatchState.FAILED  # nosec B101


def test_connection_drop_mid_stream_is_network_error(alpha_registry, alpha_key) -> None:
    def drop(index: int) -> None:
        if index == 1:
            raise httpx.RemoteProtocolError("peer closed connection without sending complete message body")

    chunks = [sse_body(openai_chunk("Hel"), openai_chunk("lo"), done=False), b"data: never\n\n"]

    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=ChunkStream(chunks, drop), headers={"content-type": "text/event-stream"})

    events = list(_dispatcher(alpha_registry, Upstream(respond)).dispatch(CONFIG, MESSAGES))

    assert events[:2] == [TextDelta("Hel"), TextDelta("lo")]  # nosec B101
    assert len(events) == 3 and events[-1].error.kind is ErrorKind.NETWORK_ERROR  # nosec B101


def test_body_ending_without_terminal_record_fails(alpha_registry, alpha_key) -> None:
    body = sse_body(openai_chunk("partial"), done=False)
    dispatcher = _dispatcher(alpha_registry, Upstream(streaming(body)))

    events = list(dispatcher.dispatch(CONFIG, MESSAGES))

    assert events[0] == TextDelta("partial")  # nosec B101
    assert len(events) == 2 and isinstance(events[-1], ErrorEvent)  # nosec B101
    assert events[-1].error.kind is ErrorKind.NETWORK_ERROR  # nosec B101
    assert dispatcher.state is DispatchState.FAILED  # nosec B101
    assert not any(isinstance(e, Done) for e in events)  # nosec B101


def test_empty_message_list_is_rejected_locally(alpha_registry, alpha_key) -> None:
    upstream = Upstream(streaming(sse_body(openai_chunk("x"))))
    (event,) = list(_dispatcher(alpha_registry, upstream).dispatch(CONFIG, []))
    assert event.error.kind is ErrorKind.INVALID_REQUEST  # nosec B101
    assert "message" in event.error.message  # nosec B101
    assert upstream.calls == 0  # nosec B101


def test_missing_credential_is_authentication_without_network(alpha_registry) -> None:
    upstream = Upstream(streaming(sse_body()))
    (event,) = list(_dispatcher(alpha_registry, upstream).dispatch(CONFIG, MESSAGES))
    assert event.error.kind is ErrorKind.AUTHENTICATION  # nosec B101
    assert upstream.calls == 0  # nosec B101


def test_unknown_provider_is_invalid_request(alpha_registry) -> None:
    upstream = Upstream(streaming(sse_body()))
    (event,) = list(_dispatcher(alpha_registry, upstream).dispatch(ModelConfiguration("beta"), MESSAGES))
    assert event.error.kind is ErrorKind.INVALID_REQUEST  # nosec B101
    assert upstream.calls == 0  # nosec B101


def test_unknown_model_is_model_not_found(alpha_registry, alpha_key) -> None:
    (event,) = list(
        _dispatcher(alpha_registry, Upstream(streaming(sse_body()))).dispatch(ModelConfiguration("alpha", "nope"), MESSAGES)
    )
    assert event.error.kind is ErrorKind.MODEL_NOT_FOUND  # nosec B101


def test_cancellation_after_first_delta_closes_upstream(alpha_registry, alpha_key) -> None:
    stream = ChunkStream([sse_body(openai_chunk("one"), done=False), sse_body(openai_chunk("two"))])

    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=stream, headers={"content-type": "text/event-stream"})

    upstream = Upstream(respond)
    dispatcher = _dispatcher(alpha_registry, upstream)
    controller = StreamController(dispatcher, CONFIG, MESSAGES)

    seen = []
    for event in controller:
        seen.append(event)
        controller.cancel("user pressed stop")

    assert seen == [TextDelta("one")]  # nosec B101
    assert controller.state is DispatchState.CANCELLED  # nosec B101
    assert controller.finished and controller.terminal_event is None  # nosec B101
    assert stream.closed  # nosec B101
    assert upstream.calls == 1  # nosec B101


def test_cancel_from_another_thread_interrupts_a_blocked_read(alpha_key, direct_network) -> None:
    with StallingUpstream(sse_body(openai_chunk("one"), done=False)) as server:
        registry = build_alpha_registry(default_endpoint=server.url)
        dispatcher = StreamingDispatcher(registry, timeouts=TimeoutConfig(2.0, 10.0))
        controller = StreamController(dispatcher, CONFIG, MESSAGES)
        seen = []
        first = threading.Event()

        def consume() -> None:
            for event in controller:
                seen.append(event)
                first.set()

        worker = threading.Thread(target=consume, daemon=True)
        worker.start()
        assert first.wait(5)  # nosec B101
        time.sleep(0.1)
        started = time.monotonic()
        controller.cancel("user pressed stop")
        worker.join(timeout=5)
        elapsed = time.monotonic() - started
        assert server.peer_closed.wait(2)  # nosec B101

    assert not worker.is_alive()  # nosec B101
    assert elapsed < 2.0  # nosec B101
    assert seen == [TextDelta("one")]  # nosec B101
    assert controller.state is DispatchState.CANCELLED  # nosec B101


def test_cancellation_before_start_never_connects(alpha_registry, alpha_key) -> None:
    upstream = Upstream(streaming(sse_body(openai_chunk("x"))))
    dispatcher = _dispatcher(alpha_registry, upstream)
    dispatcher.token.cancel("gone")

    assert list(dispatcher.dispatch(CONFIG, MESSAGES)) == []  # nosec B101
    assert dispatcher.state is DispatchState.CANCELLED  # nosec B101
    assert upstream.calls == 0  # nosec B101


def test_closing_generator_mid_stream_counts_as_cancelled(alpha_registry, alpha_key) -> None:
    body = sse_body(openai_chunk("a"), openai_chunk("b"))
    dispatcher = _dispatcher(alpha_registry, Upstream(streaming(body)))
    events = dispatcher.dispatch(CONFIG, MESSAGES)
    assert next(events) == TextDelta("a")  # nosec B101
    events.close()
    assert dispatcher.state is DispatchState.CANCELLED  # nosec B101


def test_dispatcher_runs_a_single_dispatch(alpha_registry, alpha_key) -> None:
    dispatcher = _dispatcher(alpha_registry, Upstream(streaming(sse_body())))
    dispatcher.dispatch(CONFIG, MESSAGES)
    with pytest.raises(RuntimeError):
        dispatcher.dispatch(CONFIG, MESSAGES)


def test_credential_never_reaches_logs_or_events(alpha_registry, alpha_key) -> None:
    body = ('{"error": {"message": "Incorrect API key provided: %s", "code": "invalid_api_key"}}' % alpha_key).encode()
    upstream = Upstream(streaming(body, 401, {"content-type": "application/json"}))
    with EventCapture() as cap:
        (event,) = list(_dispatcher(alpha_registry, upstream).dispatch(CONFIG, MESSAGES))
    assert event.error.kind is ErrorKind.AUTHENTICATION  # nosec B101
    assert alpha_key not in str(event.to_frame())  # nosec B101
    assert alpha_key not in cap.text  # nosec B101
    assert cap.named("stream.error")  # nosec B101


def test_lifecycle_log_events(alpha_registry, alpha_key) -> None:
    upstream = Upstream(streaming(sse_body(openai_chunk("x"))))
    with EventCapture() as cap:
        list(_dispatcher(alpha_registry, upstream, request_id="req-1").dispatch(CONFIG, MESSAGES))
    (start,) = cap.named("stream.start")
    (end,) = cap.named("stream.end")
    assert start["request_id"] == end["request_id"] == "req-1"  # nosec B101
    assert end["emitted_count"] == 1 and end["phase"] == "finalize"  # nosec B101
    assert cap.named("credential.resolved")[0]["source"] == "env:ALPHA_API_KEY"  # nosec B101
