"""Streaming dispatcher: one chat request, one upstream POST, one event stream.

Lifecycle
---------
``IDLE -> VALIDATING -> RESOLVING -> CONNECTING -> STREAMING -> COMPLETED``
with ``FAILED`` and ``CANCELLED`` reachable from every non-terminal state.
The current state is ``dispatcher.state``; every transition is appended to
``dispatcher.history`` and logged as ``dispatch.state``.

- VALIDATING rejects an empty message list, resolves the model and checks
  the generation parameters. No HTTP client exists yet, so local failures
  never touch the network.
- RESOLVING picks endpoint and credential and builds the wire request.
- CONNECTING opens the httpx stream. A non-2xx answer is read in full and
  raised as :class:`UpstreamHTTPError` (status, body, ``Retry-After``).
- STREAMING starts at the first framed upstream record. Deltas are yielded
  as soon as their record is decoded, in upstream order.
- COMPLETED is reached on the provider's terminal record (or, for families
  without one, a clean end of body) and yields exactly one :class:`Done`.
  A body that ends before the terminal record raises
  :class:`StreamTruncatedError` and fails as a network error.
- FAILED: any raw failure is classified once, here, with the resolved
  credential passed as a literal secret; the :class:`ErrorEvent` is the last
  event. Deltas already delivered are not retracted.
- CANCELLED: the token was cancelled or the caller closed the generator.
  No further events are yielded. A token callback aborts the upstream
  response (socket shutdown, see :func:`abort_response`) so a read blocked
  in another thread returns immediately.

Timeouts
--------
``connect_timeout_seconds`` bounds CONNECTING (httpx ``ConnectTimeout`` is a
network error); ``idle_timeout_seconds`` is the httpx read timeout and
bounds the silence between two upstream chunks (:class:`StreamIdleTimeout`,
classified as service-unavailable).
"""
from __future__ import annotations

import logging
import time
import uuid
from contextlib import ExitStack
from typing import Iterator, List, Optional, Sequence, Tuple

import httpx

from ..cancellation import CancellationToken, CancelledError
from ..credentials import CredentialResolver
from ..errors import (
    ErrorClassifier,
    InvalidRequestError,
    NormalizedError,
    StreamIdleTimeout,
    UpstreamHTTPError,
)
from ..http import ClientFactory, abort_response, build_stream_client
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import (
    ChatMessage,
    Done,
    ErrorEvent,
    GenerationParameters,
    ModelConfiguration,
    StreamEvent,
    TextDelta,
)
from ..registry import ProviderRegistry, get_default_registry
from ..timeouts import TimeoutConfig, get_timeout_config
from ..validation import ParameterValidator
from ..wire import StreamDecoder, WireRequest, get_wire_adapter
from .dispatch_state import DispatchState, can_transition
from .finalize import finalize_dispatch
from .metrics import StreamMetrics, apply_token_usage


class StreamingDispatcher:
    """Runs a single chat dispatch as a generator of stream events.

    Parameters
    ----------
    registry:
        Provider table; defaults to the shared read-only registry.
    validator, resolver, classifier:
        Collaborators; built from ``registry`` when omitted.
    client_factory:
        ``TimeoutConfig -> httpx.Client``; defaults to
        :func:`~llm_gateway.base.http.build_stream_client`. Tests pass a
        factory bound to an ``httpx.MockTransport``.
    timeouts:
        Connect/idle configuration; defaults to :func:`get_timeout_config`.
    token:
        Cancellation token shared with the caller (see :class:`StreamController`).
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        *,
        validator: Optional[ParameterValidator] = None,
        resolver: Optional[CredentialResolver] = None,
        classifier: Optional[ErrorClassifier] = None,
        client_factory: Optional[ClientFactory] = None,
        timeouts: Optional[TimeoutConfig] = None,
        token: Optional[CancellationToken] = None,
        logger: Optional[logging.Logger] = None,
        request_id: Optional[str] = None,
    ) -> None:
        self._registry = registry or get_default_registry()
        self._validator = validator or ParameterValidator(self._registry)
        self._resolver = resolver or CredentialResolver(self._registry)
        self._classifier = classifier or ErrorClassifier()
        self._client_factory = client_factory or build_stream_client
        self._timeouts = timeouts or get_timeout_config()
        self.token = token or CancellationToken()
        self._logger = logger or get_logger("gateway.dispatch")
        self.ctx = LogContext(request_id=request_id or uuid.uuid4().hex)
        self.metrics = StreamMetrics()
        self.failure: Optional[NormalizedError] = None
        self._state = DispatchState.IDLE
        self._history: List[DispatchState] = [DispatchState.IDLE]
        self._started = False
        self._secrets: Tuple[str, ...] = ()
        self._done_delivered = False
        self._t0 = 0.0

    # public surface ---------------------------------------------------------
    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def history(self) -> Tuple[DispatchState, ...]:
        return tuple(self._history)

    def dispatch(
        self,
        config: ModelConfiguration,
        messages: Sequence[ChatMessage],
        params: Optional[GenerationParameters] = None,
    ) -> Iterator[StreamEvent]:
        """Return the event generator for one request.

        Raises:
            RuntimeError: If this dispatcher has already been used.
        """
        if self._started:
            raise RuntimeError("StreamingDispatcher instances run a single dispatch")
        self._started = True
        return self._run(config, tuple(messages), params or GenerationParameters())

    # lifecycle --------------------------------------------------------------
    def _run(
        self,
        config: ModelConfiguration,
        messages: Tuple[ChatMessage, ...],
        params: GenerationParameters,
    ) -> Iterator[StreamEvent]:
        self._t0 = time.perf_counter()
        self.ctx.provider = config.provider
        self.ctx.model = config.model_id
        try:
            with ExitStack() as stack:
                request, decoder = self._prepare(config, messages, params)
                response = self._connect(stack, request)
                yield from self._pump(response, request, decoder)
            self._complete()
        except GeneratorExit:
            if self._done_delivered:
                self._complete()
            else:
                self._cancel("consumer closed")
            raise
        except CancelledError:
            self._cancel(self.token.reason)
        except Exception as exc:  # noqa: BLE001 - every failure becomes an error event
            if self.token.cancelled:
                # closing the response from another thread surfaces as a read error
                self._cancel(self.token.reason)
                return
            yield ErrorEvent(self._fail(exc))

    def _prepare(
        self,
        config: ModelConfiguration,
        messages: Tuple[ChatMessage, ...],
        params: GenerationParameters,
    ) -> Tuple[WireRequest, StreamDecoder]:
        self._transition(DispatchState.VALIDATING)
        if not messages:
            raise InvalidRequestError("At least one message is required.")
        model = self._registry.resolve_model(config.provider, config.model_id)
        self.ctx.model = model.model_id
        self._validator.validate(config.provider, params, model_id=model.model_id)

        self._transition(DispatchState.RESOLVING)
        target = self._resolver.resolve(config, self.ctx)
        if target.credential:
            self._secrets = (target.credential,)
        descriptor = self._registry.describe(config.provider)
        self.ctx.provider = descriptor.provider_id
        adapter = get_wire_adapter(descriptor.wire_format)
        request = adapter.build_request(target, model, messages, params)
        return request, adapter.new_decoder()

    def _connect(self, stack: ExitStack, request: WireRequest) -> httpx.Response:
        self._transition(DispatchState.CONNECTING)
        self.token.raise_if_cancelled()
        normalized_log_event(
            self._logger,
            "stream.start",
            self.ctx,
            phase="start",
            secrets=self._secrets,
            url=request.url,
            framing=request.framing,
        )
        client = stack.enter_context(self._client_factory(self._timeouts))
        try:
            response = stack.enter_context(
                client.stream("POST", request.url, json=request.body, headers=request.headers)
            )
        except httpx.ReadTimeout:
            raise StreamIdleTimeout(self._timeouts.idle_timeout_seconds) from None
        callback = self.token.on_cancel(lambda: abort_response(response))
        stack.callback(self.token.remove_callback, callback)
        self.token.raise_if_cancelled()
        if not response.is_success:
            response.read()
            raise UpstreamHTTPError(
                status_code=response.status_code,
                body=response.text,
                retry_after=response.headers.get("retry-after"),
                provider=self.ctx.provider,
            )
        return response

    def _pump(self, response: httpx.Response, request: WireRequest, decoder: StreamDecoder) -> Iterator[StreamEvent]:
        records = request.records(response.iter_lines())
        while True:
            try:
                record = next(records, None)
            except httpx.ReadTimeout:
                raise StreamIdleTimeout(self._timeouts.idle_timeout_seconds) from None
            self.token.raise_if_cancelled()
            if record is None:
                break
            if self._state is DispatchState.CONNECTING:
                self._transition(DispatchState.STREAMING)
            event_name, data = record
            for event in decoder.feed(event_name, data):
                yield from self._emit(event)
            if decoder.done:
                return
        if self._state is DispatchState.CONNECTING:
            self._transition(DispatchState.STREAMING)
        tail = decoder.close()
        if tail is not None:
            yield from self._emit(tail)

    def _emit(self, event: StreamEvent) -> Iterator[StreamEvent]:
        if isinstance(event, Done):
            apply_token_usage(self.metrics, event.usage)
            self._done_delivered = True
            yield event
            return
        if isinstance(event, TextDelta):
            if self.metrics.emitted == 0:
                self.metrics.time_to_first_token_ms = (time.perf_counter() - self._t0) * 1000.0
            self.metrics.emitted += 1
        yield event
        self.token.raise_if_cancelled()

    # terminal transitions ---------------------------------------------------
    def _complete(self) -> None:
        self._transition(DispatchState.COMPLETED)
        self._finalize(DispatchState.COMPLETED)

    def _fail(self, exc: Exception) -> NormalizedError:
        error = self._classifier.classify(exc, secrets=self._secrets, ctx=self.ctx)
        self.failure = error
        self._transition(DispatchState.FAILED, error_code=error.kind.value)
        self._finalize(DispatchState.FAILED, error=error)
        return error

    def _cancel(self, reason: Optional[str]) -> None:
        if self._state.terminal:
            return
        self._transition(DispatchState.CANCELLED)
        self._finalize(DispatchState.CANCELLED, cancel_reason=reason or "operation cancelled")

    def _finalize(self, state: DispatchState, **kwargs) -> None:
        self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        finalize_dispatch(
            logger=self._logger,
            ctx=self.ctx,
            state=state,
            metrics=self.metrics,
            secrets=self._secrets,
            **kwargs,
        )

    def _transition(self, target: DispatchState, *, error_code: Optional[str] = None) -> None:
        if not can_transition(self._state, target):
            raise RuntimeError(f"illegal dispatch transition {self._state.value} -> {target.value}")
        previous, self._state = self._state, target
        self._history.append(target)
        self.ctx.state = target.value
        normalized_log_event(
            self._logger,
            "dispatch.state",
            self.ctx,
            phase=target.value,
            error_code=error_code,
            level=logging.DEBUG,
            previous=previous.value,
        )


__all__ = ["StreamingDispatcher"]
