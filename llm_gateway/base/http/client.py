"""Per-dispatch HTTP client construction.

Purpose:
    Build the ``httpx.Client`` a single dispatch uses for its one upstream
    POST. Timeouts derive exclusively from :class:`TimeoutConfig`; no
    numeric literals are introduced here.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - ``connect`` bounds the CONNECTING state.
    - ``read`` is the idle window between two upstream chunks; httpx raises
      ``ReadTimeout`` when it elapses, which the dispatcher maps to
      :class:`StreamIdleTimeout`.

Lifecycle & cleanup:
    - The caller owns the returned client and closes it when the dispatch
      ends (the dispatcher registers ``close`` on its ``ExitStack``).
    - Nothing is cached between requests, so concurrent dispatches share no
      connection state.

Cancellation:
    - :func:`abort_response` shuts the response socket down so a read blocked
      in another thread returns at once; ``Response.close`` alone does not
      wake a pending ``recv``.

Testing:
    - ``transport`` accepts an ``httpx.MockTransport`` (or any
      ``httpx.BaseTransport``) so upstreams can be simulated in-process.
"""

from __future__ import annotations

import socket
from contextlib import suppress
from typing import Callable, Optional

import httpx

from ..timeouts import TimeoutConfig, get_timeout_config

ClientFactory = Callable[[TimeoutConfig], httpx.Client]


def build_stream_client(
    timeouts: Optional[TimeoutConfig] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Return a fresh ``httpx.Client`` configured for one streaming call.

    Parameters:
        timeouts: Connect/idle configuration; defaults to
            :func:`get_timeout_config`.
        transport: Optional transport override (tests, proxies).

    Returns:
        A new client; redirects are not followed so a misconfigured endpoint
        surfaces as an upstream status instead of a silent hop.
    """
    cfg = timeouts or get_timeout_config()
    kwargs = {"timeout": cfg.to_httpx(), "follow_redirects": False}
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.Client(**kwargs)


def client_factory_for(transport: httpx.BaseTransport) -> ClientFactory:
    """Return a :data:`ClientFactory` that always uses ``transport``."""

    def _factory(timeouts: TimeoutConfig) -> httpx.Client:
        return build_stream_client(timeouts, transport=transport)

    return _factory


def abort_response(response: httpx.Response) -> None:
    """Interrupt ``response`` from any thread.

    Real connections expose their ``network_stream``; its socket is shut down
    in both directions so the reader sees end of stream immediately and the
    reading thread releases the connection on its way out. In-process
    transports have no socket and are closed directly.
    """
    network_stream = response.extensions.get("network_stream")
    sock = network_stream.get_extra_info("socket") if network_stream is not None else None
    if sock is None:
        response.close()
        return
    with suppress(OSError):
        # already closed by the peer
        sock.shutdown(socket.SHUT_RDWR)


__all__ = ["ClientFactory", "build_stream_client", "client_factory_for", "abort_response"]
