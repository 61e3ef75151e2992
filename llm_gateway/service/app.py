"""FastAPI application for the gateway.

Routes
------
- ``GET /api/health``: liveness check.
- ``GET /api/providers``: provider catalog (conditional, long window).
- ``GET /api/providers/{provider}``: one provider (conditional, long window).
- ``GET /api/providers/{provider}/models``: models of one provider
  (conditional, medium window).
- ``POST /api/chat/stream``: NDJSON stream of ``delta`` / ``done`` / ``error``
  frames for one chat request.

Streaming
---------
The dispatcher is a synchronous generator; it is advanced in the threadpool
(``iterate_in_threadpool``) so a slow upstream never blocks the event loop.
A watcher task polls ``request.is_disconnected()`` next to the relay and
cancels the controller as soon as the client goes away. Cancelling shuts the
upstream socket down, so a worker thread blocked in a read returns at once
instead of waiting for the next upstream byte.

Collaborators (registry, httpx client factory, credential store) are stored
on ``app.state`` so tests can build an isolated app with ``create_app``.
"""
from __future__ import annotations

import asyncio
import json
from contextlib import suppress
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from starlette.concurrency import iterate_in_threadpool

from .. import __version__
from ..base.credentials import CredentialResolver
from ..base.dto import ChatStreamRequestDTO
from ..base.errors import UnknownProviderError
from ..base.http import ClientFactory
from ..base.logging import get_logger, log_event
from ..base.models import ProviderDescriptor
from ..base.registry import ProviderRegistry, get_default_registry
from ..base.streaming import StreamController, StreamingDispatcher
from ..config import get_cors_origins, get_credential_store
from .cache_headers import CacheMiddleware, CachePolicy

NDJSON_MEDIA_TYPE = "application/x-ndjson"
DISCONNECT_POLL_SECONDS = 0.1

_logger = get_logger("gateway.service")


def _registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


async def _watch_disconnect(request: Request, on_disconnect: Callable[[], None]) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)
    on_disconnect()


def _describe_or_404(request: Request, provider: str) -> ProviderDescriptor:
    try:
        return _registry(request).describe(provider)
    except UnknownProviderError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _cached(request: Request, endpoint: str, produce) -> Response:
    return CacheMiddleware(CachePolicy.for_endpoint(endpoint)).respond(request, produce)


def health() -> Dict[str, Any]:
    """Check the health status of the service."""
    return {"ok": True}


def get_providers(request: Request) -> Response:
    """List every provider in the registry with its models and tunables."""
    registry = _registry(request)
    return _cached(request, "providers", lambda: {"providers": [d.to_dict() for d in registry]})


def get_provider(provider: str, request: Request) -> Response:
    descriptor = _describe_or_404(request, provider)
    return _cached(request, "provider", descriptor.to_dict)


def get_provider_models(provider: str, request: Request) -> Response:
    descriptor = _describe_or_404(request, provider)
    return _cached(
        request,
        "models",
        lambda: {
            "provider": descriptor.provider_id,
            "allowsCustomModels": descriptor.allows_custom_models,
            "models": [m.to_dict() for m in descriptor.models],
        },
    )


def chat_stream(body: ChatStreamRequestDTO, request: Request) -> StreamingResponse:
    """Stream one chat completion as NDJSON frames.

    Shape errors in the body are rejected by FastAPI with ``422``. Anything
    after that (unknown provider, out-of-range tunables, upstream failures)
    arrives as a final ``error`` frame on a ``200`` stream.
    """
    state = request.app.state
    config, messages, params = body.to_domain()
    dispatcher = StreamingDispatcher(
        state.registry,
        resolver=CredentialResolver(state.registry, store=state.credential_store),
        client_factory=state.client_factory,
    )
    controller = StreamController(dispatcher, config, messages, params)

    def drop_client() -> None:
        if controller.finished or controller.token.cancelled:
            return
        log_event(_logger, "stream.client_disconnected", dispatcher.ctx)
        controller.cancel("client disconnected")

    async def iter_ndjson() -> AsyncIterator[bytes]:
        watcher = asyncio.create_task(_watch_disconnect(request, drop_client))
        try:
            async for event in iterate_in_threadpool(iter(controller)):
                yield (json.dumps(event.to_frame(), ensure_ascii=False) + "\n").encode("utf-8")
        finally:
            watcher.cancel()
            drop_client()
            # ValueError: generator still running in a worker thread; the token unblocks it
            with suppress(ValueError):
                controller.close()

    return StreamingResponse(
        iter_ndjson(),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-store", "X-Request-Id": dispatcher.ctx.request_id},
    )


def create_app(
    registry: Optional[ProviderRegistry] = None,
    *,
    client_factory: Optional[ClientFactory] = None,
    credential_store: Optional[Mapping[str, str]] = None,
) -> FastAPI:
    """Build a gateway application.

    Parameters
    ----------
    registry:
        Provider table; defaults to the shared catalog.
    client_factory:
        httpx client factory passed to every dispatcher (tests inject a
        ``MockTransport``-backed one).
    credential_store:
        ``credential_ref -> secret``; defaults to the ``credentials`` section
        of the config file.
    """
    application = FastAPI(title="LLM Gateway", version=__version__)
    application.state.registry = registry or get_default_registry()
    application.state.client_factory = client_factory
    application.state.credential_store = dict(
        get_credential_store() if credential_store is None else credential_store
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_api_route("/api/health", health, methods=["GET"])
    application.add_api_route("/api/providers", get_providers, methods=["GET"])
    application.add_api_route("/api/providers/{provider}", get_provider, methods=["GET"])
    application.add_api_route("/api/providers/{provider}/models", get_provider_models, methods=["GET"])
    application.add_api_route("/api/chat/stream", chat_stream, methods=["POST"])
    return application


app = create_app()


__all__ = ["app", "create_app", "NDJSON_MEDIA_TYPE"]
