"""Shared builders for gateway tests.

- ``build_alpha_registry``: a one-provider registry (``alpha`` /
  ``alpha-large``, OpenAI wire format, temperature in ``[0, 1]``).
- ``sse_body`` / ``openai_chunk``: upstream SSE bodies.
- ``Upstream``: a recording ``httpx.MockTransport`` handler.
"""
from __future__ import annotations

import json
import logging
import socket
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

import httpx

from llm_gateway.base.logging import get_logger
from llm_gateway.base.http import ClientFactory, client_factory_for
from llm_gateway.base.models import ModelSpec, ParameterRange, ProviderDescriptor
from llm_gateway.base.registry import ProviderRegistry

ALPHA_ENDPOINT = "https://alpha.invalid/v1"
ALPHA_KEY = "alpha-secret-0123456789abcdef"


def build_alpha_registry(**overrides: Any) -> ProviderRegistry:
    fields: Dict[str, Any] = {
        "provider_id": "alpha",
        "display_name": "Alpha",
        "default_endpoint": ALPHA_ENDPOINT,
        "wire_format": "openai",
        "models": (ModelSpec("alpha-large", "Alpha Large", 32_000, 4_096),),
        "parameters": {
            "temperature": ParameterRange(0, 1),
            "max_tokens": ParameterRange(1, 100_000, integer=True),
            "top_p": ParameterRange(0, 1),
        },
    }
    fields.update(overrides)
    return ProviderRegistry([ProviderDescriptor(**fields)])


def openai_chunk(text: Optional[str] = None, finish_reason: Optional[str] = None, usage=None) -> Dict[str, Any]:
    choices: List[Dict[str, Any]] = []
    if text is not None or finish_reason is not None:
        delta = {"content": text} if text is not None else {}
        choices.append({"index": 0, "delta": delta, "finish_reason": finish_reason})
    chunk: Dict[str, Any] = {"id": "chatcmpl-1", "object": "chat.completion.chunk", "choices": choices}
    if usage is not None:
        chunk["usage"] = usage
    return chunk


def sse_body(*payloads: Any, done: bool = True) -> bytes:
    """Render payloads as SSE ``data:`` records, optionally ending with ``[DONE]``."""
    parts = [f"data: {p if isinstance(p, str) else json.dumps(p)}\n\n" for p in payloads]
    if done:
        parts.append("data: [DONE]\n\n")
    return "".join(parts).encode("utf-8")


class Upstream:
    """Recording mock upstream.

    ``respond`` receives the ``httpx.Request`` and returns an ``httpx.Response``.
    """

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = 0) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    def factory(self) -> ClientFactory:
        return client_factory_for(httpx.MockTransport(self))


def streaming(body: bytes, status_code: int = 200, headers=None) -> Callable[[httpx.Request], httpx.Response]:
    def _respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers=headers or {"content-type": "text/event-stream"})

    return _respond


class ChunkStream(httpx.SyncByteStream):
    """Byte stream yielding ``chunks`` one by one; ``on_chunk(i)`` runs before chunk ``i``."""

    def __init__(self, chunks: Iterable[bytes], on_chunk: Optional[Callable[[int], None]] = None) -> None:
        self._chunks = list(chunks)
        self._on_chunk = on_chunk
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        for i, chunk in enumerate(self._chunks):
            if self.closed:
                return
            if self._on_chunk is not None:
                self._on_chunk(i)
            yield chunk

    def close(self) -> None:
        self.closed = True


def _read_request(conn: socket.socket) -> None:
    data = b""
    while b"\r\n\r\n" not in data:
        part = conn.recv(4096)
        if not part:
            return
        data += part
    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b":")
        if name.strip().lower() == b"content-length":
            length = int(value.strip())
    while len(body) < length:
        part = conn.recv(4096)
        if not part:
            return
        body += part


class StallingUpstream:
    """Local HTTP/1.1 server that sends ``chunks`` and then goes silent.

    The connection stays open until the client closes it (``peer_closed`` is
    set) or the context exits. ``url`` is usable as a provider endpoint.
    """

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks
        self._listener = socket.create_server(("127.0.0.1", 0))
        self._listener.settimeout(10)
        self.url = f"http://127.0.0.1:{self._listener.getsockname()[1]}/v1"
        self.peer_closed = threading.Event()
        self._release = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def __enter__(self) -> "StallingUpstream":
        self._thread.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._release.set()
        self._thread.join(timeout=5)
        self._listener.close()

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            _read_request(conn)
            conn.sendall(
                b"HTTP/1.1 200 OK\r\nContent-Type: text/event-stream\r\nTransfer-Encoding: chunked\r\n\r\n"
            )
            for chunk in self._chunks:
                conn.sendall(b"%x\r\n%s\r\n" % (len(chunk), chunk))
            conn.settimeout(0.05)
            while not self._release.is_set():
                try:
                    if conn.recv(1024) == b"":
                        self.peer_closed.set()
                        return
                except socket.timeout:
                    continue
                except OSError:
                    self.peer_closed.set()
                    return


def collect(events) -> list:
    return list(events)


class EventCapture:
    """Collects JSON log payloads emitted on the shared ``gateway`` logger."""

    def __init__(self) -> None:
        self.records: List[Dict[str, Any]] = []
        self.raw: List[str] = []
        outer = self

        class _Handler(logging.Handler):
            def emit(self, record: logging.LogRecord) -> None:
                msg = record.getMessage()
                outer.raw.append(msg)
                try:
                    outer.records.append(json.loads(msg))
                except ValueError:
                    outer.records.append({"msg": msg})

        self.handler = _Handler(level=logging.DEBUG)

    def __enter__(self) -> "EventCapture":
        get_logger().addHandler(self.handler)
        return self

    def __exit__(self, *exc: Any) -> None:
        get_logger().removeHandler(self.handler)

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [r for r in self.records if r.get("event") == event]

    @property
    def text(self) -> str:
        return "\n".join(self.raw)


__all__ = [
    "ALPHA_ENDPOINT",
    "ALPHA_KEY",
    "build_alpha_registry",
    "openai_chunk",
    "sse_body",
    "Upstream",
    "streaming",
    "ChunkStream",
    "StallingUpstream",
    "collect",
    "EventCapture",
]
