"""Record framing for upstream streaming bodies.

Two framings cover every supported provider:

- Server-sent events (OpenAI-compatible, Anthropic, Gemini): ``event:`` and
  ``data:`` fields, records separated by a blank line, ``:`` comments.
- Newline-delimited JSON (Ollama): one JSON document per non-empty line.

Both helpers consume an iterator of decoded text lines (``Response.iter_lines``)
and yield ``(event_name, data)`` pairs lazily, so a record is handed on as
soon as its terminating line has been read.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

Record = Tuple[Optional[str], str]


def iter_sse_records(lines: Iterable[str]) -> Iterator[Record]:
    """Yield ``(event, data)`` for each server-sent event in ``lines``.

    Multi-line ``data`` fields are joined with ``\\n``. A record still pending
    when the body ends is flushed.
    """
    event: Optional[str] = None
    data: List[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = None, []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data.append(value)
        elif name == "event":
            event = value or None
        # id / retry fields carry nothing the gateway uses
    if data:
        yield event, "\n".join(data)


def iter_ndjson_records(lines: Iterable[str]) -> Iterator[Record]:
    """Yield ``(None, line)`` for each non-empty line in ``lines``."""
    for raw in lines:
        line = raw.strip()
        if line:
            yield None, line


__all__ = ["Record", "iter_sse_records", "iter_ndjson_records"]
