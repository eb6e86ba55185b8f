"""Renderer — streams a chain through a sink without joining it first.

Output layout: ``<header><outer>: <next>: ... <innermost><trailer>``.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from typing import IO, Any

import structlog

from errchain import ChainedError
from errchain.core.value import EMPTY, SEPARATOR, ErrorValue

logger = structlog.get_logger(__name__)

# Receives one text fragment per call; a negative return aborts rendering.
Sink = Callable[[str], int]


def iter_segments(
    header: str | None, e: ErrorValue | None, trailer: str | None
) -> Iterator[str]:
    """Yield the fragments ``render`` hands to its sink, in order."""
    node = e if e is not None else EMPTY
    if header is not None:
        yield header
    yield node.message
    while node.cause is not None:
        node = node.cause
        yield SEPARATOR
        yield node.message
    if trailer is not None:
        yield trailer


def render(
    header: str | None, e: ErrorValue | None, trailer: str | None, sink: Sink | None
) -> int:
    """Render ``e`` through ``sink``.

    Args:
        header: Emitted before the outermost message; ``None`` emits nothing.
        e: Chain to render; ``None`` renders as ``EMPTY``.
        trailer: Emitted after the innermost message; ``None`` emits nothing.
        sink: Called once per fragment. A negative result stops rendering
              immediately.

    Returns:
        The last sink result. Negative means the sink failed; -1 without a sink.
    """
    if sink is None:
        return -1

    rc = 0
    for segment in iter_segments(header, e, trailer):
        rc = sink(segment)
        if rc < 0:
            logger.debug("render_sink_failed", status=rc)
            return rc
    return rc


class StreamSink:
    """Sink writing each fragment to a text or binary stream."""

    def __init__(self, stream: IO[Any], encoding: str = "utf-8") -> None:
        self._stream = stream
        self._binary = isinstance(stream, (io.RawIOBase, io.BufferedIOBase))
        self._encoding = encoding

    def __call__(self, text: str) -> int:
        try:
            data: str | bytes = text.encode(self._encoding) if self._binary else text
            written = self._stream.write(data)
        except (OSError, ValueError) as exc:
            logger.warning("render_stream_write_failed", error=str(exc))
            return -1
        return written if isinstance(written, int) else len(data)


def render_to_stream(
    header: str | None, e: ErrorValue | None, trailer: str | None, stream: IO[Any] | None
) -> int:
    """Render ``e`` to ``stream``; non-negative on success, negative on failure."""
    if stream is None:
        return -1
    return render(header, e, trailer, StreamSink(stream))


def render_to_string(
    e: ErrorValue | None, header: str | None = None, trailer: str | None = None
) -> str:
    parts: list[str] = []

    def _collect(text: str) -> int:
        parts.append(text)
        return len(text)

    render(header, e, trailer, _collect)
    return "".join(parts)


def to_exception(e: ErrorValue | None) -> ChainedError:
    """Exception carrying ``e``; its message is the rendered chain."""
    value = e if e is not None else EMPTY
    return ChainedError(value)
