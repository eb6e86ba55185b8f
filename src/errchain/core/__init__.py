"""Module-level API over a process-wide default ErrorFactory."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from errchain.allocator import (
    Allocator,
    AllocateFn,
    FunctionAllocator,
    ReleaseFn,
    SystemAllocator,
)
from errchain.core.construct import ErrorFactory
from errchain.core.destroy import destroy
from errchain.core.render import (
    Sink,
    StreamSink,
    iter_segments,
    render,
    render_to_stream,
    render_to_string,
    to_exception,
)
from errchain.core.value import (
    EMPTY,
    MAX_MESSAGE_LENGTH,
    NODE_SIZE,
    OUT_OF_MEMORY,
    SEPARATOR,
    CauseLink,
    ErrorValue,
    Ownership,
    cause,
    iter_chain,
    message,
)

logger = structlog.get_logger(__name__)

_default = ErrorFactory(SystemAllocator())


def set_allocator(allocate_fn: AllocateFn, release_fn: ReleaseFn) -> None:
    """Install an allocate/release function pair as the process-wide default.

    Call once, before building errors, from a single thread. Values built
    earlier keep releasing through the allocator that built them.
    """
    use_allocator(FunctionAllocator(allocate_fn, release_fn))


def use_allocator(allocator: Allocator) -> None:
    global _default
    _default = ErrorFactory(allocator)
    logger.info("allocator_configured", allocator=repr(allocator))


def get_allocator() -> Allocator:
    return _default.allocator


def reset_allocator() -> None:
    use_allocator(SystemAllocator())


def new(text: str | None) -> ErrorValue:
    return _default.new(text)


def new_borrowed(text: str | None) -> ErrorValue:
    return _default.new_borrowed(text)


def new_formatted(template: str | None, *args: Any) -> ErrorValue:
    return _default.vnew_formatted(template, args)


def vnew_formatted(template: str | None, args: Sequence[Any]) -> ErrorValue:
    return _default.vnew_formatted(template, args)


def wrap(e: ErrorValue | None, text: str | None) -> ErrorValue:
    return _default.wrap(e, text)


def wrap_borrowed(e: ErrorValue | None, text: str | None) -> ErrorValue:
    return _default.wrap_borrowed(e, text)


def wrap_formatted(e: ErrorValue | None, template: str | None, *args: Any) -> ErrorValue:
    return _default.vwrap_formatted(e, template, args)


def vwrap_formatted(e: ErrorValue | None, template: str | None, args: Sequence[Any]) -> ErrorValue:
    return _default.vwrap_formatted(e, template, args)


__all__ = [
    "EMPTY",
    "MAX_MESSAGE_LENGTH",
    "NODE_SIZE",
    "OUT_OF_MEMORY",
    "SEPARATOR",
    "CauseLink",
    "ErrorFactory",
    "ErrorValue",
    "Ownership",
    "Sink",
    "StreamSink",
    "cause",
    "destroy",
    "get_allocator",
    "iter_chain",
    "iter_segments",
    "message",
    "new",
    "new_borrowed",
    "new_formatted",
    "render",
    "render_to_stream",
    "render_to_string",
    "reset_allocator",
    "set_allocator",
    "to_exception",
    "use_allocator",
    "vnew_formatted",
    "vwrap_formatted",
    "wrap",
    "wrap_borrowed",
    "wrap_formatted",
]
