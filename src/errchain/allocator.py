"""Allocator hooks — where error nodes and message buffers come from.

An allocator hands out writable blocks (``bytearray``) and takes them back.
``None`` from ``allocate`` means the request could not be satisfied; the
constructors turn that into the ``OUT_OF_MEMORY`` sentinel.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import structlog

from errchain import AllocatorError

logger = structlog.get_logger(__name__)

AllocateFn = Callable[[int], "bytearray | None"]
ReleaseFn = Callable[[bytearray], None]


class Allocator(Protocol):
    def allocate(self, size: int) -> bytearray | None: ...

    def release(self, block: bytearray) -> None: ...


class SystemAllocator:
    """Default allocator backed by the interpreter's own memory."""

    def allocate(self, size: int) -> bytearray | None:
        try:
            return bytearray(size)
        except MemoryError:
            logger.warning("system_allocation_failed", size=size)
            return None

    def release(self, block: bytearray) -> None:
        # Reclaimed by the garbage collector once the last reference drops.
        block[:] = b""

    def __repr__(self) -> str:
        return "SystemAllocator()"


class FunctionAllocator:
    """Adapts a plain ``allocate(size)`` / ``release(block)`` function pair."""

    def __init__(self, allocate_fn: AllocateFn, release_fn: ReleaseFn) -> None:
        self._allocate_fn = allocate_fn
        self._release_fn = release_fn

    def allocate(self, size: int) -> bytearray | None:
        try:
            return self._allocate_fn(size)
        except MemoryError:
            logger.warning("hook_allocation_failed", size=size)
            return None

    def release(self, block: bytearray) -> None:
        self._release_fn(block)

    def __repr__(self) -> str:
        return f"FunctionAllocator({self._allocate_fn!r}, {self._release_fn!r})"


class TrackingAllocator:
    """Tracked pool: counts every block and can refuse allocations.

    Args:
        byte_budget: Upper bound on live bytes. Requests that would exceed it
            fail. ``None`` means unbounded.
        fail_after: Number of successful allocations after which every further
            request fails. ``None`` disables the limit. May be changed at any
            time, e.g. ``pool.fail_after = pool.allocations`` to make the next
            request fail.
    """

    def __init__(self, byte_budget: int | None = None, fail_after: int | None = None) -> None:
        if byte_budget is not None and byte_budget < 0:
            raise ValueError(f"byte_budget must be >= 0, got {byte_budget}")
        self.byte_budget = byte_budget
        self.fail_after = fail_after
        self.allocations = 0
        self.releases = 0
        self.failures = 0
        self._live: dict[int, bytearray] = {}
        self._live_bytes = 0

    @property
    def live_blocks(self) -> int:
        return len(self._live)

    @property
    def live_bytes(self) -> int:
        return self._live_bytes

    def owns(self, block: bytearray) -> bool:
        return self._live.get(id(block)) is block

    def allocate(self, size: int) -> bytearray | None:
        if self.fail_after is not None and self.allocations >= self.fail_after:
            self.failures += 1
            logger.debug("tracked_allocation_refused", size=size, reason="fail_after")
            return None
        if self.byte_budget is not None and self._live_bytes + size > self.byte_budget:
            self.failures += 1
            logger.debug(
                "tracked_allocation_refused",
                size=size,
                reason="byte_budget",
                live_bytes=self._live_bytes,
            )
            return None

        block = bytearray(size)
        self._live[id(block)] = block
        self._live_bytes += size
        self.allocations += 1
        return block

    def release(self, block: bytearray) -> None:
        if not self.owns(block):
            raise AllocatorError(
                f"release of a block not owned by this pool ({len(block)} bytes)"
            )
        del self._live[id(block)]
        self._live_bytes -= len(block)
        self.releases += 1

    def stats(self) -> dict[str, int | None]:
        return {
            "allocations": self.allocations,
            "releases": self.releases,
            "failures": self.failures,
            "live_blocks": self.live_blocks,
            "live_bytes": self.live_bytes,
            "byte_budget": self.byte_budget,
        }

    def __repr__(self) -> str:
        return (
            f"TrackingAllocator(live_blocks={self.live_blocks}, "
            f"live_bytes={self.live_bytes}, byte_budget={self.byte_budget})"
        )
