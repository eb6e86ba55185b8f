"""Tests for the allocator hooks."""

from __future__ import annotations

import pytest

from errchain import AllocatorError
from errchain.allocator import FunctionAllocator, SystemAllocator, TrackingAllocator


class TestSystemAllocator:
    def test_allocate_zeroed(self):
        block = SystemAllocator().allocate(32)
        assert block == bytearray(32)

    def test_release_clears(self):
        alloc = SystemAllocator()
        block = alloc.allocate(8)
        alloc.release(block)
        assert len(block) == 0


class TestFunctionAllocator:
    def test_delegates(self):
        released: list[bytearray] = []
        alloc = FunctionAllocator(lambda size: bytearray(size), released.append)
        block = alloc.allocate(4)
        alloc.release(block)
        assert released == [block]

    def test_none_is_failure(self):
        assert FunctionAllocator(lambda size: None, lambda b: None).allocate(4) is None

    def test_memory_error_is_failure(self):
        def exhausted(size: int) -> bytearray:
            raise MemoryError

        assert FunctionAllocator(exhausted, lambda b: None).allocate(4) is None


class TestTrackingAllocator:
    def test_counts(self):
        pool = TrackingAllocator()
        a = pool.allocate(10)
        b = pool.allocate(20)
        assert pool.live_blocks == 2
        assert pool.live_bytes == 30
        pool.release(a)
        assert pool.stats() == {
            "allocations": 2,
            "releases": 1,
            "failures": 0,
            "live_blocks": 1,
            "live_bytes": 20,
            "byte_budget": None,
        }
        pool.release(b)
        assert pool.live_bytes == 0

    def test_double_release_raises(self):
        pool = TrackingAllocator()
        block = pool.allocate(4)
        pool.release(block)
        with pytest.raises(AllocatorError):
            pool.release(block)

    def test_foreign_block_raises(self):
        with pytest.raises(AllocatorError):
            TrackingAllocator().release(bytearray(4))

    def test_equal_but_distinct_block_not_owned(self):
        pool = TrackingAllocator()
        pool.allocate(4)
        assert not pool.owns(bytearray(4))

    def test_fail_after(self):
        pool = TrackingAllocator(fail_after=2)
        assert pool.allocate(1) is not None
        assert pool.allocate(1) is not None
        assert pool.allocate(1) is None
        assert pool.failures == 1

    def test_fail_after_adjustable(self):
        pool = TrackingAllocator()
        pool.allocate(1)
        pool.fail_after = pool.allocations
        assert pool.allocate(1) is None
        pool.fail_after = None
        assert pool.allocate(1) is not None

    def test_byte_budget(self):
        pool = TrackingAllocator(byte_budget=100)
        block = pool.allocate(60)
        assert pool.allocate(60) is None
        pool.release(block)
        assert pool.allocate(60) is not None

    def test_negative_budget_rejected(self):
        with pytest.raises(ValueError):
            TrackingAllocator(byte_budget=-1)
