"""Tests for wrap operations — ownership transfer and chain ordering."""

from __future__ import annotations

import pytest

from errchain import TemplateError
from errchain.allocator import TrackingAllocator
from errchain.core import EMPTY, OUT_OF_MEMORY, ErrorFactory, destroy, render_to_string


class TestWrapOrdering:
    def test_wrap_none_ends_in_empty(self, factory: ErrorFactory):
        assert render_to_string(factory.wrap(None, "outer")) == "outer: <Empty>"

    def test_nested_wrap_from_none(self, factory: ErrorFactory):
        e = factory.wrap(factory.wrap(None, "inner"), "outer")
        assert render_to_string(e) == "outer: inner: <Empty>"

    def test_newest_outermost(self, factory: ErrorFactory):
        e = factory.new("connection refused")
        e = factory.wrap_borrowed(e, "fetching manifest")
        e = factory.wrap_formatted(e, "installing %s==%s", "requests", "2.32")
        assert render_to_string(e) == (
            "installing requests==2.32: fetching manifest: connection refused"
        )

    def test_vwrap_formatted(self, factory: ErrorFactory):
        e = factory.vwrap_formatted(factory.new("eof"), "parsing line %d", (12,))
        assert render_to_string(e) == "parsing line 12: eof"

    def test_wrapping_a_sentinel_borrows_nothing_extra(self, factory: ErrorFactory):
        e = factory.wrap(OUT_OF_MEMORY, "while loading")
        assert e.cause is OUT_OF_MEMORY
        assert render_to_string(e) == "while loading: Out of memory"
        destroy(e)  # sentinel cause must survive
        assert OUT_OF_MEMORY.message == "Out of memory"


class TestWrapFailure:
    def _failing_after_inner(self) -> tuple[TrackingAllocator, ErrorFactory]:
        pool = TrackingAllocator()
        return pool, ErrorFactory(pool)

    @pytest.mark.parametrize("op", ["wrap", "wrap_borrowed", "wrap_formatted"])
    def test_failed_wrap_destroys_cause(self, op: str):
        pool, f = self._failing_after_inner()
        inner = f.wrap(f.new("inner"), "middle")
        assert pool.live_blocks == 4
        pool.fail_after = pool.allocations

        result = getattr(f, op)(inner, "outer")

        assert result is OUT_OF_MEMORY
        assert pool.live_blocks == 0
        assert pool.live_bytes == 0

    def test_failed_wrap_of_none(self):
        pool = TrackingAllocator(fail_after=0)
        assert ErrorFactory(pool).wrap(None, "outer") is OUT_OF_MEMORY

    def test_none_message_destroys_cause_and_returns_empty(
        self, factory: ErrorFactory, pool: TrackingAllocator
    ):
        inner = factory.new("inner")
        assert factory.wrap(inner, None) is EMPTY
        assert factory.wrap_borrowed(factory.new("x"), None) is EMPTY
        assert factory.wrap_formatted(factory.new("y"), None) is EMPTY
        assert pool.live_blocks == 0

    def test_template_error_destroys_cause(self, factory: ErrorFactory, pool: TrackingAllocator):
        inner = factory.new("inner")
        with pytest.raises(TemplateError):
            factory.wrap_formatted(inner, "%s %s", "only-one")
        assert pool.live_blocks == 0


class TestWrapOwnership:
    def test_destroying_outer_releases_all(self, factory: ErrorFactory, pool: TrackingAllocator):
        e = factory.new("a")
        for i in range(5):
            e = factory.wrap_formatted(e, "level %d", i)
        assert pool.live_blocks == 12
        destroy(e)
        assert pool.live_blocks == 0
        assert pool.releases == pool.allocations

    def test_cause_from_other_allocator_released_there(self, pool: TrackingAllocator):
        other = TrackingAllocator()
        inner = ErrorFactory(other).new("inner")
        outer = ErrorFactory(pool).wrap(inner, "outer")
        destroy(outer)
        assert other.live_blocks == 0
        assert pool.live_blocks == 0
