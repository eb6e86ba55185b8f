"""Allocation report for a TrackingAllocator, printed with rich."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from errchain.allocator import TrackingAllocator

_ACCENT = "#7C3AED"
_DIM = "grey50"
_OK = "green"
_ERR = "red"


def build_allocator_table(pool: TrackingAllocator) -> Table:
    stats = pool.stats()
    table = Table(title="errchain allocations", title_style=_ACCENT, show_header=False)
    table.add_column("metric", style=_DIM)
    table.add_column("value", justify="right")

    for key in ("allocations", "releases", "failures", "live_bytes"):
        table.add_row(key.replace("_", " "), str(stats[key]))

    leaked = stats["live_blocks"] or 0
    table.add_row("live blocks", Text(str(leaked), style=_ERR if leaked else _OK))
    budget = stats["byte_budget"]
    table.add_row("byte budget", "unbounded" if budget is None else str(budget))
    return table


def print_allocator_report(pool: TrackingAllocator, console: Console | None = None) -> None:
    """Print allocation counters; live blocks after destroy indicate a leak."""
    console = console or Console(highlight=False, stderr=True)
    console.print(build_allocator_table(pool))
