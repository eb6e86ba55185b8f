"""Entrypoint — python -m errchain / errchain.

Builds a chain from the given messages (outermost first), renders it to
stdout and destroys it.
"""

from __future__ import annotations

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="errchain",
        description="Render a causal error chain, outermost context first.",
    )
    parser.add_argument("messages", nargs="+", metavar="MESSAGE")
    parser.add_argument("--header", default=None, help="text printed before the chain")
    parser.add_argument("--trailer", default="\n", help="text printed after the chain")
    parser.add_argument("--config", default=None, help="path to an errchain.yaml")
    parser.add_argument(
        "--stats",
        action="store_true",
        help="build on a tracking allocator and print an allocation report",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    from errchain import ErrChainError
    from errchain.allocator import TrackingAllocator
    from errchain.config import apply_settings, load_settings
    from errchain.core import destroy, new, render_to_stream, use_allocator, wrap
    from errchain.observability.report import print_allocator_report

    args = _parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ErrChainError as e:
        print(f"errchain: {e}", file=sys.stderr)
        return 2
    allocator = apply_settings(settings)
    if args.stats and not isinstance(allocator, TrackingAllocator):
        allocator = TrackingAllocator()
        use_allocator(allocator)

    *outer, innermost = args.messages
    chain = new(innermost)
    for text in reversed(outer):
        chain = wrap(chain, text)

    rc = render_to_stream(args.header, chain, args.trailer, sys.stdout)
    destroy(chain)
    logger.debug("cli_chain_rendered", depth=len(args.messages), status=rc)

    if args.stats and isinstance(allocator, TrackingAllocator):
        print_allocator_report(allocator)
    return 0 if rc >= 0 else 1


if __name__ == "__main__":
    sys.exit(main())
