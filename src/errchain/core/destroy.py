"""Destructor — releases a chain according to each node's ownership."""

from __future__ import annotations

import structlog

from errchain.core.value import ErrorValue

logger = structlog.get_logger(__name__)


def destroy(e: ErrorValue | None) -> None:
    """Release ``e`` and every cause it owns.

    Must be the last operation on ``e``. Owned links are followed; borrowed
    links (the ``EMPTY`` terminator) are not. Nodes are released innermost
    first: message buffer, then the node block. ``None`` and sentinels are
    no-ops.
    """
    if e is None:
        return

    owned = [e]
    node = e
    while node.owns_cause:
        node = node.cause_link.target  # type: ignore[union-attr]
        owned.append(node)

    released = 0
    for node in reversed(owned):
        released += _release(node)
    if released:
        logger.debug("error_chain_destroyed", depth=len(owned), blocks=released)


def _release(node: ErrorValue) -> int:
    if node.allocator is None:
        return 0
    count = 0
    if node.message_buffer is not None:
        node.allocator.release(node.message_buffer)
        count += 1
    if node.node_block is not None:
        node.allocator.release(node.node_block)
        count += 1
    return count
