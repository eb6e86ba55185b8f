"""ErrorValue, ownership links and the two shared sentinels."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from errchain.allocator import Allocator

# Message buffer capacity in bytes, terminating NUL included.
MAX_MESSAGE_LENGTH = 1024

# Size requested from the allocator for one node (message ref + cause ref).
NODE_SIZE = 16

SEPARATOR = ": "


class Ownership(Enum):
    OWNED = "owned"  # released together with the node holding the link
    BORROWED = "borrowed"  # never released through this link


@dataclass(frozen=True)
class CauseLink:
    target: ErrorValue
    ownership: Ownership


@dataclass(frozen=True, eq=False)
class ErrorValue:
    """One node of a causal chain.

    Values are immutable and compared by identity. ``node_block`` and
    ``message_buffer`` are the blocks this node owns; a node holding neither
    (the sentinels) is never released. ``allocator`` is the allocator both
    blocks came from, so destroy always returns them to the right place.
    """

    message: str
    cause_link: CauseLink | None = field(default=None, repr=False)
    node_block: bytearray | None = field(default=None, repr=False)
    message_buffer: bytearray | None = field(default=None, repr=False)
    allocator: Allocator | None = field(default=None, repr=False)

    @property
    def cause(self) -> ErrorValue | None:
        return self.cause_link.target if self.cause_link is not None else None

    @property
    def owns_node(self) -> bool:
        return self.node_block is not None

    @property
    def owns_message(self) -> bool:
        return self.message_buffer is not None

    @property
    def owns_cause(self) -> bool:
        return self.cause_link is not None and self.cause_link.ownership is Ownership.OWNED

    @property
    def is_sentinel(self) -> bool:
        return self is OUT_OF_MEMORY or self is EMPTY

    def __str__(self) -> str:
        return SEPARATOR.join(node.message for node in iter_chain(self))


OUT_OF_MEMORY = ErrorValue("Out of memory")
EMPTY = ErrorValue("<Empty>")


def iter_chain(e: ErrorValue | None) -> Iterator[ErrorValue]:
    """Yield each node of the chain, outermost first."""
    node = e if e is not None else EMPTY
    while node is not None:
        yield node
        node = node.cause


def message(e: ErrorValue | None) -> str:
    return (e if e is not None else EMPTY).message


def cause(e: ErrorValue | None) -> ErrorValue | None:
    return e.cause if e is not None else None


def copy_into(buffer: bytearray, text: str) -> str:
    """Copy ``text`` into ``buffer`` as NUL-terminated UTF-8, truncating.

    Returns the text actually stored: everything before the first NUL, cut to
    fit the buffer. A code point cut by truncation is dropped rather than
    stored half-encoded. Lone surrogates (from ``os.fsdecode`` or ``sys.argv``)
    are kept via ``surrogatepass``.
    """
    capacity = min(len(buffer), MAX_MESSAGE_LENGTH)
    text = text.split("\x00", 1)[0]
    payload = text.encode("utf-8", errors="surrogatepass")[: capacity - 1]
    # back off at most three bytes to the last whole code point
    for end in range(len(payload), max(len(payload) - 4, -1), -1):
        try:
            stored = payload[:end].decode("utf-8", errors="surrogatepass")
        except UnicodeDecodeError:
            continue
        break
    payload = payload[:end]
    buffer[: len(payload)] = payload
    buffer[len(payload)] = 0
    return stored
