"""Constructors and wrap operations — ErrorFactory."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

import structlog

from errchain import TemplateError
from errchain.allocator import Allocator, SystemAllocator
from errchain.core.destroy import destroy
from errchain.core.value import (
    EMPTY,
    MAX_MESSAGE_LENGTH,
    NODE_SIZE,
    OUT_OF_MEMORY,
    CauseLink,
    ErrorValue,
    Ownership,
    copy_into,
)

logger = structlog.get_logger(__name__)


def format_template(template: str, args: Sequence[Any]) -> str:
    """printf-style formatting; a single mapping argument enables ``%(key)s``."""
    values: Any = tuple(args)
    if len(args) == 1 and isinstance(args[0], Mapping):
        values = args[0]
    try:
        return template % values
    except (TypeError, ValueError, KeyError) as exc:
        raise TemplateError(f"cannot format {template!r}: {exc}") from exc


class ErrorFactory:
    """Builds error values on one allocator.

    Every constructor returns a usable ErrorValue: ``EMPTY`` for a ``None``
    input and ``OUT_OF_MEMORY`` when the allocator refuses a block. Wrap
    operations take ownership of the cause they are given, including on
    failure.
    """

    def __init__(self, allocator: Allocator | None = None) -> None:
        self._allocator: Allocator = allocator if allocator is not None else SystemAllocator()

    @property
    def allocator(self) -> Allocator:
        return self._allocator

    # --- Construction ---

    def new(self, text: str | None) -> ErrorValue:
        """Error with a private, truncated copy of ``text``."""
        if text is None:
            return EMPTY

        node_block = self._allocator.allocate(NODE_SIZE)
        if node_block is None:
            return self._out_of_memory("new", NODE_SIZE)
        buffer = self._allocator.allocate(MAX_MESSAGE_LENGTH)
        if buffer is None:
            self._allocator.release(node_block)
            return self._out_of_memory("new", MAX_MESSAGE_LENGTH)

        try:
            stored = copy_into(buffer, text)
        except Exception:
            self._allocator.release(buffer)
            self._allocator.release(node_block)
            raise

        return ErrorValue(
            message=stored,
            node_block=node_block,
            message_buffer=buffer,
            allocator=self._allocator,
        )

    def new_borrowed(self, text: str | None) -> ErrorValue:
        """Error over ``text`` as given; only the node is allocated."""
        if text is None:
            return EMPTY

        node_block = self._allocator.allocate(NODE_SIZE)
        if node_block is None:
            return self._out_of_memory("new_borrowed", NODE_SIZE)

        return ErrorValue(message=text, node_block=node_block, allocator=self._allocator)

    def new_formatted(self, template: str | None, *args: Any) -> ErrorValue:
        return self.vnew_formatted(template, args)

    def vnew_formatted(self, template: str | None, args: Sequence[Any]) -> ErrorValue:
        """Error whose message is ``template % args``, truncated like ``new``."""
        if template is None:
            return EMPTY

        buffer = self._allocator.allocate(MAX_MESSAGE_LENGTH)
        if buffer is None:
            return self._out_of_memory("new_formatted", MAX_MESSAGE_LENGTH)
        try:
            stored = copy_into(buffer, format_template(template, args))
        except Exception:
            self._allocator.release(buffer)
            raise

        node_block = self._allocator.allocate(NODE_SIZE)
        if node_block is None:
            self._allocator.release(buffer)
            return self._out_of_memory("new_formatted", NODE_SIZE)

        return ErrorValue(
            message=stored,
            node_block=node_block,
            message_buffer=buffer,
            allocator=self._allocator,
        )

    # --- Wrapping ---

    def wrap(self, cause: ErrorValue | None, text: str | None) -> ErrorValue:
        """Wrap ``cause`` in a copied ``text``. Takes ownership of ``cause``."""
        try:
            outer = self.new(text)
        except Exception:
            destroy(cause)
            raise
        return _attach(outer, cause)

    def wrap_borrowed(self, cause: ErrorValue | None, text: str | None) -> ErrorValue:
        """Wrap ``cause`` in a borrowed ``text``. Takes ownership of ``cause``."""
        return _attach(self.new_borrowed(text), cause)

    def wrap_formatted(
        self, cause: ErrorValue | None, template: str | None, *args: Any
    ) -> ErrorValue:
        return self.vwrap_formatted(cause, template, args)

    def vwrap_formatted(
        self, cause: ErrorValue | None, template: str | None, args: Sequence[Any]
    ) -> ErrorValue:
        """Wrap ``cause`` in a formatted message. Takes ownership of ``cause``."""
        try:
            outer = self.vnew_formatted(template, args)
        except Exception:
            destroy(cause)
            raise
        return _attach(outer, cause)

    def _out_of_memory(self, operation: str, size: int) -> ErrorValue:
        logger.warning(
            "error_allocation_failed",
            operation=operation,
            size=size,
            allocator=repr(self._allocator),
        )
        return OUT_OF_MEMORY


def _attach(outer: ErrorValue, cause: ErrorValue | None) -> ErrorValue:
    if outer.is_sentinel:
        # Construction failed; the cause was handed over and cannot be returned.
        destroy(cause)
        return outer
    if cause is None:
        return replace(outer, cause_link=CauseLink(EMPTY, Ownership.BORROWED))
    return replace(outer, cause_link=CauseLink(cause, Ownership.OWNED))
