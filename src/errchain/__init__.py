"""errchain — causally chained error values with pluggable allocation."""

__version__ = "0.1.0"


class ErrChainError(Exception):
    """Base exception for all errchain errors."""


class AllocatorError(ErrChainError):
    """Raised when a block is released that the allocator does not own."""


class TemplateError(ErrChainError):
    """Raised when a format template does not match its arguments."""


class ConfigurationError(ErrChainError):
    """Raised on invalid configuration."""


class ChainedError(ErrChainError):
    """Exception view of an error value; str() is the rendered chain."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(str(value))


from errchain.allocator import (  # noqa: E402
    FunctionAllocator,
    SystemAllocator,
    TrackingAllocator,
)
from errchain.core import (  # noqa: E402
    EMPTY,
    MAX_MESSAGE_LENGTH,
    NODE_SIZE,
    OUT_OF_MEMORY,
    SEPARATOR,
    ErrorFactory,
    ErrorValue,
    cause,
    destroy,
    get_allocator,
    iter_chain,
    message,
    new,
    new_borrowed,
    new_formatted,
    render,
    render_to_stream,
    render_to_string,
    reset_allocator,
    set_allocator,
    to_exception,
    use_allocator,
    vnew_formatted,
    vwrap_formatted,
    wrap,
    wrap_borrowed,
    wrap_formatted,
)

__all__ = [
    # Errors
    "ErrChainError", "AllocatorError", "TemplateError", "ConfigurationError", "ChainedError",
    # Allocators
    "SystemAllocator", "FunctionAllocator", "TrackingAllocator",
    "set_allocator", "use_allocator", "get_allocator", "reset_allocator",
    # Values
    "ErrorValue", "ErrorFactory", "EMPTY", "OUT_OF_MEMORY",
    "MAX_MESSAGE_LENGTH", "NODE_SIZE", "SEPARATOR",
    # Construction
    "new", "new_borrowed", "new_formatted", "vnew_formatted",
    "wrap", "wrap_borrowed", "wrap_formatted", "vwrap_formatted",
    # Introspection
    "message", "cause", "iter_chain", "to_exception",
    # Rendering and destruction
    "render", "render_to_stream", "render_to_string", "destroy",
]
