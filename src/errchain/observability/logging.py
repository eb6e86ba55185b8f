"""structlog setup for errchain and the programs embedding it."""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog

_FORMATS = ("json", "console")


def configure_logging(
    log_level: str = "WARNING",
    log_format: str = "console",
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> None:
    """Configure stdlib handlers and the structlog processor chain.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_format: 'json' for structured lines or 'console' for human-readable.
        log_file: Optional path to write logs, rotated at max_bytes with
                  backup_count files kept. If None, logs go to stderr only.
        max_bytes: Max size per log file before rotation (default 10MB).
        backup_count: Number of rotated files to keep (default 5).
    """
    if log_format not in _FORMATS:
        raise ValueError(f"log_format must be one of {_FORMATS}, got {log_format!r}")

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler: logging.Handler
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    else:
        # stderr keeps rendered chains on stdout clean
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    root_logger.addHandler(handler)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
