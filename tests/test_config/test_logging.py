"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from errchain.observability.logging import configure_logging


class TestConfigureLogging:
    def test_json_to_file(self, tmp_path: Path):
        log_file = tmp_path / "nested" / "errchain.log"
        configure_logging(log_level="DEBUG", log_format="json", log_file=str(log_file))
        structlog.get_logger("errchain.test").info("chain_built", depth=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "chain_built"
        assert record["depth"] == 3
        assert record["level"] == "info"

    def test_level_applied(self):
        configure_logging(log_level="error")
        assert logging.getLogger().level == logging.ERROR

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            configure_logging(log_format="xml")
