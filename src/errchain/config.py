"""Configuration loading via pydantic-settings.

Loads from the environment / .env (``ERRCHAIN_`` prefix) and an optional
errchain.yaml. Environment values win over the YAML file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from errchain import ConfigurationError
from errchain.allocator import Allocator, SystemAllocator, TrackingAllocator

ALLOCATOR_KINDS = ("system", "tracking")
LOG_FORMATS = ("console", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_CONFIG_FILE = "errchain.yaml"


@dataclass
class AllocatorConfig:
    kind: str = "system"
    byte_budget: int | None = None


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: str = "console"
    file: str | None = None


@dataclass
class ErrChainSettings:
    """Assembled settings from environment + errchain.yaml."""

    allocator: AllocatorConfig = field(default_factory=AllocatorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class _EnvSettings(BaseSettings):
    """Loads raw values from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ERRCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ALLOCATOR: str = Field(default="")
    BYTE_BUDGET: int | None = Field(default=None, ge=0)
    LOG_LEVEL: str = Field(default="")
    LOG_FORMAT: str = Field(default="")
    LOG_FILE: str = Field(default="")

    @field_validator("ALLOCATOR", "LOG_LEVEL", "LOG_FORMAT")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return v.strip().lower()


def _load_yaml_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at top level")
    return data


def load_settings(config_path: str | Path | None = None) -> ErrChainSettings:
    """Build settings from the environment and the YAML file (uncached)."""
    try:
        env = _EnvSettings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid ERRCHAIN_* environment: {exc}") from exc

    path = Path(config_path) if config_path is not None else Path.cwd() / DEFAULT_CONFIG_FILE
    yaml_cfg = _load_yaml_config(path)
    alloc_yaml = yaml_cfg.get("allocator") or {}
    log_yaml = yaml_cfg.get("logging") or {}

    allocator = AllocatorConfig(
        kind=env.ALLOCATOR or str(alloc_yaml.get("kind", "system")).lower(),
        byte_budget=env.BYTE_BUDGET if env.BYTE_BUDGET is not None else alloc_yaml.get("byte_budget"),
    )
    logging_cfg = LoggingConfig(
        level=(env.LOG_LEVEL or str(log_yaml.get("level", "WARNING"))).upper(),
        format=env.LOG_FORMAT or str(log_yaml.get("format", "console")).lower(),
        file=env.LOG_FILE or log_yaml.get("file"),
    )

    settings = ErrChainSettings(allocator=allocator, logging=logging_cfg)
    validate_settings(settings)
    return settings


@lru_cache
def get_settings() -> ErrChainSettings:
    """Load and cache settings from the working directory."""
    return load_settings()


def validate_settings(settings: ErrChainSettings) -> None:
    alloc = settings.allocator
    if alloc.kind not in ALLOCATOR_KINDS:
        raise ConfigurationError(
            f"allocator kind must be one of {ALLOCATOR_KINDS}, got {alloc.kind!r}"
        )
    if alloc.byte_budget is not None:
        if not isinstance(alloc.byte_budget, int) or alloc.byte_budget < 0:
            raise ConfigurationError(f"byte_budget must be a non-negative int, got {alloc.byte_budget!r}")
        if alloc.kind != "tracking":
            raise ConfigurationError("byte_budget requires the tracking allocator")
    if settings.logging.level not in LOG_LEVELS:
        raise ConfigurationError(
            f"log level must be one of {LOG_LEVELS}, got {settings.logging.level!r}"
        )
    if settings.logging.format not in LOG_FORMATS:
        raise ConfigurationError(
            f"log format must be one of {LOG_FORMATS}, got {settings.logging.format!r}"
        )


def build_allocator(settings: ErrChainSettings) -> Allocator:
    if settings.allocator.kind == "tracking":
        return TrackingAllocator(byte_budget=settings.allocator.byte_budget)
    return SystemAllocator()


def apply_settings(settings: ErrChainSettings) -> Allocator:
    """Configure logging and install the configured process-wide allocator."""
    from errchain.core import use_allocator
    from errchain.observability.logging import configure_logging

    configure_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file,
    )
    allocator = build_allocator(settings)
    use_allocator(allocator)
    return allocator
