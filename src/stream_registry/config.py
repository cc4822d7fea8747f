"""
Stream Registry configuration.

Settings come from the environment or a YAML file:

Environment variables:
- SR_STORE_BACKEND: "memory" or "sqlite" (default: sqlite)
- SR_DATABASE_PATH: SQLite file (default: var/registry/streams.db)
- SR_JOURNAL_PATH: JSONL event journal; unset disables the journal
- SR_LOCATOR_MAX_LENGTH: Longest accepted locator (default: 128)
- SR_SQLITE_JOURNAL_MODE: SQLite journal mode pragma (default: WAL)
- SR_LOG_LEVEL: Logging level name (default: WARNING)
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from stream_registry.core.exceptions import ConfigurationError
from stream_registry.events.journal import JsonlEventJournal
from stream_registry.events.sinks import FanOutSink, LoggingSink
from stream_registry.registry.collaborators import (
    Authorizer,
    CounterClock,
    LedgerClock,
    SchemaValidator,
)
from stream_registry.registry.locator import CidLocatorValidator
from stream_registry.registry.machine import StreamRegistry
from stream_registry.registry.schemas import SchemaBook
from stream_registry.store.base import RegistryStore
from stream_registry.store.memory import InMemoryStore
from stream_registry.store.sqlite import SqliteStore

_JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}


class StoreBackend(str, Enum):
    """Available store backends."""

    MEMORY = "memory"
    SQLITE = "sqlite"


class RegistrySettings(BaseModel):
    """Runtime settings for a registry instance."""

    backend: StoreBackend = StoreBackend.SQLITE
    database_path: Path = Field(default=SqliteStore.DEFAULT_PATH)
    journal_path: Path | None = None
    locator_max_length: int = Field(default=CidLocatorValidator.DEFAULT_MAX_LENGTH, gt=0)
    sqlite_journal_mode: str = "WAL"
    log_level: str = "WARNING"

    @field_validator("sqlite_journal_mode")
    @classmethod
    def _known_journal_mode(cls, value: str) -> str:
        value = value.upper()
        if value not in _JOURNAL_MODES:
            raise ValueError(f"unknown SQLite journal mode {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        """Load settings from SR_* environment variables."""
        env_map = {
            "backend": "SR_STORE_BACKEND",
            "database_path": "SR_DATABASE_PATH",
            "journal_path": "SR_JOURNAL_PATH",
            "locator_max_length": "SR_LOCATOR_MAX_LENGTH",
            "sqlite_journal_mode": "SR_SQLITE_JOURNAL_MODE",
            "log_level": "SR_LOG_LEVEL",
        }
        data: dict[str, Any] = {}
        for key, env_var in env_map.items():
            value = os.getenv(env_var)
            if value:
                data[key] = value

        try:
            return cls(**data)
        except ValidationError as e:
            bad = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            env_vars = ", ".join(sorted(env_map[k] for k in bad if k in env_map))
            raise ConfigurationError(
                f"Invalid registry settings in environment: {env_vars or e}",
                env_var=env_vars or None,
            ) from e

    @classmethod
    def from_yaml(cls, path: Path) -> "RegistrySettings":
        """
        Load settings from a YAML mapping.

        Raises:
            ConfigurationError: If the file is missing, malformed, or invalid
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text())
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file: {e}", config_file=str(path)) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed YAML: {e}", config_file=str(path)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping", config_file=str(path)
            )

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid registry settings: {e}", config_file=str(path)
            ) from e


def configure_logging(level: str) -> None:
    """Set the level of the package logger."""
    logging.getLogger("stream_registry").setLevel(level)


def open_store(settings: RegistrySettings) -> RegistryStore:
    """Open the store backend selected by ``settings``."""
    if settings.backend == StoreBackend.MEMORY:
        return InMemoryStore()
    return SqliteStore(settings.database_path, journal_mode=settings.sqlite_journal_mode)


def build_registry(
    settings: RegistrySettings | None = None,
    *,
    authorizer: Authorizer,
    schema_validator: SchemaValidator | None = None,
    clock: LedgerClock | None = None,
) -> StreamRegistry:
    """
    Wire a registry from settings.

    Identity resolution is host specific, so the authorizer is always
    supplied by the caller. Schema validation defaults to an empty
    SchemaBook and the clock to a CounterClock.
    """
    settings = settings or RegistrySettings.from_env()
    configure_logging(settings.log_level)

    sinks: list = [LoggingSink(level=logging.DEBUG)]
    if settings.journal_path is not None:
        sinks.append(JsonlEventJournal(settings.journal_path))

    return StreamRegistry(
        store=open_store(settings),
        authorizer=authorizer,
        schema_validator=schema_validator or SchemaBook(),
        locator_validator=CidLocatorValidator(settings.locator_max_length),
        clock=clock or CounterClock(),
        sink=FanOutSink(sinks),
    )
