"""Configuration management for the gzip helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv

from .common.constants import DEFAULT_IO_BUFFER_SIZE
from .core.compression import CompressionLevel
from .utils import ConfigError

ENV_COMPRESSION_LEVEL = "GZIP_COMPRESSION_LEVEL"
ENV_IO_BUFFER_SIZE = "IO_BUFFER_SIZE"
ENV_LOG_LEVEL = "GZIP_LOG_LEVEL"


def _env_path() -> Path:
    return Path.cwd() / ".env"


@dataclass(frozen=True)
class Config:
    """Singleton configuration object."""

    compression_level: CompressionLevel
    io_buffer_size: int
    log_level: int

    _instance: ClassVar[Optional["Config"]] = None

    @classmethod
    def get_instance(cls) -> "Config":
        """
        Retrieve a singleton instance of Config.

        Returns:
            Config singleton instance.
        """
        if cls._instance is None:
            cls._instance = load_config()
        return cls._instance


def _parse_int(value: str, name: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}.") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be greater than 0.")
    return parsed


def _parse_level(value: str) -> CompressionLevel:
    try:
        return CompressionLevel.from_name(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid {ENV_COMPRESSION_LEVEL}: {exc}") from exc


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Invalid {ENV_LOG_LEVEL}: {value!r}.")
    return level


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load and validate configuration from the environment.

    Values from ``env_file`` (default ``.env`` in the working directory) are
    used only for variables not already set.

    Args:
        env_file: Optional path to a dotenv file.

    Returns:
        Config instance.
    """
    env_file = env_file or _env_path()
    if env_file.exists():
        load_dotenv(env_file)

    level = os.getenv(ENV_COMPRESSION_LEVEL, "default").strip()
    buffer_size = os.getenv(
        ENV_IO_BUFFER_SIZE, str(DEFAULT_IO_BUFFER_SIZE)).strip()
    log_level = os.getenv(ENV_LOG_LEVEL, "INFO").strip()

    return Config(
        compression_level=_parse_level(level),
        io_buffer_size=_parse_int(buffer_size, ENV_IO_BUFFER_SIZE),
        log_level=_parse_log_level(log_level),
    )
