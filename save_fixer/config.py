"""Configuration management for the save fixer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv

from .common.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_POLICY,
    DEFAULT_PROGRESS_INTERVAL,
    POLICY_NAMES,
)
from .utils import ConfigError

ENV_LOG_LEVEL = "SAVE_FIXER_LOG_LEVEL"
ENV_PROGRESS_INTERVAL = "SAVE_FIXER_PROGRESS_INTERVAL"
ENV_COMPRESSION_LEVEL = "SAVE_FIXER_COMPRESSION_LEVEL"
ENV_POLICY = "SAVE_FIXER_POLICY"


def _env_path() -> Path:
    return Path.cwd() / ".env"


@dataclass(frozen=True)
class Config:
    """Singleton configuration object."""

    log_level: str
    progress_interval: int
    compression_level: int
    default_policy: str

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

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the cached instance so the next lookup reloads the environment."""
        cls._instance = None


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}.") from exc


def _parse_progress_interval(value: str) -> int:
    parsed = _parse_int(value, ENV_PROGRESS_INTERVAL)
    if parsed <= 0:
        raise ConfigError(f"{ENV_PROGRESS_INTERVAL} must be greater than 0.")
    return parsed


def _parse_compression_level(value: str) -> int:
    parsed = _parse_int(value, ENV_COMPRESSION_LEVEL)
    if not 0 <= parsed <= 9:
        raise ConfigError(f"{ENV_COMPRESSION_LEVEL} must be between 0 and 9.")
    return parsed


def _parse_log_level(value: str) -> str:
    level = value.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown log level for {ENV_LOG_LEVEL}: {value}")
    return level


def _parse_policy(value: str) -> str:
    policy = value.lower()
    if policy not in POLICY_NAMES:
        choices = ", ".join(POLICY_NAMES)
        raise ConfigError(f"{ENV_POLICY} must be one of: {choices}.")
    return policy


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load and validate configuration from the environment and an optional .env file.

    Args:
        env_file: Explicit .env path. Defaults to ``.env`` in the working directory.

    Returns:
        Config instance.
    """
    env_file = env_file or _env_path()
    if env_file.exists():
        load_dotenv(env_file)

    log_level = os.getenv(ENV_LOG_LEVEL, "INFO").strip()
    progress_interval = os.getenv(
        ENV_PROGRESS_INTERVAL, str(DEFAULT_PROGRESS_INTERVAL)).strip()
    compression_level = os.getenv(
        ENV_COMPRESSION_LEVEL, str(DEFAULT_COMPRESSION_LEVEL)).strip()
    policy = os.getenv(ENV_POLICY, DEFAULT_POLICY).strip()

    return Config(
        log_level=_parse_log_level(log_level),
        progress_interval=_parse_progress_interval(progress_interval),
        compression_level=_parse_compression_level(compression_level),
        default_policy=_parse_policy(policy),
    )
