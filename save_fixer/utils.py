"""Shared utilities for the save fixer."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Union


class SaveFixerError(Exception):
    """Base exception for save fixer errors."""


class ContainerError(SaveFixerError):
    """Raised when a save container cannot be decoded."""


class TooSmallError(ContainerError):
    """Raised when a container is shorter than its 4-byte size header."""


class DecompressionError(ContainerError):
    """Raised when the deflate stream is corrupt or truncated."""


class EncodingError(ContainerError):
    """Raised when the inflated payload is not valid UTF-8."""


class SchemaError(SaveFixerError):
    """Raised when a document lacks the itemData.Mass.entities map."""


class MalformedEntityError(SaveFixerError):
    """Raised when a single entity has an unexpected shape."""


class FixError(SaveFixerError):
    """Raised when a fix cannot run on the given document."""


class SaveFileError(SaveFixerError):
    """Raised when a save file cannot be read or written."""


class ConfigError(SaveFixerError):
    """Raised when configuration is invalid."""


LOGGER_NAME = "save_fixer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging verbosity level (number or name such as "DEBUG").

    Returns:
        The configured ``save_fixer`` logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)

    if not package_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        package_logger.addHandler(console_handler)
    for handler in package_logger.handlers:
        handler.setLevel(level)

    return package_logger


def format_bytes(size: int) -> str:
    """
    Convert bytes to a human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Human-readable size string.
    """
    if size < 0:
        raise ValueError("Size must be non-negative.")

    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} TB"


def clean_path(path_str: str) -> Path:
    """Clean input paths from quotes and extra spaces."""
    cleaned = str(path_str).strip().strip("'").strip('"')
    cleaned = cleaned.replace("\\ ", " ")
    return Path(os.path.expanduser(cleaned))


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    Write bytes atomically to a file.

    Args:
        path: Destination path.
        data: Bytes to write.

    Raises:
        SaveFileError: If the file cannot be written. No temporary file is left behind.
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "wb") as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        temp_path.replace(path)
    except OSError as exc:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove temporary file %s", temp_path)
        raise SaveFileError(f"Could not write {path}: {exc}") from exc


def read_file_bytes(path: Path) -> bytes:
    """Read a whole file, reporting OS failures as SaveFileError."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise SaveFileError(f"Could not read {path}: {exc}") from exc
