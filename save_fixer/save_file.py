"""Loading, fixing and writing save files on disk."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import aiofiles

from .common.types import FixReport, SaveFile
from .config import Config
from .core.container import pack, unpack
from .core.repair import Fixer, ProgressCallback, get_fixer
from .utils import SaveFileError, atomic_write_bytes, format_bytes, read_file_bytes

logger = logging.getLogger(__name__)


def _check_exists(path: Path) -> None:
    if not path.is_file():
        raise SaveFileError(f"Save file not found: {path}")


def _target_path(save_file: SaveFile, output_path: Optional[Path]) -> Path:
    target = output_path or save_file.file_path
    if target is None:
        raise SaveFileError("No output path given and the save file has no path.")
    return Path(target)


def _compression_level(compresslevel: Optional[int]) -> int:
    if compresslevel is None:
        return Config.get_instance().compression_level
    return compresslevel


def read_save_bytes(path: Path) -> bytes:
    """Read the raw container bytes of an existing save file."""
    path = Path(path)
    _check_exists(path)
    return read_file_bytes(path)


def load_save_file(path: Path) -> SaveFile:
    """
    Read a save file and decode its JSON content.

    Args:
        path: Path to the .sav file.

    Returns:
        SaveFile holding the decoded JSON text.
    """
    path = Path(path)
    data = read_save_bytes(path)
    save_file = SaveFile(json_content=unpack(data), file_path=path)
    logger.info(
        "Loaded %s (%s, JSON %s)",
        path.name,
        format_bytes(len(data)),
        format_bytes(len(save_file.json_content.encode("utf-8"))),
    )
    return save_file


def write_save_file(
    save_file: SaveFile,
    output_path: Optional[Path] = None,
    compresslevel: Optional[int] = None,
) -> Path:
    """
    Encode a save file and write it atomically.

    Args:
        save_file: Save file to write.
        output_path: Destination. Defaults to the save file's own path.
        compresslevel: Deflate level. Defaults to the configured level.

    Returns:
        Path written.
    """
    target = _target_path(save_file, output_path)
    data = pack(save_file.json_content, _compression_level(compresslevel))
    atomic_write_bytes(target, data)
    logger.info("Wrote %s (%s)", target, format_bytes(len(data)))
    return target


async def load_save_file_async(path: Path) -> SaveFile:
    """Async variant of :func:`load_save_file`."""
    path = Path(path)
    _check_exists(path)
    try:
        async with aiofiles.open(path, "rb") as infile:
            data = await infile.read()
    except OSError as exc:
        raise SaveFileError(f"Could not read {path}: {exc}") from exc
    json_content = await asyncio.to_thread(unpack, data)
    logger.info("Loaded %s (%s)", path.name, format_bytes(len(data)))
    return SaveFile(json_content=json_content, file_path=path)


async def write_save_file_async(
    save_file: SaveFile,
    output_path: Optional[Path] = None,
    compresslevel: Optional[int] = None,
) -> Path:
    """Async variant of :func:`write_save_file`."""
    target = _target_path(save_file, output_path)
    data = await asyncio.to_thread(
        pack, save_file.json_content, _compression_level(compresslevel)
    )
    await asyncio.to_thread(atomic_write_bytes, target, data)
    logger.info("Wrote %s (%s)", target, format_bytes(len(data)))
    return target


async def run_fix_async(fixer: Fixer, save_file: SaveFile) -> bool:
    """Run a fix on a worker thread so the event loop stays responsive."""
    return await asyncio.to_thread(fixer.apply_fix, save_file)


async def process_save_file(
    path: Path,
    policy: Optional[str] = None,
    output_path: Optional[Path] = None,
    dry_run: bool = False,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[Any] = None,
) -> FixReport:
    """
    Load a save file, apply a fix policy and write the result if it changed.

    Args:
        path: Save file to fix.
        policy: Fix policy name. Defaults to the configured policy.
        output_path: Where to write the fixed file. Defaults to ``path``.
        dry_run: Report what would change without writing anything.
        progress_callback: Called with (scanned, total) while scanning.
        cancel_event: Event checked between entities to abort the scan.

    Returns:
        FixReport describing the run.
    """
    config = Config.get_instance()
    save_file = await load_save_file_async(path)
    fixer = get_fixer(
        policy or config.default_policy,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
        progress_interval=config.progress_interval,
    )
    changed = await run_fix_async(fixer, save_file)

    if not changed:
        logger.info("No changes were made to the save file.")
    elif dry_run:
        logger.info("Dry run: %s drone(s) would be removed.", fixer.report.removed_count)
    else:
        await write_save_file_async(save_file, output_path)
    return fixer.report
