"""Command-line interface for the save fixer."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional, Tuple

from colorama import Fore, Style, init as colorama_init
from tqdm import tqdm

from .common.constants import POLICY_NAMES
from .common.types import FixReport, SaveFile
from .config import Config
from .core.classifier import classify
from .core.container import inspect_container, unpack
from .core.entity_graph import EntityGraph
from .core.repair import FIXERS
from .save_file import load_save_file, process_save_file, read_save_bytes, write_save_file
from .utils import (
    SaveFixerError,
    SchemaError,
    atomic_write_bytes,
    clean_path,
    format_bytes,
    read_file_bytes,
    setup_logging,
)


def _cli_header() -> str:
    return (
        f"{Fore.CYAN}StarRupture Save Fixer{Style.RESET_ALL}\n"
        f"{Fore.WHITE}Repair or remove rail drones in .sav files.{Style.RESET_ALL}\n"
    )


def _command_showcase() -> List[Tuple[str, str, str]]:
    return [
        ("fix <path>", "Fix a save file", "Remove broken drones."),
        ("info <path>", "Inspect a save file", "Header, checksum, drone count."),
        ("decode <sav> <json>", "Export JSON", "Write the save's JSON text."),
        ("encode <json> <sav>", "Import JSON", "Build a save from JSON text."),
    ]


def _print_command_help(title: str) -> None:
    print(_cli_header())
    print(title)
    print("Usage: python main.py <command> [options]")
    print("\nAvailable commands:\n")
    for command, label, usecase in _command_showcase():
        print(f"  {command:<22} - {label} ({usecase})")
    print("\nFix policies:\n")
    for policy, fixer_cls in FIXERS.items():
        print(f"  {policy:<22} - {fixer_cls.name}")
    print("\nExamples:")
    print("  python main.py fix MySave.sav -o MySave_fixed.sav")
    print("  python main.py fix MySave.sav --policy remove-all --in-place")
    print("  python main.py fix MySave.sav --dry-run")
    print("")


class _FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        _print_command_help(f"{Fore.RED}Error:{Style.RESET_ALL} {message}")
        print(f"{Fore.YELLOW}Tip:{Style.RESET_ALL} Run `python main.py help` for examples.")
        raise SystemExit(2)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = _FriendlyArgumentParser(description="StarRupture Save Fixer CLI")
    parser.add_argument("--log-level", type=str, help="Override SAVE_FIXER_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    fix_parser = subparsers.add_parser("fix", help="Fix a save file")
    fix_parser.add_argument("path", help="Path to the .sav file")
    fix_parser.add_argument(
        "--policy", choices=POLICY_NAMES, help="Fix policy (default: SAVE_FIXER_POLICY)"
    )
    target = fix_parser.add_mutually_exclusive_group()
    target.add_argument("-o", "--output", type=str, help="Write the fixed save here")
    target.add_argument(
        "--in-place", action="store_true", help="Overwrite the input file"
    )
    fix_parser.add_argument(
        "--dry-run", action="store_true", help="Report changes without writing"
    )

    info_parser = subparsers.add_parser("info", help="Inspect a save file")
    info_parser.add_argument("path", help="Path to the .sav file")

    decode_parser = subparsers.add_parser("decode", help="Export a save as JSON")
    decode_parser.add_argument("path", help="Path to the .sav file")
    decode_parser.add_argument("output", help="Destination .json file")
    decode_parser.add_argument(
        "--pretty", action="store_true", help="Indent the JSON output"
    )

    encode_parser = subparsers.add_parser("encode", help="Build a save from JSON")
    encode_parser.add_argument("path", help="Path to the .json file")
    encode_parser.add_argument("output", help="Destination .sav file")

    subparsers.add_parser("help", help="Show help and usage examples")

    return parser.parse_args(argv)


def _print_report(report: FixReport, dry_run: bool) -> None:
    print(f"{Fore.CYAN}Policy:{Style.RESET_ALL} {FIXERS[report.policy].name}")
    print(f"Entities scanned: {report.entities_scanned}/{report.total_entities}")
    print(f"Drones found:     {report.drones_found}")
    label = "Would remove:    " if dry_run else "Removed:         "
    print(f"{label} {report.removed_count}")
    for key in report.removed_keys:
        print(f"  - {key}")


def command_fix(args: argparse.Namespace) -> None:
    """
    Handle fix command.
    """
    source = clean_path(args.path)
    if args.output:
        output_path: Optional[Path] = clean_path(args.output)
    elif args.in_place or args.dry_run:
        output_path = source
    else:
        raise SaveFixerError(
            "Choose where to write the fixed save: --output PATH or --in-place."
        )

    progress = tqdm(total=0, desc="Scanning", unit="entity")

    def _progress(done: int, total: int) -> None:
        progress.n = done
        progress.total = total
        progress.refresh()

    try:
        report = asyncio.run(
            process_save_file(
                source,
                policy=args.policy,
                output_path=output_path,
                dry_run=args.dry_run,
                progress_callback=_progress,
            )
        )
    except KeyboardInterrupt:
        print(f"{Fore.YELLOW}Cancelled. The save file was not modified.{Style.RESET_ALL}")
        return
    finally:
        progress.close()

    if report.schema_error:
        print(f"{Fore.YELLOW}Nothing to fix: {report.schema_error}{Style.RESET_ALL}")
        return
    _print_report(report, args.dry_run)
    if not report.changed:
        print(f"{Fore.GREEN}✓ No changes were needed for this save file.{Style.RESET_ALL}")
    elif args.dry_run:
        print(f"{Fore.YELLOW}Dry run: nothing was written.{Style.RESET_ALL}")
    else:
        print(f"{Fore.GREEN}✅ Fixed save written to: {output_path}{Style.RESET_ALL}")


def command_info(args: argparse.Namespace) -> None:
    """
    Handle info command.
    """
    path = clean_path(args.path)
    data = read_save_bytes(path)
    info = inspect_container(data)
    json_content = unpack(data)

    print(f"{Fore.CYAN}Save file:{Style.RESET_ALL} {path}")
    print(f"Size header:       {info.size_hint} bytes")
    print(f"Decompressed size: {format_bytes(info.decompressed_size)}")
    print(f"Compressed size:   {format_bytes(info.payload_size)}")
    print(f"zlib wrapped:      {'yes' if info.zlib_wrapped else 'no (raw deflate)'}")
    if info.checksum_ok is None:
        print("Adler-32:          no trailer")
    elif info.checksum_ok:
        print(f"Adler-32:          {Fore.GREEN}{info.checksum:08x} OK{Style.RESET_ALL}")
    else:
        print(
            f"Adler-32:          {Fore.RED}stored {info.stored_checksum:08x}, "
            f"computed {info.checksum:08x}{Style.RESET_ALL}"
        )
    if not info.size_matches:
        print(f"{Fore.YELLOW}Size header does not match the JSON length.{Style.RESET_ALL}")

    try:
        graph = EntityGraph.from_json(json_content)
    except SchemaError as exc:
        print(f"{Fore.YELLOW}No entity map: {exc}{Style.RESET_ALL}")
        return
    drones = sum(1 for entity in graph.entities().values() if classify(entity) is not None)
    print(f"Entities:          {len(graph)}")
    print(f"Rail drones:       {drones}")


def command_decode(args: argparse.Namespace) -> None:
    """
    Handle decode command.
    """
    source = clean_path(args.path)
    save_file = load_save_file(source)
    output = clean_path(args.output)
    text = save_file.json_content
    if args.pretty:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SaveFixerError(f"{source.name} is not valid JSON: {exc}") from exc
        text = json.dumps(document, ensure_ascii=False, indent=2)
    atomic_write_bytes(output, text.encode("utf-8"))
    print(f"{Fore.GREEN}✅ JSON written to: {output}{Style.RESET_ALL}")


def command_encode(args: argparse.Namespace) -> None:
    """
    Handle encode command.
    """
    source = clean_path(args.path)
    if not source.is_file():
        raise SaveFixerError(f"JSON file not found: {source}")
    try:
        text = read_file_bytes(source).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SaveFixerError(f"{source.name} is not UTF-8 text: {exc.reason}") from exc
    try:
        json.loads(text)
    except json.JSONDecodeError as exc:
        raise SaveFixerError(f"{source.name} is not valid JSON: {exc}") from exc
    target = write_save_file(SaveFile(json_content=text), clean_path(args.output))
    print(f"{Fore.GREEN}✅ Save written to: {target}{Style.RESET_ALL}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.
    """
    colorama_init()
    args = parse_arguments(argv)

    try:
        config = Config.get_instance()
        setup_logging(args.log_level or config.log_level)

        if not args.command:
            _print_command_help("Choose a command to continue.")
            return 0
        if args.command == "help":
            _print_command_help("StarRupture Save Fixer Help")
            return 0
        if args.command == "fix":
            command_fix(args)
        elif args.command == "info":
            command_info(args)
        elif args.command == "decode":
            command_decode(args)
        elif args.command == "encode":
            command_encode(args)
    except SaveFixerError as exc:
        print(f"{Fore.RED}Error: {exc}{Style.RESET_ALL}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
