"""Core save logic (pure Python, no file or terminal I/O)."""

from .checksum import adler32
from .container import decode_container, encode_container, inspect_container, pack, unpack
from .entity_graph import EntityGraph, entity_key, get_path, parse_entity_key
from .classifier import (
    MovementIds,
    classify,
    extract_movement_ids,
    extract_movement_start,
    extract_movement_target,
    is_rail_drone,
)
from .repair import (
    FIXERS,
    Fixer,
    FullRemoval,
    SelectiveFix,
    apply_full_removal,
    apply_selective_fix,
    get_fixer,
)

__all__ = [
    "adler32",
    "decode_container",
    "encode_container",
    "inspect_container",
    "pack",
    "unpack",
    "EntityGraph",
    "entity_key",
    "get_path",
    "parse_entity_key",
    "MovementIds",
    "classify",
    "extract_movement_ids",
    "extract_movement_start",
    "extract_movement_target",
    "is_rail_drone",
    "FIXERS",
    "Fixer",
    "FullRemoval",
    "SelectiveFix",
    "apply_full_removal",
    "apply_selective_fix",
    "get_fixer",
]
