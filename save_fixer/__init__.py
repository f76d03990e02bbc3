"""Repair tools for StarRupture save files."""

from .common.types import ContainerInfo, FixReport, SaveFile
from .core import (
    FullRemoval,
    SelectiveFix,
    adler32,
    apply_full_removal,
    apply_selective_fix,
    classify,
    decode_container,
    encode_container,
    extract_movement_target,
    get_fixer,
)
from .utils import (
    ContainerError,
    DecompressionError,
    EncodingError,
    FixError,
    MalformedEntityError,
    SaveFixerError,
    SchemaError,
    TooSmallError,
)

__version__ = "1.0.0"

__all__ = [
    "ContainerInfo",
    "FixReport",
    "SaveFile",
    "FullRemoval",
    "SelectiveFix",
    "adler32",
    "apply_full_removal",
    "apply_selective_fix",
    "classify",
    "decode_container",
    "encode_container",
    "extract_movement_target",
    "get_fixer",
    "ContainerError",
    "DecompressionError",
    "EncodingError",
    "FixError",
    "MalformedEntityError",
    "SaveFixerError",
    "SchemaError",
    "TooSmallError",
]
