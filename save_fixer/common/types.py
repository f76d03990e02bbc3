"""Type definitions and data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class SaveFile:
    """A save document held in memory as JSON text."""
    json_content: str
    file_path: Optional[Path] = None


@dataclass
class FixReport:
    """Counters collected while a fix policy scans a document."""
    policy: str
    total_entities: int = 0
    entities_scanned: int = 0
    drones_found: int = 0
    removed_keys: List[str] = field(default_factory=list)
    changed: bool = False
    cancelled: bool = False
    schema_error: Optional[str] = None

    @property
    def removed_count(self) -> int:
        return len(self.removed_keys)


@dataclass
class ContainerInfo:
    """Header and trailer details of an encoded save container."""
    size_hint: int
    payload_size: int
    zlib_wrapped: bool
    decompressed_size: int
    checksum: int
    stored_checksum: Optional[int] = None

    @property
    def size_matches(self) -> bool:
        return self.size_hint == self.decompressed_size

    @property
    def checksum_ok(self) -> Optional[bool]:
        if self.stored_checksum is None:
            return None
        return self.stored_checksum == self.checksum

