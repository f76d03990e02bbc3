"""Read/mutate access to the entities map of a save document."""

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Union

from ..common.constants import ENTITIES_PATH
from ..utils import FixError, SchemaError

JsonValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]
Entity = Dict[str, Any]

ENTITY_KEY_PATTERN = re.compile(r"\(ID=(\d+)\)")


def entity_key(entity_id: int) -> str:
    """Build the ``(ID=n)`` map key for an entity id."""
    return f"(ID={entity_id})"


def parse_entity_key(key: str) -> Optional[int]:
    """Return the id of an ``(ID=n)`` key, or None for any other string."""
    match = ENTITY_KEY_PATTERN.fullmatch(key)
    if not match:
        return None
    return int(match.group(1))


def as_object(node: JsonValue) -> Optional[Dict[str, Any]]:
    return node if isinstance(node, dict) else None


def as_array(node: JsonValue) -> Optional[List[Any]]:
    return node if isinstance(node, list) else None


def as_str(node: JsonValue) -> Optional[str]:
    return node if isinstance(node, str) else None


def get_path(node: JsonValue, *keys: str) -> JsonValue:
    """
    Follow object keys from node.

    Returns None as soon as a step is missing or the current node is not an object.
    """
    current = node
    for key in keys:
        obj = as_object(current)
        if obj is None or key not in obj:
            return None
        current = obj[key]
    return current


class EntityGraph:
    """View over ``itemData.Mass.entities`` of a parsed save document."""

    def __init__(self, root: JsonValue) -> None:
        self._root = root
        self._entities = self._locate_entities(root)

    @classmethod
    def from_json(cls, text: str) -> "EntityGraph":
        """
        Parse JSON text and build a view over it.

        Raises:
            FixError: If text is not valid JSON
            SchemaError: If the entities map is missing
        """
        try:
            root = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FixError(f"JSON parsing error: {exc}") from exc
        return cls(root)

    @staticmethod
    def _locate_entities(root: JsonValue) -> Dict[str, Any]:
        current = root
        walked: List[str] = []
        for key in ENTITIES_PATH:
            obj = as_object(current)
            if obj is None:
                location = ".".join(walked) or "document root"
                raise SchemaError(f"'{location}' is not a JSON object.")
            if key not in obj:
                parent = walked[-1] if walked else "document root"
                raise SchemaError(f"'{key}' not found in {parent}.")
            current = obj[key]
            walked.append(key)

        entities = as_object(current)
        if entities is None:
            raise SchemaError("'entities' in Mass is not a JSON object.")
        return entities

    @property
    def root(self) -> JsonValue:
        return self._root

    def entities(self) -> Dict[str, Entity]:
        """Return the live entities map in document order."""
        return self._entities

    def keys(self) -> List[str]:
        return list(self._entities)

    def get(self, key: str) -> Optional[Entity]:
        return self._entities.get(key)

    def remove(self, key: str) -> bool:
        """Remove an entity; returns whether the key existed."""
        if key not in self._entities:
            return False
        del self._entities[key]
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)

    def serialize(self) -> str:
        """Serialize the whole document as compact JSON."""
        return json.dumps(self._root, ensure_ascii=False, separators=(",", ":"))
