"""Recognition of rail drone entities and their movement references."""

import logging
import re
from typing import Any, NamedTuple, Optional

from ..common.constants import LOGISTICS_FRAGMENT_PREFIX, RAIL_DRONE_CONFIG_PATH
from ..utils import MalformedEntityError
from .entity_graph import as_array, as_object, as_str, get_path

logger = logging.getLogger(__name__)

MOVEMENT_START_PATTERN = re.compile(r"CurrentMovementStart=\(ID=(\d+)\)")
MOVEMENT_TARGET_PATTERN = re.compile(r"CurrentMovementTarget=\(ID=(\d+)\)")


class MovementIds(NamedTuple):
    start: Optional[int]
    target: Optional[int]


def _logistics_fragment(entity: Any) -> Optional[str]:
    if as_object(entity) is None:
        return None

    config_path = as_str(get_path(entity, "spawnData", "entityConfigDataPath"))
    if config_path != RAIL_DRONE_CONFIG_PATH:
        return None

    if "fragmentValues" not in entity:
        return None
    fragments = as_array(entity["fragmentValues"])
    if fragments is None:
        raise MalformedEntityError(
            f"fragmentValues is {type(entity['fragmentValues']).__name__}, expected array"
        )

    for fragment in fragments:
        text = as_str(fragment)
        if text is not None and text.startswith(LOGISTICS_FRAGMENT_PREFIX):
            return text
    return None


def classify(entity: Any) -> Optional[str]:
    """
    Return the logistics fragment of a rail drone entity.

    An entity is a rail drone when its ``spawnData.entityConfigDataPath`` is the
    rail drone config asset and its ``fragmentValues`` holds a logistics agent
    fragment. Anything else, including malformed entities, yields None.
    """
    try:
        return _logistics_fragment(entity)
    except MalformedEntityError as exc:
        logger.debug("Skipping malformed drone entity: %s", exc)
        return None


def is_rail_drone(entity: Any) -> bool:
    return classify(entity) is not None


def _match_id(pattern: "re.Pattern[str]", fragment: str) -> Optional[int]:
    match = pattern.search(fragment)
    if not match:
        return None
    return int(match.group(1))


def extract_movement_ids(fragment: str) -> MovementIds:
    """Pull CurrentMovementStart and CurrentMovementTarget ids out of a fragment."""
    return MovementIds(
        start=_match_id(MOVEMENT_START_PATTERN, fragment),
        target=_match_id(MOVEMENT_TARGET_PATTERN, fragment),
    )


def extract_movement_target(fragment: str) -> Optional[int]:
    return _match_id(MOVEMENT_TARGET_PATTERN, fragment)


def extract_movement_start(fragment: str) -> Optional[int]:
    return _match_id(MOVEMENT_START_PATTERN, fragment)
