"""Common constants and data models."""

from .constants import (
    LOGISTICS_FRAGMENT_PREFIX,
    POLICY_NAMES,
    POLICY_REMOVE_ALL,
    POLICY_SELECTIVE,
    RAIL_DRONE_CONFIG_PATH,
)
from .types import ContainerInfo, FixReport, SaveFile

__all__ = [
    "LOGISTICS_FRAGMENT_PREFIX",
    "POLICY_NAMES",
    "POLICY_REMOVE_ALL",
    "POLICY_SELECTIVE",
    "RAIL_DRONE_CONFIG_PATH",
    "ContainerInfo",
    "FixReport",
    "SaveFile",
]
