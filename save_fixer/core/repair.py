"""Fix policies that prune rail drone entities from a save document."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from ..common.constants import DEFAULT_PROGRESS_INTERVAL, POLICY_REMOVE_ALL, POLICY_SELECTIVE
from ..common.types import FixReport, SaveFile
from ..utils import FixError, SchemaError
from .classifier import classify, extract_movement_target
from .entity_graph import EntityGraph, entity_key

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
DroneCandidate = Tuple[str, str]


class Fixer(ABC):
    """
    Base class for fix policies.

    A fix scans the entities map once in document order, decides which drone
    entities to delete and removes them all in a single pass afterwards. If
    ``cancel_event`` is set during the scan the document is left untouched.
    """

    name = "Fixer"
    policy = ""

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[Any] = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        if progress_interval <= 0:
            raise FixError("Progress interval must be greater than 0.")
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event
        self.progress_interval = progress_interval
        self.report = FixReport(policy=self.policy)

    def _is_cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _scan(self, graph: EntityGraph) -> Optional[List[DroneCandidate]]:
        entities = graph.entities()
        total = len(entities)
        self.report.total_entities = total
        logger.info("Scanning %s entities for drone candidates...", total)

        drones: List[DroneCandidate] = []
        for index, (key, entity) in enumerate(entities.items()):
            if self._is_cancelled():
                return None
            fragment = classify(entity)
            if fragment is not None:
                drones.append((key, fragment))
            self.report.entities_scanned = index + 1
            if self.progress_callback and (
                index % self.progress_interval == 0 or index == total - 1
            ):
                self.progress_callback(index + 1, total)

        self.report.drones_found = len(drones)
        return drones

    @abstractmethod
    def select(self, graph: EntityGraph, drones: List[DroneCandidate]) -> List[str]:
        """Return the keys of the drone entities to delete."""

    def apply(self, graph: EntityGraph) -> bool:
        """
        Run the policy on an entity graph.

        Returns:
            True if any entity was removed
        """
        self.report = FixReport(policy=self.policy)

        drones = self._scan(graph)
        if drones is None or self._is_cancelled():
            self.report.cancelled = True
            logger.warning("%s cancelled. No changes were made.", self.name)
            return False
        logger.info("Found %s drone(s) to check.", len(drones))

        doomed = self.select(graph, drones)
        if self._is_cancelled():
            self.report.cancelled = True
            logger.warning("%s cancelled. No changes were made.", self.name)
            return False

        if not doomed:
            logger.info("No drones to remove. Save file is clean.")
            return False

        for key in doomed:
            graph.remove(key)
        self.report.removed_keys = list(doomed)
        self.report.changed = True
        logger.info("Successfully removed %s drone(s).", len(doomed))
        return True

    def apply_fix(self, save_file: SaveFile) -> bool:
        """
        Run the policy on a save file's JSON content.

        The content is only rewritten when a drone was removed. A document
        without an entities map is reported as unchanged.

        Raises:
            FixError: If the content is not valid JSON
        """
        logger.info("Applying fix: %s", self.name)
        try:
            graph = EntityGraph.from_json(save_file.json_content)
        except SchemaError as exc:
            logger.warning("%s", exc)
            self.report = FixReport(policy=self.policy, schema_error=str(exc))
            return False

        changed = self.apply(graph)
        if changed:
            save_file.json_content = graph.serialize()
        return changed


class SelectiveFix(Fixer):
    """Remove drones whose CurrentMovementTarget points at a missing entity."""

    name = "Fix Drones (Remove invalid targets)"
    policy = POLICY_SELECTIVE

    def select(self, graph: EntityGraph, drones: List[DroneCandidate]) -> List[str]:
        targets: Dict[str, str] = {}
        for index, (key, fragment) in enumerate(drones, start=1):
            logger.debug("Checking drone %s/%s: %s", index, len(drones), key)
            target = extract_movement_target(fragment)
            if target is None:
                logger.debug("Drone %s has no movement target, keeping it.", key)
                continue
            targets[key] = entity_key(target)

        doomed = [key for key, target in targets.items() if target not in graph]
        marked = set(doomed)

        # Drones heading for a drone that is about to be removed dangle as well.
        grew = bool(marked)
        while grew:
            grew = False
            for key, target in targets.items():
                if key not in marked and target in marked:
                    marked.add(key)
                    doomed.append(key)
                    grew = True

        logger.info("Found %s invalid drone(s) to delete.", len(doomed))
        return doomed


class FullRemoval(Fixer):
    """Remove every rail drone regardless of where it is heading."""

    name = "Remove All Drones"
    policy = POLICY_REMOVE_ALL

    def select(self, graph: EntityGraph, drones: List[DroneCandidate]) -> List[str]:
        return [key for key, _ in drones]


FIXERS: Dict[str, Type[Fixer]] = {
    POLICY_SELECTIVE: SelectiveFix,
    POLICY_REMOVE_ALL: FullRemoval,
}


def get_fixer(policy: str, **kwargs: Any) -> Fixer:
    """
    Instantiate the fix policy registered under ``policy``.

    Raises:
        FixError: If the policy name is unknown
    """
    try:
        fixer_cls = FIXERS[policy]
    except KeyError as exc:
        choices = ", ".join(FIXERS)
        raise FixError(f"Unknown fix policy '{policy}'. Choose one of: {choices}.") from exc
    return fixer_cls(**kwargs)


def apply_selective_fix(
    save_file: SaveFile,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[Any] = None,
) -> bool:
    return SelectiveFix(
        progress_callback=progress_callback, cancel_event=cancel_event
    ).apply_fix(save_file)


def apply_full_removal(
    save_file: SaveFile,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[Any] = None,
) -> bool:
    return FullRemoval(
        progress_callback=progress_callback, cancel_event=cancel_event
    ).apply_fix(save_file)
