"""
Attribute Extraction

Walks the baseline data (and, separately, every story event that edits the
map) and records each attribute that must move when system identities are
swapped.

Wormhole detection runs first over every system the data mentions,
including systems edited inside events: an object name seen under two
different systems is a wormhole, and so is any planet whose definition has
a ``wormhole`` child. Only then are attributes recorded, so a system walked
before the conflicting owner was found still gets its wormhole object.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from esgen.parser import DataFolder, DataNode
from esgen.generators.system_shuffler.records import (
    LINK,
    LINK_KINDS,
    OBJECT,
    SYSTEM,
    TRACKED_ATTRIBUTES,
    WORMHOLE,
    AttributeRecords,
    EntityKey,
    NodeAction,
    OriginalNode,
    attribute_kind,
)

logger = logging.getLogger(__name__)

# Top-level keys an event can use to edit the map
EVENT_MAP_KEYS = (SYSTEM, WORMHOLE, LINK, "unlink")


def _object_children(parent: DataNode) -> Iterable[DataNode]:
    return parent.filter_children(lambda tokens: attribute_kind(tokens) == OBJECT)


def object_name(declaration: DataNode) -> str:
    """Name of an object line (``object X``, ``add object X``); empty if unnamed."""
    index = 2 if declaration.key in ("add", "remove") else 1
    return declaration.token(index)


class WormholeDetector:
    """
    Tracks object name -> owning system and promotes an object to wormhole
    status as soon as a second, different owner shows up.
    """

    def __init__(self):
        self.owners: Dict[str, str] = {}
        self.wormholes: Set[str] = set()

    def add_planets(self, planets: Iterable[DataNode]) -> None:
        """Planets whose own definition links them somewhere are wormholes."""
        for planet in planets:
            if planet.size < 2 or not planet.has_children:
                continue
            if any(child.size >= 2 for child in planet.children_with(WORMHOLE)):
                self.wormholes.add(planet.token(1))

    def observe_system(self, system_name: str, parent: DataNode) -> None:
        """Record ownership for every (nested) object under a system."""
        for child in _object_children(parent):
            name = object_name(child)
            if name:
                owner = self.owners.get(name)
                if owner is not None and owner != system_name:
                    self.wormholes.add(name)
                self.owners[name] = system_name
            self.observe_system(system_name, child)

    def is_wormhole(self, name: str) -> bool:
        return name in self.wormholes

    def contains_wormhole(self, declaration: DataNode) -> bool:
        """True if this object or any object nested inside it is a wormhole."""
        if self.is_wormhole(object_name(declaration)):
            return True
        return any(self.contains_wormhole(child) for child in _object_children(declaration))


@dataclass
class ExtractionResult:
    """Everything the delta synthesizer needs, built once per run."""
    system_names: List[str]
    baseline: AttributeRecords
    events: Dict[str, AttributeRecords] = field(default_factory=dict)
    wormholes: Set[str] = field(default_factory=set)

    @property
    def story_events(self) -> List[str]:
        return sorted(self.events)


class AttributeExtractor:
    """
    Builds persistent attribute records from a data folder.

    Usage:
        result = AttributeExtractor(data_folder).run()
    """

    def __init__(self, data: DataFolder):
        self.data = data
        self.system_names: Set[str] = set()
        self.detector = WormholeDetector()

    def run(self) -> ExtractionResult:
        baseline_nodes = list(self.data.root_nodes(SYSTEM, WORMHOLE))
        event_scopes = self._event_scopes()

        self.detector.add_planets(self.data.root_nodes("planet"))
        for declaration in baseline_nodes:
            self._observe(declaration)
        for _, declarations in event_scopes:
            for declaration in declarations:
                self._observe(declaration)

        baseline = self.extract(baseline_nodes)

        events: Dict[str, AttributeRecords] = {}
        for event_name, declarations in event_scopes:
            records = events.get(event_name) or AttributeRecords()
            self.extract(declarations, records)
            if records:
                events[event_name] = records

        logger.info(f"Found {len(self.system_names)} systems, {len(self.detector.wormholes)} wormholes, "
                    f"{len(baseline)} baseline entities, {len(events)} map-editing events")

        return ExtractionResult(
            system_names=sorted(self.system_names),
            baseline=baseline,
            events=events,
            wormholes=set(self.detector.wormholes),
        )

    def _event_scopes(self) -> List[Tuple[str, List[DataNode]]]:
        """(event name, map-editing children) for every event that edits the map."""
        scopes = []
        for event in self.data.root_nodes("event"):
            if event.size < 2 or not event.has_children:
                continue
            declarations = list(event.children_with(*EVENT_MAP_KEYS))
            if declarations:
                scopes.append((event.token(1), declarations))
        return scopes

    def _observe(self, declaration: DataNode) -> None:
        if declaration.key == SYSTEM and declaration.size >= 2 and declaration.has_children:
            self.detector.observe_system(declaration.token(1), declaration)

    def extract(self, declarations: Iterable[DataNode], records: AttributeRecords = None) -> AttributeRecords:
        """
        Record the tracked attributes of every declaration.

        Top-level link/unlink lines go to the aggregate ("link", "") and
        ("unlink", "") keys. Systems and wormholes need a name and at least
        one child.
        """
        if records is None:
            records = AttributeRecords()

        for declaration in declarations:
            if declaration.size < 2:
                continue

            kind = declaration.key
            name = declaration.token(1)

            if kind in LINK_KINDS:
                action = NodeAction.ADD if kind == LINK else NodeAction.REMOVE
                records.persist(EntityKey(kind, ""), kind, OriginalNode(action, declaration))
                continue

            if kind not in TRACKED_ATTRIBUTES or not declaration.has_children:
                continue

            key = EntityKey(kind, name)

            if kind == SYSTEM:
                self.system_names.add(name)
                self._extract_objects(key, declaration, records)

            for attribute in TRACKED_ATTRIBUTES[kind]:
                for child in declaration.filter_children(lambda tokens: attribute_kind(tokens) == attribute):
                    records.persist(key, attribute, OriginalNode(NodeAction.of(child), child))

        return records

    def _extract_objects(self, key: EntityKey, system: DataNode, records: AttributeRecords) -> None:
        # Only top-level objects are persisted; nested wormholes mark their ancestor.
        for child in _object_children(system):
            if self.detector.contains_wormhole(child):
                records.persist(key, OBJECT, OriginalNode(NodeAction.of(child), child))


def extract_attributes(data: DataFolder) -> ExtractionResult:
    """Convenience wrapper around AttributeExtractor."""
    return AttributeExtractor(data).run()
