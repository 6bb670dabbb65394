"""
Full Map Generator

A job on every job board that, once accepted, marks every system and every
named planet as visited.
"""

import logging
from typing import List, Set

from esgen.generators.common import GenerationResult, PluginGenerator
from esgen.parser import DataFolder, DataNode, node

logger = logging.getLogger(__name__)

REVEAL_NAME = "Full Map: I know where everything is now"


def find_named_objects(parent: DataNode, names: Set[str]) -> None:
    """Collect ``object <name>`` names at any depth below parent."""
    for obj in parent.children_with("object"):
        if obj.size >= 2:
            names.add(obj.token(1))
        find_named_objects(obj, names)


def reveal_mission() -> DataNode:
    mission = node("mission", REVEAL_NAME)
    mission.add("name", "Map Reveal")
    mission.add("description", "You can now see every system and planet on the map. "
                               "Shrouded and hidden systems may disappear again")
    mission.add("job")
    mission.add("repeat")
    on_accept = mission.add("on", "accept")
    on_accept.add("event", REVEAL_NAME, 0)
    on_accept.add("fail")
    return mission


def reveal_event(data: DataFolder) -> DataNode:
    systems: Set[str] = set()
    planets: Set[str] = set()

    for system in data.root_nodes("system"):
        if system.size < 2:
            continue
        systems.add(system.token(1))
        find_named_objects(system, planets)

    logger.info(f"Revealing {len(systems)} systems and {len(planets)} planets")

    event = node("event", REVEAL_NAME)
    for name in sorted(systems):
        event.add("visit", name)
    for name in sorted(planets):
        event.add("visit planet", name)
    return event


class FullMap(PluginGenerator):
    PLUGIN_NAME = "Full Map"
    PLUGIN_VERSION = "0.1.0"

    def description_lines(self) -> List[str]:
        return ["Reveal the entire map via any job board"]

    def build(self, data: DataFolder) -> None:
        self.archive.write_dir("data/")
        self.zip_root_nodes("data/full_map_mission.txt", [reveal_mission()])
        self.zip_root_nodes("data/full_map_event.txt", [reveal_event(data)])


def generate_full_map(data: DataFolder) -> GenerationResult:
    return FullMap().generate(data)
