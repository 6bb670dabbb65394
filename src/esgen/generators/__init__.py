"""
esgen.generators - plugin generators

Each generator reads a parsed data folder and returns a zipped plugin.
"""

from esgen.generators.archive import PluginArchive
from esgen.generators.common import GenerationResult, PluginGenerator, copy_node
from esgen.generators.full_map import FullMap, generate_full_map
from esgen.generators.system_shuffler import (
    SystemShuffler,
    SystemShufflerConfig,
    generate_system_shuffler,
)

__all__ = [
    "PluginArchive",
    "GenerationResult",
    "PluginGenerator",
    "copy_node",
    "FullMap",
    "generate_full_map",
    "SystemShuffler",
    "SystemShufflerConfig",
    "generate_system_shuffler",
]
