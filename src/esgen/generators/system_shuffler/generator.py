"""
System Shuffler Generator

Archive layout:

    plugin.txt
    data/main.txt                                   dispatcher missions
    data/presets/universe_preset_<i>/main.txt       restore + activate events
    data/presets/universe_preset_<i>/events.txt     side deltas per story event
    data/presets/universe_preset_<i>/missions.txt   backpatch missions
"""

import logging
from typing import Dict, List, Sequence

from esgen.generators.common import GenerationResult, PluginGenerator
from esgen.generators.system_shuffler.config import (
    PLUGIN_NAME,
    PLUGIN_VERSION,
    SystemShufflerConfig,
    activate_event_name,
    restore_event_name,
    side_event_name,
)
from esgen.generators.system_shuffler.deltas import preset_events
from esgen.generators.system_shuffler.dispatcher import PresetAutomaton
from esgen.generators.system_shuffler.extract import ExtractionResult, extract_attributes
from esgen.generators.system_shuffler.missions import backpatch_missions, main_missions
from esgen.parser import DataFolder, DataNode
from esgen.permutation import shuffle

logger = logging.getLogger(__name__)


def system_swaps(system_names: Sequence[str], config: SystemShufflerConfig, preset: int) -> Dict[str, str]:
    """
    Map each system to the system whose place it takes in a preset.

    Preset 0 is the unshuffled universe.
    """
    if preset == 0:
        return {name: name for name in system_names}
    shuffled = shuffle(list(system_names), config.preset_seed(preset))
    return dict(zip(system_names, shuffled))


def preset_path(preset: int) -> str:
    return f"data/presets/universe_preset_{preset}"


class SystemShuffler(PluginGenerator):
    """
    Usage:
        result = SystemShuffler(SystemShufflerConfig(seed=42)).generate(data)
        Path("shuffler.zip").write_bytes(result.data)
    """

    PLUGIN_NAME = PLUGIN_NAME
    PLUGIN_VERSION = PLUGIN_VERSION

    def __init__(self, config: SystemShufflerConfig):
        super().__init__()
        self.config = config

    def description_lines(self) -> List[str]:
        config = self.config
        lines = ['An Endless Sky "no logic" location randomizer.']

        if config.shuffle_once_on_install:
            lines.append("In addition to shuffling once immediately upon installation, "
                         "this plugin was generated with the following settings:")
        else:
            lines.append("This plugin was generated with the following settings:")

        lines.append(f"- PRNG seed: {config.seed}")
        lines.append(f"- {config.max_presets} possible universe presets")
        if config.shuffle_chance > 0:
            lines.append(f"- A {config.shuffle_chance}% chance to shuffle to a different preset "
                         f"every time you land")
        if config.fixed_shuffle_days > 0:
            lines.append(f"- A guaranteed shuffle roughly once every {config.fixed_shuffle_days} days")

        return lines

    def build(self, data: DataFolder) -> None:
        extracted = extract_attributes(data)
        automaton = PresetAutomaton(self.config.max_presets, extracted.story_events)

        self.archive.write_dir("data/")
        self.zip_root_nodes("data/main.txt", main_missions(self.config, automaton))

        self.archive.write_dir("data/presets/")
        for preset in self.config.presets:
            self.preset(preset, extracted, automaton)

    def preset(self, preset: int, extracted: ExtractionResult, automaton: PresetAutomaton) -> None:
        swaps = system_swaps(extracted.system_names, self.config, preset)
        path = preset_path(preset)
        restore_name = restore_event_name(preset)
        activate_name = activate_event_name(preset)

        logger.debug(f"Writing preset {preset} to {path}/")
        self.archive.write_dir(f"{path}/")

        self.zip_root_nodes(f"{path}/main.txt",
                            preset_events(extracted.baseline, swaps, restore_name, activate_name))

        side_events: List[DataNode] = []
        for story_event in extracted.story_events:
            side_events.extend(preset_events(
                extracted.events[story_event],
                swaps,
                side_event_name(restore_name, story_event),
                side_event_name(activate_name, story_event),
            ))
        self.zip_root_nodes(f"{path}/events.txt", side_events)

        self.zip_root_nodes(f"{path}/missions.txt", backpatch_missions(automaton, preset))


def generate_system_shuffler(data: DataFolder, config: SystemShufflerConfig = None) -> GenerationResult:
    """Build a System Shuffler plugin archive from parsed game data."""
    config = config or SystemShufflerConfig()
    logger.info(f"Generating {PLUGIN_NAME} with seed {config.seed} and {config.max_presets} presets")
    return SystemShuffler(config).generate(data)
