"""
esgen.generators.system_shuffler - swap star system identities between presets

Pipeline: extract (records) -> deltas (per preset) -> dispatcher/missions
(preset state machine) -> generator (archive).
"""

from esgen.generators.system_shuffler.config import SystemShufflerConfig
from esgen.generators.system_shuffler.extract import ExtractionResult, extract_attributes
from esgen.generators.system_shuffler.deltas import DeltaSynthesizer, preset_events
from esgen.generators.system_shuffler.dispatcher import (
    Condition,
    Phase,
    PresetAutomaton,
    TransitionRequest,
    lower_transition,
)
from esgen.generators.system_shuffler.generator import (
    SystemShuffler,
    generate_system_shuffler,
    system_swaps,
)

__all__ = [
    "SystemShufflerConfig",
    "ExtractionResult",
    "extract_attributes",
    "DeltaSynthesizer",
    "preset_events",
    "Condition",
    "Phase",
    "PresetAutomaton",
    "TransitionRequest",
    "lower_transition",
    "SystemShuffler",
    "generate_system_shuffler",
    "system_swaps",
]
