"""
Missions that drive the preset dispatcher.

- Select Preset: invisible landing mission that reshuffles when a trigger fires
- Restore Universe: job board entry that resets to preset 0
- Manual Shuffle: job board entry that rerolls on demand
- backpatch missions: catch up on side deltas for story events that happen
  while a preset is active (or after it was left)

Mission names start with "zzzzz" so the game offers them after every other
mission on landing.
"""

from typing import List

from esgen.generators.system_shuffler.config import (
    CURRENT_PRESET,
    INSTALLED,
    LAST_SHUFFLE_DAY,
    MISSION_PREFIX,
    SystemShufflerConfig,
)
from esgen.generators.system_shuffler.dispatcher import (
    Phase,
    PresetAutomaton,
    SideEventToggle,
    TransitionRequest,
    lower_transition,
)
from esgen.parser import DataNode, node

SELECT_PRESET_MISSION = f"{MISSION_PREFIX} System Shuffler: Select Preset"
RESTORE_UNIVERSE_MISSION = f"{MISSION_PREFIX} System Shuffler: Restore Universe"
MANUAL_SHUFFLE_MISSION = f"{MISSION_PREFIX} System Shuffler: Manual Shuffle"

# Lowest possible offer precedence
OFFER_PRECEDENCE = -1000000


def _hidden_landing_mission(name: str) -> DataNode:
    mission = node("mission", name)
    mission.add("invisible")
    mission.add("repeat")
    mission.add("non-blocking")
    mission.add("landing")
    mission.add("offer precedence", OFFER_PRECEDENCE)
    return mission


def _job(name: str, title: str, description: str) -> DataNode:
    mission = node("mission", name)
    mission.add("name", title)
    mission.add("description", description)
    mission.add("repeat")
    mission.add("job")
    return mission


def _conversation(message: str, automaton: PresetAutomaton, request: TransitionRequest) -> DataNode:
    return node("conversation", children=[node(message), *lower_transition(automaton, request)])


def offer_conditions(config: SystemShufflerConfig) -> DataNode:
    """`to offer` for the Select Preset mission: any enabled trigger fires it."""
    to_offer = node("to", "offer")

    if not config.triggers_enabled:
        to_offer.add("never")
        return to_offer

    triggers = to_offer.add("or")
    if config.shuffle_chance > 0:
        triggers.add("random", "<", config.shuffle_chance)
    if config.fixed_shuffle_days > 0:
        triggers.add("days since epoch", ">=", "(", LAST_SHUFFLE_DAY, "+", config.fixed_shuffle_days, ")")
    if config.shuffle_once_on_install:
        triggers.add("not", INSTALLED)

    return to_offer


def select_preset_mission(config: SystemShufflerConfig, automaton: PresetAutomaton) -> DataNode:
    mission = _hidden_landing_mission(SELECT_PRESET_MISSION)
    mission.children.append(offer_conditions(config))

    on_offer = mission.add("on", "offer")
    on_offer.children.append(
        _conversation("The universe has shuffled. Good luck.", automaton, TransitionRequest.ROLL))
    on_offer.add("fail")

    return mission


def restore_universe_job(automaton: PresetAutomaton) -> DataNode:
    mission = _job(
        RESTORE_UNIVERSE_MISSION,
        "Unshuffle the universe",
        "Restore all systems in the universe to how they should be, free of charge.",
    )
    mission.add("to", "offer").add(CURRENT_PRESET, "!=", 0)

    on_accept = mission.add("on", "accept")
    on_accept.children.append(
        _conversation("As per your request, the universe has been restored.", automaton, TransitionRequest.RESET))
    on_accept.add("fail")

    return mission


def manual_shuffle_job(config: SystemShufflerConfig, automaton: PresetAutomaton) -> DataNode:
    mission = _job(
        MANUAL_SHUFFLE_MISSION,
        "Shuffle the universe",
        f"Shuffle all systems in the universe to one of {config.max_presets} presets.",
    )

    on_accept = mission.add("on", "accept")
    on_accept.children.append(
        _conversation("As per your request, the universe has shuffled. Good luck.", automaton, TransitionRequest.ROLL))
    on_accept.add("fail")

    return mission


def main_missions(config: SystemShufflerConfig, automaton: PresetAutomaton) -> List[DataNode]:
    """Contents of data/main.txt."""
    return [
        select_preset_mission(config, automaton),
        restore_universe_job(automaton),
        manual_shuffle_job(config, automaton),
    ]


def backpatch_mission(toggle: SideEventToggle) -> DataNode:
    """
    Apply or undo a side delta outside of a preset switch.

    The activate mission fires while its preset is current, the restore
    mission once the preset has been left.
    """
    mission = _hidden_landing_mission(f"{MISSION_PREFIX} {toggle.event_name}")

    to_offer = mission.add("to", "offer")
    to_offer.add("has", INSTALLED)
    to_offer.add(CURRENT_PRESET, "==" if toggle.phase == Phase.ACTIVATE else "!=", toggle.preset)
    for condition in toggle.gate:
        to_offer.children.append(condition.to_node())

    on_offer = mission.add("on", "offer")
    for effect in toggle.effects:
        on_offer.add(*effect)
    on_offer.add("fail")

    return mission


def backpatch_missions(automaton: PresetAutomaton, preset: int) -> List[DataNode]:
    """Contents of one preset's missions.txt."""
    missions = []
    for story_event in automaton.story_events:
        for phase in (Phase.RESTORE, Phase.ACTIVATE):
            missions.append(backpatch_mission(SideEventToggle(preset, story_event, phase)))
    return missions
