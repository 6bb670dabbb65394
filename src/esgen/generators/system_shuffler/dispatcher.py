"""
Preset Dispatcher

The plugin keeps the active preset in a condition variable. Switching presets
is a small state machine: every state i is a preset, and a transition
(a reroll or a reset to preset 0) runs in three phases:

    restore phase   - undo whatever preset is current, side deltas first
    selection       - pick the next preset
    activate phase  - apply the new preset, then its side deltas

Story events that edit the map get "side deltas": extra events that redo the
story event's edits under the preset's shuffled names. A side delta may only
run if the story event has happened, and only once; the shadow variable
``event: <activate event>: <story event>`` remembers that it ran.

PresetAutomaton describes all of this as data (guards and effects).
The lower_* functions turn it into conversation branch/label/action nodes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, Union

from esgen.errors import LabelCollisionError
from esgen.generators.system_shuffler.config import (
    CURRENT_PRESET,
    INSTALLED,
    LAST_SHUFFLE_DAY,
    activate_event_name,
    event_flag,
    restore_event_name,
    shadow_variable,
    side_event_name,
)
from esgen.parser import DataNode, node

Effect = Tuple[str, ...]


class Phase(Enum):
    RESTORE = "restore"
    ACTIVATE = "activate"


class TransitionRequest(Enum):
    """Why the preset is changing."""
    ROLL = "roll"    # pick a random shuffled preset
    RESET = "reset"  # go back to the unshuffled universe


# Comparison operators and their negations
NEGATED_OPERATORS = {
    "==": "!=",
    "!=": "==",
    "<": ">=",
    ">=": "<",
    ">": "<=",
    "<=": ">",
}


@dataclass(frozen=True)
class Condition:
    """One condition line, e.g. ``has "event: X"`` or ``Var != 3``."""
    tokens: Tuple[str, ...]

    @classmethod
    def of(cls, *tokens) -> 'Condition':
        return cls(tuple(str(t) for t in tokens))

    def negate(self) -> 'Condition':
        head, *rest = self.tokens
        if head == "has":
            return Condition(("not", *rest))
        if head == "not":
            return Condition(("has", *rest))
        if len(self.tokens) == 3 and self.tokens[1] in NEGATED_OPERATORS:
            left, operator, right = self.tokens
            return Condition((left, NEGATED_OPERATORS[operator], right))
        raise ValueError(f"Cannot negate condition {' '.join(self.tokens)!r}")

    def to_node(self) -> DataNode:
        return node(*self.tokens)


@dataclass(frozen=True)
class Action:
    """An ``action`` block: effects applied in order."""
    effects: Tuple[Effect, ...]


@dataclass
class GuardedStep:
    """
    A run of actions that only happens while the gate holds.

    Lowered as ``branch <label>`` (jump past the body when the gate fails),
    the body, then ``label <label>``. Nested steps are lowered inline, since
    conversations cannot nest branches.
    """
    label: str
    gate: Tuple[Condition, ...]
    body: List[Union[Action, 'GuardedStep']] = field(default_factory=list)

    @property
    def skip(self) -> List[Condition]:
        return [condition.negate() for condition in self.gate]


@dataclass(frozen=True)
class SideEventToggle:
    """Runs or undoes one story event's side delta for one preset."""
    preset: int
    story_event: str
    phase: Phase

    @property
    def event_name(self) -> str:
        main = restore_event_name(self.preset) if self.phase == Phase.RESTORE else activate_event_name(self.preset)
        return side_event_name(main, self.story_event)

    @property
    def shadow(self) -> str:
        return shadow_variable(self.preset, self.story_event)

    @property
    def gate(self) -> Tuple[Condition, Condition]:
        happened = Condition.of("has", event_flag(self.story_event))
        if self.phase == Phase.ACTIVATE:
            return happened, Condition.of(self.shadow, "!=", event_flag(self.story_event))
        return happened, Condition.of("has", self.shadow)

    @property
    def effects(self) -> Tuple[Effect, Effect]:
        trigger = ("event", self.event_name, "0")
        if self.phase == Phase.ACTIVATE:
            return trigger, (self.shadow, "=", event_flag(self.story_event))
        return trigger, (self.shadow, "=", "0")

    def step(self) -> GuardedStep:
        return GuardedStep(
            label=f"not {self.preset} {self.phase.value} {self.story_event}",
            gate=self.gate,
            body=[Action(self.effects)],
        )


class PresetAutomaton:
    """
    States are preset indices 0..max_presets; transitions are requests.

    Args:
        max_presets: highest preset index
        story_events: story events with side deltas, in emission order
    """

    def __init__(self, max_presets: int, story_events: Sequence[str] = ()):
        self.max_presets = max_presets
        self.story_events = list(story_events)

    @property
    def states(self) -> range:
        return range(self.max_presets + 1)

    def toggles(self, preset: int, phase: Phase) -> List[SideEventToggle]:
        return [SideEventToggle(preset, event, phase) for event in self.story_events]

    def state_step(self, preset: int, phase: Phase) -> GuardedStep:
        """Leave (restore) or enter (activate) one state."""
        if phase == Phase.RESTORE:
            main = Action((("event", restore_event_name(preset), "0"),))
        else:
            main = Action((("event", activate_event_name(preset), "0"),))

        sides = [toggle.step() for toggle in self.toggles(preset, phase)]
        # Side deltas sit on top of the main delta: undone first, applied last
        body = sides + [main] if phase == Phase.RESTORE else [main] + sides

        return GuardedStep(
            label=f"not {preset} {phase.value}",
            gate=(Condition.of(CURRENT_PRESET, "==", preset),),
            body=body,
        )

    def phase_steps(self, phase: Phase) -> List[GuardedStep]:
        return [self.state_step(preset, phase) for preset in self.states]

    def selection(self, request: TransitionRequest) -> Action:
        if request == TransitionRequest.RESET or self.max_presets == 0:
            target: Tuple[str, ...] = ("0",)
        else:
            target = ("(", f"roll: {self.max_presets}", "+", "1", ")")

        return Action((
            (INSTALLED, "=", "1"),
            (CURRENT_PRESET, "=", *target),
            (LAST_SHUFFLE_DAY, "=", "days since epoch"),
        ))


# =============================================================================
# LOWERING
# =============================================================================

def lower_conditions(conditions: Sequence[Condition]) -> List[DataNode]:
    """A single condition stays as is; several become one ``or`` block."""
    if len(conditions) == 1:
        return [conditions[0].to_node()]
    return [node("or", children=[c.to_node() for c in conditions])]


def lower_action(action: Action) -> DataNode:
    return node("action", children=[node(*effect) for effect in action.effects])


def lower_step(step: GuardedStep) -> List[DataNode]:
    nodes = [node("branch", step.label, children=lower_conditions(step.skip))]
    for item in step.body:
        if isinstance(item, GuardedStep):
            nodes.extend(lower_step(item))
        else:
            nodes.append(lower_action(item))
    nodes.append(node("label", step.label))
    return nodes


def lower_phase(automaton: PresetAutomaton, phase: Phase) -> List[DataNode]:
    """Every state's step, then a no-op action as the final jump target."""
    nodes: List[DataNode] = []
    for step in automaton.phase_steps(phase):
        nodes.extend(lower_step(step))
    nodes.append(lower_action(Action(((CURRENT_PRESET, "=", CURRENT_PRESET),))))
    return nodes


def lower_transition(automaton: PresetAutomaton, request: TransitionRequest) -> List[DataNode]:
    """The full restore / select / activate sequence for one conversation."""
    nodes = lower_phase(automaton, Phase.RESTORE)
    nodes.append(lower_action(automaton.selection(request)))
    nodes.extend(lower_phase(automaton, Phase.ACTIVATE))
    check_labels(nodes)
    return nodes


def check_labels(nodes: Iterable[DataNode]) -> None:
    """
    Raises:
        LabelCollisionError: if two labels in one conversation are equal
    """
    seen = set()
    for current in nodes:
        if current.key != "label":
            continue
        label = current.token(1)
        if label in seen:
            raise LabelCollisionError(label)
        seen.add(label)
