"""
Tests for the preset dispatcher automaton and its lowering to branch/label/action nodes.
"""

import pytest
from conftest import lines_of
from esgen.errors import LabelCollisionError
from esgen.generators.system_shuffler.config import CURRENT_PRESET, INSTALLED, LAST_SHUFFLE_DAY
from esgen.generators.system_shuffler.dispatcher import (
    Condition,
    Phase,
    PresetAutomaton,
    SideEventToggle,
    TransitionRequest,
    check_labels,
    lower_phase,
    lower_step,
    lower_transition,
)
from esgen.parser import node

SHADOW = "event: System Shuffler: Activate Preset 1: war"


class TestCondition:
    """Test condition negation."""

    @pytest.mark.parametrize("tokens, negated", [
        (("has", "x"), ("not", "x")),
        (("not", "x"), ("has", "x")),
        (("a", "==", "1"), ("a", "!=", "1")),
        (("a", "!=", "1"), ("a", "==", "1")),
        (("a", "<", "1"), ("a", ">=", "1")),
        (("a", ">", "1"), ("a", "<=", "1")),
    ])
    def test_negate(self, tokens, negated):
        assert Condition(tokens).negate() == Condition(negated)

    def test_double_negation(self):
        condition = Condition.of("random", "<", 5)
        assert condition.negate().negate() == condition

    def test_unknown_condition(self):
        with pytest.raises(ValueError):
            Condition.of("never").negate()


class TestSideEventToggle:
    """Test side delta gates and effects."""

    def test_activate(self):
        toggle = SideEventToggle(1, "war", Phase.ACTIVATE)
        assert toggle.event_name == "System Shuffler: Activate Preset 1: war"
        assert toggle.gate == (
            Condition(("has", "event: war")),
            Condition((SHADOW, "!=", "event: war")),
        )
        assert toggle.effects == (
            ("event", "System Shuffler: Activate Preset 1: war", "0"),
            (SHADOW, "=", "event: war"),
        )

    def test_restore(self):
        toggle = SideEventToggle(1, "war", Phase.RESTORE)
        assert toggle.event_name == "System Shuffler: Restore Preset 1: war"
        assert toggle.gate == (
            Condition(("has", "event: war")),
            Condition(("has", SHADOW)),
        )
        assert toggle.effects == (
            ("event", "System Shuffler: Restore Preset 1: war", "0"),
            (SHADOW, "=", "0"),
        )

    def test_skip_is_negated_gate(self):
        step = SideEventToggle(1, "war", Phase.ACTIVATE).step()
        assert step.label == "not 1 activate war"
        assert step.skip == [
            Condition(("not", "event: war")),
            Condition((SHADOW, "==", "event: war")),
        ]


class TestLowering:
    """Test emission of branch/label/action nodes."""

    def test_single_state_restore(self):
        nodes = lower_phase(PresetAutomaton(0), Phase.RESTORE)
        assert lines_of(nodes) == [
            ["branch", "not 0 restore"],
            ["action"],
            ["label", "not 0 restore"],
            ["action"],
        ]
        assert lines_of(nodes[0].children) == [[CURRENT_PRESET, "!=", "0"]]
        assert lines_of(nodes[1].children) == [["event", "System Shuffler: Restore Preset 0", "0"]]
        assert lines_of(nodes[3].children) == [[CURRENT_PRESET, "=", CURRENT_PRESET]]

    def test_every_state_has_a_block(self):
        nodes = lower_phase(PresetAutomaton(3), Phase.ACTIVATE)
        labels = [n.token(1) for n in nodes if n.key == "label"]
        assert labels == ["not 0 activate", "not 1 activate", "not 2 activate", "not 3 activate"]

    def test_restore_side_events_before_main(self):
        nodes = lower_phase(PresetAutomaton(0, ["war"]), Phase.RESTORE)
        assert lines_of(nodes) == [
            ["branch", "not 0 restore"],
            ["branch", "not 0 restore war"],
            ["action"],
            ["label", "not 0 restore war"],
            ["action"],
            ["label", "not 0 restore"],
            ["action"],
        ]
        assert nodes[4].children[0].tokens == ["event", "System Shuffler: Restore Preset 0", "0"]

    def test_activate_side_events_after_main(self):
        nodes = lower_phase(PresetAutomaton(0, ["war"]), Phase.ACTIVATE)
        assert lines_of(nodes) == [
            ["branch", "not 0 activate"],
            ["action"],
            ["branch", "not 0 activate war"],
            ["action"],
            ["label", "not 0 activate war"],
            ["label", "not 0 activate"],
            ["action"],
        ]
        assert nodes[1].children[0].tokens == ["event", "System Shuffler: Activate Preset 0", "0"]

    def test_side_skip_lowered_as_or(self):
        nodes = lower_phase(PresetAutomaton(1, ["war"]), Phase.ACTIVATE)
        branch = [n for n in nodes if n.tokens == ["branch", "not 1 activate war"]][0]
        assert lines_of(branch.children) == [["or"]]
        assert lines_of(branch.children[0].children) == [
            ["not", "event: war"],
            [SHADOW, "==", "event: war"],
        ]

    def test_side_action_effects(self):
        step = SideEventToggle(1, "war", Phase.RESTORE).step()
        nodes = lower_step(step)
        assert lines_of(nodes[1].children) == [
            ["event", "System Shuffler: Restore Preset 1: war", "0"],
            [SHADOW, "=", "0"],
        ]


class TestTransitions:
    """Test full restore/select/activate sequences."""

    def test_roll(self):
        automaton = PresetAutomaton(5)
        selection = lower_transition(automaton, TransitionRequest.ROLL)
        middle = selection[len(lower_phase(automaton, Phase.RESTORE))]
        assert lines_of(middle.children) == [
            [INSTALLED, "=", "1"],
            [CURRENT_PRESET, "=", "(", "roll: 5", "+", "1", ")"],
            [LAST_SHUFFLE_DAY, "=", "days since epoch"],
        ]

    def test_reset(self):
        automaton = PresetAutomaton(5)
        selection = automaton.selection(TransitionRequest.RESET)
        assert selection.effects[1] == (CURRENT_PRESET, "=", "0")

    def test_roll_without_presets(self):
        selection = PresetAutomaton(0).selection(TransitionRequest.ROLL)
        assert selection.effects[1] == (CURRENT_PRESET, "=", "0")

    def test_phases_in_order(self):
        nodes = lower_transition(PresetAutomaton(1, ["war"]), TransitionRequest.ROLL)
        labels = [n.token(1) for n in nodes if n.key == "label"]
        assert labels == [
            "not 0 restore war", "not 0 restore",
            "not 1 restore war", "not 1 restore",
            "not 0 activate war", "not 0 activate",
            "not 1 activate war", "not 1 activate",
        ]

    def test_labels_unique(self):
        nodes = lower_transition(PresetAutomaton(10, ["a", "b", "c"]), TransitionRequest.ROLL)
        labels = [n.token(1) for n in nodes if n.key == "label"]
        assert len(labels) == len(set(labels))

    def test_collision_detected(self):
        with pytest.raises(LabelCollisionError):
            check_labels([node("label", "x"), node("action"), node("label", "x")])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
