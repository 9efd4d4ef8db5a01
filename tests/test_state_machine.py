# tests/test_state_machine.py
"""
Tests for state machine reconstruction from integer state variables.
"""

import pytest

from mmscript.declarations import collect_declarations
from mmscript.state_machine import (
    dead_end_states,
    detect_state_machines,
    infer_state_name,
    unreachable_states,
)

OPEN_CLOSE = "\n".join([
    "int State=0",               # 1
    "when(State==0)[Open]",      # 2
    "when(State==1)[Close]",     # 3
    "Open::",                    # 4
    "State:1;",                  # 5
    "Close::",                   # 6
    "State:0;",                  # 7
])

GAPPED = "\n".join([
    "int S=0",                   # 1
    "when(S==0)[A]",             # 2
    "when(S==2)[B]",             # 3
    "A::",                       # 4
    "S:1;",                      # 5
    "B::",                       # 6
    "S:0;",                      # 7
])


class TestOpenClose:

    @pytest.fixture
    def machine(self):
        machines = detect_state_machines(OPEN_CLOSE)
        assert len(machines) == 1
        return machines[0]

    def test_states(self, machine):
        assert machine.variable_name == "State"
        assert machine.states == {0: "IDLE", 1: "ACTIVE"}
        assert machine.initial_state == 0

    def test_transitions(self, machine):
        assert [(t.from_state, t.to_state, t.trigger, t.line)
                for t in machine.transitions] == [
            (0, 1, "Open", 5),
            (1, 0, "Close", 7),
        ]

    def test_no_unreachable_or_dead_end_states(self, machine):
        assert unreachable_states(machine) == []
        assert dead_end_states(machine) == []

    def test_states_cover_every_transition(self, machine):
        for t in machine.transitions:
            assert t.from_state in machine.states
            assert t.to_state in machine.states
        assert machine.initial_state in machine.states


class TestGaps:

    def test_unreachable_and_dead_end(self):
        machine, = detect_state_machines(GAPPED)
        assert sorted(machine.states) == [0, 1, 2]
        assert unreachable_states(machine) == [2]
        assert dead_end_states(machine) == [1]

    def test_single_transition_is_not_a_machine(self):
        text = "int S=0\nwhen(S==0)[A]\nA::\nS:1;\n"
        assert detect_state_machines(text) == []

    def test_non_integer_initial_value(self):
        assert detect_state_machines(OPEN_CLOSE.replace("State=0", "State=x")) == []

    def test_guard_without_target_block(self):
        text = OPEN_CLOSE.replace("Close::", "Other::")
        assert detect_state_machines(text) == []


class TestStateNames:

    def test_comment_on_assignment_line(self):
        text = OPEN_CLOSE.replace("State:1;", "State:1; # doors open")
        machine, = detect_state_machines(text)
        assert machine.states[1] == "DOORS_OPEN"

    def test_comment_on_previous_line(self):
        text = OPEN_CLOSE.replace("Close::", "Close:: # all shut")
        machine, = detect_state_machines(text)
        assert machine.states[0] == "ALL_SHUT"

    def test_custom_table(self):
        machine, = detect_state_machines(OPEN_CLOSE, {0: "OFF", 1: "ON"})
        assert machine.states == {0: "OFF", 1: "ON"}

    def test_fallback_name(self):
        decls = collect_declarations("int S=0\n")
        assert infer_state_name(decls, "S", 7) == "STATE_7"
