"""
mmscript.state_machine
======================

Reconstructs finite-state machines from integer state variables.

A transition is read off a guard and the block it guards::

    when(Phase==0)[Open]        <- from state 0, trigger "Open"
    Open::
    Phase:1;                    <- to state 1 (first assignment in Open)

A variable with at least two such transitions is reported as a machine.
States are named from a ``#`` comment on (or directly above) the first
assignment of that value, otherwise from a small table of conventional
names, otherwise ``STATE_<n>``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from mmscript.config import DEFAULT_STATE_NAMES
from mmscript.declarations import (
    ScriptDeclarations,
    ScriptVariable,
    collect_declarations,
)
from mmscript.grammar import find_assignments, find_triggers, parse_condition, parse_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    from_state: int
    to_state: int
    trigger: str
    line: int


@dataclass(frozen=True)
class StateMachine:
    """
    Attributes
    ----------
    variable_name : the integer variable holding the state
    states        : state value -> inferred name (always includes the
                    initial state and every transition endpoint)
    transitions   : in discovery order
    initial_state : the declared initial value
    """
    variable_name: str
    states: Dict[int, str]
    transitions: Tuple[StateTransition, ...]
    initial_state: int


def _first_literal_assignment(
    decls: ScriptDeclarations, event: str, variable: str,
) -> Optional[Tuple[int, int]]:
    block = decls.first_event(event)
    if block is None:
        return None
    for number, code in block.iter_code():
        for asg in find_assignments(code):
            if asg.name != variable:
                continue
            value = parse_int(asg.value)
            if value is not None:
                return value, number
    return None


def _transitions(
    decls: ScriptDeclarations, variable: str,
) -> List[StateTransition]:
    transitions: List[StateTransition] = []
    for line in decls.lines:
        for trig in find_triggers(line.code):
            if trig.keyword != "when":
                continue
            from_state = None
            for cmp in parse_condition(trig.condition).comparisons:
                other = cmp.other_side(variable)
                if cmp.op == "==" and other is not None:
                    from_state = parse_int(other)
                    if from_state is not None:
                        break
            if from_state is None:
                continue
            found = _first_literal_assignment(decls, trig.target, variable)
            if found is not None:
                to_state, number = found
                transitions.append(StateTransition(
                    from_state=from_state,
                    to_state=to_state,
                    trigger=trig.target,
                    line=number,
                ))
    return transitions


def infer_state_name(
    decls: ScriptDeclarations,
    variable: str,
    state: int,
    state_names: Mapping[int, str] = DEFAULT_STATE_NAMES,
) -> str:
    """Name *state* from a nearby comment, the conventional table, or its value."""
    for idx, line in enumerate(decls.lines):
        if not any(
            asg.name == variable and parse_int(asg.value) == state
            for asg in find_assignments(line.code)
        ):
            continue
        comment = line.comment
        if not comment and idx > 0:
            comment = decls.lines[idx - 1].comment
        if comment:
            return "_".join(comment.upper().split())
        break
    return state_names.get(state, f"STATE_{state}")


def _build_machine(
    decls: ScriptDeclarations,
    var: ScriptVariable,
    state_names: Mapping[int, str],
) -> Optional[StateMachine]:
    transitions = _transitions(decls, var.name)
    if len(transitions) < 2:
        return None
    values = {var.initial_value}
    for t in transitions:
        values.add(t.from_state)
        values.add(t.to_state)
    states = {
        value: infer_state_name(decls, var.name, value, state_names)
        for value in sorted(values)
    }
    return StateMachine(
        variable_name=var.name,
        states=states,
        transitions=tuple(transitions),
        initial_state=var.initial_value,
    )


def find_state_machines(
    decls: ScriptDeclarations,
    state_names: Optional[Mapping[int, str]] = None,
) -> List[StateMachine]:
    names = DEFAULT_STATE_NAMES if state_names is None else state_names
    machines: List[StateMachine] = []
    for var in decls.variables_of_type("int"):
        if not isinstance(var.initial_value, int):
            continue
        machine = _build_machine(decls, var, names)
        if machine is not None:
            machines.append(machine)
    logger.debug("found %d state machine(s)", len(machines))
    return machines


def detect_state_machines(
    script_text: str,
    state_names: Optional[Mapping[int, str]] = None,
) -> List[StateMachine]:
    """Reconstruct the state machines of *script_text*."""
    return find_state_machines(collect_declarations(script_text), state_names)


def unreachable_states(machine: StateMachine) -> List[int]:
    """States no transition enters, other than the initial state."""
    entered = {t.to_state for t in machine.transitions}
    return [
        s for s in machine.states
        if s not in entered and s != machine.initial_state
    ]


def dead_end_states(machine: StateMachine) -> List[int]:
    """States no transition leaves; state 0 is treated as terminal."""
    left = {t.from_state for t in machine.transitions}
    return [s for s in machine.states if s not in left and s != 0]


__all__ = [
    "StateTransition",
    "StateMachine",
    "infer_state_name",
    "find_state_machines",
    "detect_state_machines",
    "unreachable_states",
    "dead_end_states",
]
