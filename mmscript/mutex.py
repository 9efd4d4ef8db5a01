"""
mmscript.mutex
==============

Detects variables used as ad hoc synchronization primitives.

The script language has no locks, so authors build them out of ordinary
variables.  Three idioms are recognised, each by its own pass over the
whole text:

``global_cooldown``
    ``Cooldown:Cooldown+30`` somewhere, and a guard comparing ``Cooldown``
    with ``time`` through ``<=`` or ``>=``.
``one_time_event``
    ``bool Done=false``, ``Done:true`` somewhere, ``Done==false`` in a guard,
    and never ``Done:false``.
``exclusive_state``
    an ``int`` compared with or assigned three or more distinct literals.

A variable matching several idioms is reported once, under the first kind
of :data:`MUTEX_PRIORITY`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from mmscript.declarations import ScriptDeclarations, collect_declarations
from mmscript.grammar import (
    find_assignments,
    find_triggers,
    parse_condition,
    parse_increment,
    parse_int,
)

logger = logging.getLogger(__name__)


class MutexKind(enum.Enum):
    GLOBAL_COOLDOWN = "global_cooldown"
    ONE_TIME_EVENT = "one_time_event"
    EXCLUSIVE_STATE = "exclusive_state"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


MUTEX_PRIORITY: Tuple[MutexKind, ...] = (
    MutexKind.GLOBAL_COOLDOWN,
    MutexKind.ONE_TIME_EVENT,
    MutexKind.EXCLUSIVE_STATE,
)


@dataclass(frozen=True)
class MutexPattern:
    variable_name: str
    line: int
    kind: MutexKind
    related_events: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Passes: each returns {variable: line to report}
# ---------------------------------------------------------------------------

def _cooldown_candidates(decls: ScriptDeclarations) -> Dict[str, int]:
    incremented: Set[str] = set()
    time_guards: Dict[str, int] = {}
    for line in decls.lines:
        for asg in find_assignments(line.code):
            inc = parse_increment(asg.value)
            if inc is not None and inc[0] == asg.name:
                incremented.add(asg.name)
        for trig in find_triggers(line.code):
            for cmp in parse_condition(trig.condition).comparisons:
                if cmp.op not in ("<=", ">="):
                    continue
                if cmp.rhs == "time":
                    time_guards.setdefault(cmp.lhs, line.number)
                elif cmp.lhs == "time":
                    time_guards.setdefault(cmp.rhs, line.number)
    return {
        name: guard_line for name, guard_line in time_guards.items()
        if name in incremented
    }


def _one_time_candidates(decls: ScriptDeclarations) -> Dict[str, int]:
    flags = {
        v.name: v.line for v in decls.variables_of_type("bool")
        if v.initial_value is False
    }
    set_true: Set[str] = set()
    set_false: Set[str] = set()
    checked_false: Set[str] = set()
    for line in decls.lines:
        for asg in find_assignments(line.code):
            if asg.name not in flags:
                continue
            value = asg.value.lower()
            if value == "true":
                set_true.add(asg.name)
            elif value == "false":
                set_false.add(asg.name)
        for trig in find_triggers(line.code):
            for cmp in parse_condition(trig.condition).comparisons:
                if cmp.op != "==":
                    continue
                for name in flags:
                    other = cmp.other_side(name)
                    if other is not None and other.lower() == "false":
                        checked_false.add(name)
    return {
        name: decl_line for name, decl_line in flags.items()
        if name in set_true and name in checked_false
        and name not in set_false
    }


def _exclusive_state_candidates(decls: ScriptDeclarations) -> Dict[str, int]:
    ints = {v.name: v.line for v in decls.variables_of_type("int")}
    values: Dict[str, Set[int]] = {name: set() for name in ints}
    for line in decls.lines:
        for asg in find_assignments(line.code):
            if asg.name in values:
                literal = parse_int(asg.value)
                if literal is not None:
                    values[asg.name].add(literal)
        for trig in find_triggers(line.code):
            for cmp in parse_condition(trig.condition).comparisons:
                if cmp.op != "==":
                    continue
                for name in values:
                    other = cmp.other_side(name)
                    if other is not None:
                        literal = parse_int(other)
                        if literal is not None:
                            values[name].add(literal)
    return {
        name: ints[name] for name, seen in values.items() if len(seen) >= 3
    }


_PASSES = {
    MutexKind.GLOBAL_COOLDOWN: _cooldown_candidates,
    MutexKind.ONE_TIME_EVENT: _one_time_candidates,
    MutexKind.EXCLUSIVE_STATE: _exclusive_state_candidates,
}


def related_events(decls: ScriptDeclarations, variable: str) -> Tuple[str, ...]:
    """Event names whose block mentions *variable*, first-seen order."""
    names = [ev.name for ev in decls.events if ev.mentions(variable)]
    return tuple(dict.fromkeys(names))


def find_mutex_patterns(decls: ScriptDeclarations) -> List[MutexPattern]:
    candidates = {kind: _PASSES[kind](decls) for kind in MUTEX_PRIORITY}

    chosen: Dict[str, Tuple[MutexKind, int]] = {}
    for kind in MUTEX_PRIORITY:
        for name, line in candidates[kind].items():
            chosen.setdefault(name, (kind, line))

    patterns = [
        MutexPattern(
            variable_name=name,
            line=line,
            kind=kind,
            related_events=related_events(decls, name),
        )
        for name, (kind, line) in chosen.items()
    ]
    patterns.sort(key=lambda p: (p.line, p.variable_name))
    logger.debug("found %d mutex pattern(s)", len(patterns))
    return patterns


def detect_mutex_patterns(script_text: str) -> List[MutexPattern]:
    """Classify synchronization idioms in *script_text*."""
    return find_mutex_patterns(collect_declarations(script_text))


__all__ = [
    "MutexKind",
    "MUTEX_PRIORITY",
    "MutexPattern",
    "related_events",
    "find_mutex_patterns",
    "detect_mutex_patterns",
]
