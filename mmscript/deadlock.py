"""
mmscript.deadlock
=================

Pairwise deadlock-risk heuristic.

For every event name two sets are built:

* ``held[E]``     - declared variables and built-in resources assigned
  inside any block named ``E``
* ``waits_on[T]`` - identifiers read by every ``when(cond)[T]`` guard, i.e.
  attributed to the event the guard leads *into*

Two events sharing held state are a medium risk when one of them waits on
state the other holds, and a high risk when both do.  The comparison is
O(E^2) in the number of distinct events.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Set, Tuple

from mmscript.declarations import ScriptDeclarations, collect_declarations
from mmscript.grammar import CONDITION_KEYWORDS, find_assignments, find_triggers, parse_condition
from mmscript.resources import RESOURCES

logger = logging.getLogger(__name__)


class RiskLevel(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class DeadlockRisk:
    """
    Attributes
    ----------
    events           : the pair, in definition order
    shared_resources : state both events assign
    risk_level       : MEDIUM for a one-way wait, HIGH for a two-way wait
    line             : opener line of the first event of the pair
    """
    events: Tuple[str, str]
    shared_resources: FrozenSet[str]
    risk_level: RiskLevel
    line: int


def held_state(decls: ScriptDeclarations) -> Dict[str, Set[str]]:
    """Event name -> state it assigns, merged over same-named blocks."""
    tracked = set(decls.variables) | set(RESOURCES)
    held: Dict[str, Set[str]] = {name: set() for name in decls.event_names}
    for ev in decls.events:
        for _, code in ev.iter_code():
            for asg in find_assignments(code):
                if asg.name in tracked:
                    held[ev.name].add(asg.name)
    return held


def guard_waits(decls: ScriptDeclarations) -> Dict[str, Set[str]]:
    """Guarded event name -> identifiers its ``when`` guards read."""
    waits: Dict[str, Set[str]] = {}
    for line in decls.lines:
        for trig in find_triggers(line.code):
            if trig.keyword != "when":
                continue
            names = set(parse_condition(trig.condition).names)
            waits.setdefault(trig.target, set()).update(
                names - CONDITION_KEYWORDS
            )
    return waits


def find_deadlocks(decls: ScriptDeclarations) -> List[DeadlockRisk]:
    held = held_state(decls)
    waits = guard_waits(decls)
    names = decls.event_names
    risks: List[DeadlockRisk] = []

    for i, first in enumerate(names):
        for second in names[i + 1:]:
            shared = held[first] & held[second]
            if not shared:
                continue
            second_waits = bool(waits.get(second, set()) & held[first])
            first_waits = bool(waits.get(first, set()) & held[second])
            if first_waits and second_waits:
                level = RiskLevel.HIGH
            elif first_waits or second_waits:
                level = RiskLevel.MEDIUM
            else:
                continue
            opener = decls.first_event(first)
            risks.append(DeadlockRisk(
                events=(first, second),
                shared_resources=frozenset(shared),
                risk_level=level,
                line=opener.start_line if opener is not None else 0,
            ))

    logger.debug("found %d deadlock risk(s)", len(risks))
    return risks


def detect_deadlocks(script_text: str) -> List[DeadlockRisk]:
    """Flag event pairs that may wait on each other's state."""
    return find_deadlocks(collect_declarations(script_text))


__all__ = [
    "RiskLevel",
    "DeadlockRisk",
    "held_state",
    "guard_waits",
    "find_deadlocks",
    "detect_deadlocks",
]
