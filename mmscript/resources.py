"""
mmscript.resources
==================

Resource flow: where the four built-in counters are granted and where
objectives demand them.

* source - ``crystals:50`` (also ``ore`` and ``studs``)
* sink   - ``crystals>=100`` on a line mentioning ``objective`` or inside an
  event block whose text mentions ``objective``
* air    - ``oxygen:100/200`` records the current amount as a source; air
  has no sinks

``balance`` is always ``sum(sources) - sum(sinks)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from mmscript.declarations import (
    EventDefinition,
    ScriptDeclarations,
    collect_declarations,
)
from mmscript.grammar import find_assignments, find_oxygen, parse_condition, parse_int

logger = logging.getLogger(__name__)

RESOURCES = ("crystals", "ore", "studs", "air")
COUNTED_RESOURCES = ("crystals", "ore", "studs")


@dataclass(frozen=True)
class ResourceAmount:
    amount: int
    line: int
    event: Optional[str] = None


@dataclass
class ResourceFlow:
    resource: str
    sources: List[ResourceAmount] = field(default_factory=list)
    sinks: List[ResourceAmount] = field(default_factory=list)

    @property
    def total_sources(self) -> int:
        return sum(s.amount for s in self.sources)

    @property
    def total_sinks(self) -> int:
        return sum(s.amount for s in self.sinks)

    @property
    def balance(self) -> int:
        return self.total_sources - self.total_sinks


def _mentions_objective(text: str) -> bool:
    return "objective" in text.lower()


def _objective_block(ev: Optional[EventDefinition]) -> bool:
    if ev is None:
        return False
    return _mentions_objective(ev.name) or any(
        _mentions_objective(code) for _, code in ev.iter_code()
    )


def _sink_amounts(code: str) -> List[Tuple[str, int]]:
    """``(resource, amount)`` for every ``resource >= N`` in *code*."""
    found: List[Tuple[str, int]] = []
    for cmp in parse_condition(code).comparisons:
        if cmp.op == ">=" and cmp.lhs in COUNTED_RESOURCES:
            amount = parse_int(cmp.rhs)
            if amount is not None:
                found.append((cmp.lhs, amount))
    return found


def find_resource_flow(decls: ScriptDeclarations) -> Dict[str, ResourceFlow]:
    flows = {name: ResourceFlow(resource=name) for name in RESOURCES}

    for line in decls.lines:
        if line.is_blank:
            continue
        owner = decls.event_at(line.number)
        event = owner.name if owner is not None else None

        for asg in find_assignments(line.code):
            if asg.name in COUNTED_RESOURCES:
                amount = parse_int(asg.value)
                if amount is not None:
                    flows[asg.name].sources.append(
                        ResourceAmount(amount, line.number, event)
                    )

        if _mentions_objective(line.code) or _objective_block(owner):
            for resource, amount in _sink_amounts(line.code):
                flows[resource].sinks.append(
                    ResourceAmount(amount, line.number, event)
                )

        oxygen = find_oxygen(line.code)
        if oxygen is not None:
            flows["air"].sources.append(
                ResourceAmount(oxygen[0], line.number, event)
            )

    logger.debug(
        "resource balances: %s",
        ", ".join(f"{k}={v.balance}" for k, v in flows.items()),
    )
    return flows


def analyze_resource_flow(script_text: str) -> Dict[str, ResourceFlow]:
    """Track resource sources and objective sinks in *script_text*."""
    return find_resource_flow(collect_declarations(script_text))


__all__ = [
    "RESOURCES",
    "ResourceAmount",
    "ResourceFlow",
    "find_resource_flow",
    "analyze_resource_flow",
]
