"""
mmscript.performance
====================

Rough runtime cost estimate of a script.

One pass counts event blocks, timer declarations, spawner lines and the
branching of every ``when(...)`` condition (1 + number of ``and``/``or``).
The weighted score is bucketed into a load level:

    score = events*1 + complexity*0.5 + timers*2 + spawners*3

    score < 20   -> low
    score < 50   -> medium
    score < 100  -> high
    otherwise    -> critical

Weights and bucket bounds come from :class:`~mmscript.config.AnalyzerConfig`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from mmscript.config import AnalyzerConfig
from mmscript.declarations import ScriptDeclarations, collect_declarations
from mmscript.grammar import (
    find_when_conditions,
    has_spawner,
    parse_condition,
    parse_declaration,
)

logger = logging.getLogger(__name__)


class LoadLevel(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class PerformanceMetrics:
    event_count: int = 0
    condition_complexity: int = 0
    timer_count: int = 0
    spawner_count: int = 0
    score: float = 0.0
    estimated_load: LoadLevel = LoadLevel.LOW


def classify_load(score: float, config: Optional[AnalyzerConfig] = None) -> LoadLevel:
    low, medium, high = (config or AnalyzerConfig()).load_thresholds
    if score < low:
        return LoadLevel.LOW
    if score < medium:
        return LoadLevel.MEDIUM
    if score < high:
        return LoadLevel.HIGH
    return LoadLevel.CRITICAL


def measure_performance(
    decls: ScriptDeclarations,
    config: Optional[AnalyzerConfig] = None,
) -> PerformanceMetrics:
    config = config or AnalyzerConfig()
    events = len(decls.events)
    timers = 0
    spawners = 0
    complexity = 0
    for line in decls.lines:
        decl = parse_declaration(line.code)
        # every declaration line counts, even a repeated name
        if decl is not None and decl.var_type == "timer":
            timers += 1
        if has_spawner(line.code):
            spawners += 1
        for condition in find_when_conditions(line.code):
            complexity += 1 + parse_condition(condition).logic_operators

    score = (
        events * config.event_weight
        + complexity * config.complexity_weight
        + timers * config.timer_weight
        + spawners * config.spawner_weight
    )
    return PerformanceMetrics(
        event_count=events,
        condition_complexity=complexity,
        timer_count=timers,
        spawner_count=spawners,
        score=score,
        estimated_load=classify_load(score, config),
    )


def analyze_performance(
    script_text: str,
    config: Optional[AnalyzerConfig] = None,
) -> PerformanceMetrics:
    """Estimate the runtime load of *script_text*."""
    metrics = measure_performance(collect_declarations(script_text), config)
    logger.debug("performance: %s", metrics)
    return metrics


def performance_recommendations(
    metrics: PerformanceMetrics,
    config: Optional[AnalyzerConfig] = None,
) -> List[str]:
    """Suggestions for every counter above its threshold."""
    config = config or AnalyzerConfig()
    hints: List[str] = []
    if metrics.condition_complexity > config.complexity_hint_threshold:
        hints.append(
            "Complex conditions may impact performance - consider "
            "simplifying or using state machines"
        )
    if metrics.timer_count > config.timer_hint_threshold:
        hints.append(
            "High timer count - consider consolidating timers where possible"
        )
    if metrics.spawner_count > config.spawner_hint_threshold:
        hints.append(
            "Multiple spawners active - ensure spawn caps are reasonable"
        )
    if metrics.event_count > config.event_hint_threshold:
        hints.append(
            "Large number of events - consider using event chains to "
            "reduce duplication"
        )
    return hints


__all__ = [
    "LoadLevel",
    "PerformanceMetrics",
    "classify_load",
    "measure_performance",
    "analyze_performance",
    "performance_recommendations",
]
