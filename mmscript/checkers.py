"""
mmscript/checkers.py
════════════════════

Checker framework that turns detector results into diagnostics.

Each detector module answers a question about a script (which variables
act as locks, which events form a cycle, ...).  A checker wraps one of
them, decides which answers are worth reporting and with what severity,
and emits :class:`Diagnostic` records.  :class:`CheckerRunner` runs every
enabled checker over one script and merges their output into a single
list.

Architecture
────────────

  ┌──────────────────────────────────────────────────────────┐
  │                     CheckerRunner                        │
  │  ┌────────────┐  ┌────────────┐  ┌────────────┐          │
  │  │  Mutex     │  │  Cycles    │  │  Deadlock  │   ...    │
  │  │  Checker   │  │  Checker   │  │  Checker   │          │
  │  └─────┬──────┘  └─────┬──────┘  └─────┬──────┘          │
  │        │               │               │                 │
  │  ┌─────▼───────────────▼───────────────▼──────────────┐  │
  │  │   CheckerContext: text, declarations, event graph  │  │
  │  └─────────────────────────┬──────────────────────────┘  │
  │                            │                             │
  │  ┌─────────────────────────▼──────────────────────────┐  │
  │  │  SuppressionManager  (# mmscript-suppress, global) │  │
  │  └────────────────────────────────────────────────────┘  │
  └──────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        - read thresholds from the analyzer config
  2. **collect_evidence()** - run the detector
  3. **diagnose()**         - turn findings into diagnostics
  4. **report()**           - return diagnostics minus suppressed ones
"""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Type,
)

from mmscript.config import AnalyzerConfig
from mmscript.cycles import CircularDependency, find_cycles
from mmscript.deadlock import DeadlockRisk, RiskLevel, find_deadlocks
from mmscript.declarations import (
    EventDefinition,
    ScriptDeclarations,
    ScriptLine,
    collect_declarations,
)
from mmscript.event_graph import EventGraph, EventGraphEdge, build_event_graph
from mmscript.mutex import MutexKind, MutexPattern, find_mutex_patterns
from mmscript.performance import LoadLevel, PerformanceMetrics, measure_performance, performance_recommendations
from mmscript.resources import COUNTED_RESOURCES, ResourceFlow, find_resource_flow
from mmscript.section import ScriptSection, reconstruct_script_text
from mmscript.state_machine import StateMachine, dead_end_states, find_state_machines, unreachable_states

logger = logging.getLogger(__name__)

SUPPRESS_MARKER = "mmscript-suppress"


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 - DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class SourceLocation:
    """A line/column in a script; 0 means "whole script"."""
    file: str = "<script>"
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "circularDependency")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Where the finding is anchored
    checker_name : Name of the checker that produced this
    section      : Section of the level file the script came from
    evidence     : Machine-readable details for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation = SourceLocation()
    checker_name: str = ""
    section: str = "script"
    evidence: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def line(self) -> int:
        return self.location.line

    def to_dict(self) -> Dict[str, Any]:
        """The record shape consumed by the level validator."""
        return {
            "message": self.message,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "section": self.section,
        }

    def to_json_str(self) -> str:
        data = self.to_dict()
        data["errorId"] = self.error_id
        return json.dumps(data)

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 - SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Drops diagnostics the script author or the caller asked to hide.

    Sources:
      1. Inline comments: ``# mmscript-suppress errorId`` on the reported
         line or the line above it
      2. Global suppressions (command line or config)

    ``*`` suppresses every id.
    """

    def __init__(self) -> None:
        self._inline: Dict[int, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, lines: Iterable[ScriptLine]) -> None:
        for line in lines:
            comment = line.comment or ""
            if not comment.startswith(SUPPRESS_MARKER):
                continue
            ids = comment[len(SUPPRESS_MARKER):].replace(",", " ").split()
            self._inline[line.number].update(ids or ["*"])

    def add_global_suppression(self, error_id: str) -> None:
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        eid = diag.error_id
        if eid in self._global or "*" in self._global:
            return True
        if diag.location.line <= 0:
            return False
        for line_offset in (0, 1):
            ids = self._inline.get(diag.location.line - line_offset, set())
            if eid in ids or "*" in ids:
                return True
        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 - CHECKER BASE CLASS AND CONTEXT
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during one run.

    Attributes
    ----------
    text         : the script text
    decls        : the collected declarations of ``text``
    config       : analyzer thresholds
    file         : name used in diagnostic locations
    suppressions : SuppressionManager
    analyses     : results shared between checkers (keyed by name)
    """
    text: str
    decls: ScriptDeclarations
    config: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    file: str = "<script>"
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    analyses: Dict[str, Any] = field(default_factory=dict)

    def get_analysis(self, name: str) -> Any:
        return self.analyses.get(name)

    def set_analysis(self, name: str, result: Any) -> None:
        self.analyses[name] = result

    @property
    def event_graph(self) -> EventGraph:
        """The event graph, built once per run."""
        graph = self.get_analysis("event_graph")
        if graph is None:
            graph = build_event_graph(self.decls)
            self.set_analysis("event_graph", graph)
        return graph


class Checker(ABC):
    """
    Abstract base class for all checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        pass

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        ctx: CheckerContext,
        error_id: str,
        message: str,
        line: int = 0,
        column: int = 0,
        severity: Optional[DiagnosticSeverity] = None,
        evidence: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Helper to create and store a diagnostic."""
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=SourceLocation(file=ctx.file, line=line, column=column),
            checker_name=self.name,
            evidence=evidence or {},
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 - CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """Registry of checker classes, kept in registration order."""

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}
        self._disabled: Set[str] = set()

    def register(self, checker_cls: Type[Checker]) -> None:
        self._checkers[checker_cls.name] = checker_cls

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_all(self) -> List[Type[Checker]]:
        return list(self._checkers.values())

    def get_enabled(self) -> List[Type[Checker]]:
        return [
            cls for name, cls in self._checkers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        return self._checkers.get(name)

    def filter_by_error_id(self, error_id: str) -> List[Type[Checker]]:
        """Return checkers that can produce the given error_id."""
        return [
            cls for cls in self._checkers.values()
            if error_id in cls.error_ids
        ]

    @property
    def names(self) -> List[str]:
        return list(self._checkers)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 - CHECKERS
# ═════════════════════════════════════════════════════════════════════════

class DuplicateEventChecker(Checker):
    """Event names defined by more than one block."""

    name: ClassVar[str] = "duplicate-events"
    description: ClassVar[str] = "Event names defined more than once"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({"duplicateEvent"})

    def __init__(self) -> None:
        super().__init__()
        self._dups: List[EventDefinition] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._dups = ctx.decls.duplicate_events()

    def diagnose(self, ctx: CheckerContext) -> None:
        for ev in self._dups:
            first = ctx.decls.first_event(ev.name)
            self._emit(
                ctx, "duplicateEvent",
                f"Duplicate event name: {ev.name}",
                line=ev.start_line,
                evidence={"first_line": first.start_line if first else 0},
            )


class EventGraphChecker(Checker):
    """References to events that are never defined."""

    name: ClassVar[str] = "event-graph"
    description: ClassVar[str] = "Calls and triggers targeting undefined events"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({"undefinedEventTarget"})

    def __init__(self) -> None:
        super().__init__()
        self._dangling: List[EventGraphEdge] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._dangling = ctx.event_graph.undefined_targets()

    def diagnose(self, ctx: CheckerContext) -> None:
        for edge in self._dangling:
            self._emit(
                ctx, "undefinedEventTarget",
                f"Event '{edge.source}' references undefined event "
                f"'{edge.target}' ({edge.kind.value})",
                line=edge.line,
            )


class MutexChecker(Checker):
    """Synchronization idioms and over-shared cooldowns."""

    name: ClassVar[str] = "mutex-patterns"
    description: ClassVar[str] = "Variables used as locks, flags or cooldowns"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        "mutexPattern", "sharedCooldown",
    })

    def __init__(self) -> None:
        super().__init__()
        self._patterns: List[MutexPattern] = []
        self._shared_threshold = 3

    def configure(self, ctx: CheckerContext) -> None:
        self._shared_threshold = ctx.config.shared_cooldown_threshold

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._patterns = find_mutex_patterns(ctx.decls)

    def diagnose(self, ctx: CheckerContext) -> None:
        for p in self._patterns:
            self._emit(
                ctx, "mutexPattern",
                f"Detected {p.kind.label} pattern with variable "
                f"'{p.variable_name}' - ensure proper synchronization",
                line=p.line,
                evidence={"kind": p.kind.value,
                          "related_events": list(p.related_events)},
            )
            if (p.kind is MutexKind.GLOBAL_COOLDOWN
                    and len(p.related_events) > self._shared_threshold):
                self._emit(
                    ctx, "sharedCooldown",
                    f"Variable '{p.variable_name}' is used as cooldown for "
                    f"{len(p.related_events)} events - consider separate "
                    f"cooldowns",
                    line=p.line,
                )


class StateMachineChecker(Checker):
    """Inferred state machines and their unreachable or dead-end states."""

    name: ClassVar[str] = "state-machines"
    description: ClassVar[str] = "State machines built from int variables"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        "stateMachine", "unreachableState", "deadEndState",
    })

    def __init__(self) -> None:
        super().__init__()
        self._machines: List[StateMachine] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._machines = find_state_machines(ctx.decls, ctx.config.state_names)

    def diagnose(self, ctx: CheckerContext) -> None:
        for m in self._machines:
            var = ctx.decls.variables.get(m.variable_name)
            line = var.line if var is not None else 0
            self._emit(
                ctx, "stateMachine",
                f"Detected state machine with variable '{m.variable_name}' "
                f"({len(m.states)} states, {len(m.transitions)} transitions)",
                line=line,
            )
            for state in unreachable_states(m):
                self._emit(
                    ctx, "unreachableState",
                    f"State '{m.states[state]}' ({state}) in machine "
                    f"'{m.variable_name}' is unreachable",
                    line=line,
                )
            for state in dead_end_states(m):
                self._emit(
                    ctx, "deadEndState",
                    f"State '{m.states[state]}' ({state}) in machine "
                    f"'{m.variable_name}' has no outgoing transitions",
                    line=line,
                )


class ResourceFlowChecker(Checker):
    """Objectives demanding more resources than the script grants."""

    name: ClassVar[str] = "resource-flow"
    description: ClassVar[str] = "Resource sources versus objective sinks"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        "negativeResourceBalance", "resourceWithoutSource",
    })

    def __init__(self) -> None:
        super().__init__()
        self._flows: Dict[str, ResourceFlow] = {}

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._flows = find_resource_flow(ctx.decls)

    def diagnose(self, ctx: CheckerContext) -> None:
        for resource, flow in self._flows.items():
            line = flow.sinks[0].line if flow.sinks else 0
            if flow.balance < 0:
                self._emit(
                    ctx, "negativeResourceBalance",
                    f"Resource '{resource}' has negative balance "
                    f"({flow.balance}) - sources: {len(flow.sources)}, "
                    f"sinks: {len(flow.sinks)}",
                    line=line,
                    evidence={"balance": flow.balance},
                )
            if (resource in COUNTED_RESOURCES and flow.sinks
                    and not flow.sources):
                self._emit(
                    ctx, "resourceWithoutSource",
                    f"{resource.capitalize()} required for objectives but no "
                    f"{resource} sources found in script",
                    line=line,
                )


class PerformanceChecker(Checker):
    """High estimated load and per-counter hints."""

    name: ClassVar[str] = "performance"
    description: ClassVar[str] = "Estimated runtime load of the script"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        "performanceLoad", "performanceHint",
    })

    def __init__(self) -> None:
        super().__init__()
        self._metrics: Optional[PerformanceMetrics] = None

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._metrics = measure_performance(ctx.decls, ctx.config)
        ctx.set_analysis("performance", self._metrics)

    def diagnose(self, ctx: CheckerContext) -> None:
        m = self._metrics
        if m is None:
            return
        if m.estimated_load is LoadLevel.CRITICAL:
            self._emit(
                ctx, "performanceLoad",
                f"Script has critical performance load - Events: "
                f"{m.event_count}, Complexity: {m.condition_complexity}, "
                f"Timers: {m.timer_count}, Spawners: {m.spawner_count}",
                evidence={"score": m.score},
            )
        elif m.estimated_load is LoadLevel.HIGH:
            self._emit(
                ctx, "performanceLoad",
                "Script has high performance load - consider optimization",
                evidence={"score": m.score},
            )
        for hint in performance_recommendations(m, ctx.config):
            self._emit(ctx, "performanceHint", hint)


class CircularDependencyChecker(Checker):
    """Events that (transitively) call or trigger themselves."""

    name: ClassVar[str] = "circular-dependencies"
    description: ClassVar[str] = "Cycles in the event graph"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({"circularDependency"})
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.ERROR

    def __init__(self) -> None:
        super().__init__()
        self._cycles: List[CircularDependency] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._cycles = find_cycles(ctx.event_graph)

    def diagnose(self, ctx: CheckerContext) -> None:
        for cycle in self._cycles:
            self._emit(
                ctx, "circularDependency",
                f"Circular dependency detected: {cycle.describe()}",
                line=cycle.line,
                evidence={"events": list(cycle.events)},
            )


class DeadlockChecker(Checker):
    """Event pairs waiting on state the other one writes."""

    name: ClassVar[str] = "deadlocks"
    description: ClassVar[str] = "Mutual waits over shared state"
    error_ids: ClassVar[FrozenSet[str]] = frozenset({"deadlockRisk"})

    def __init__(self) -> None:
        super().__init__()
        self._risks: List[DeadlockRisk] = []

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._risks = find_deadlocks(ctx.decls)

    def diagnose(self, ctx: CheckerContext) -> None:
        for risk in self._risks:
            severity = (DiagnosticSeverity.ERROR
                        if risk.risk_level is RiskLevel.HIGH
                        else DiagnosticSeverity.WARNING)
            self._emit(
                ctx, "deadlockRisk",
                f"Potential deadlock between events "
                f"[{', '.join(risk.events)}] on resources "
                f"[{', '.join(sorted(risk.shared_resources))}]",
                line=risk.line,
                severity=severity,
                evidence={"risk_level": risk.risk_level.value},
            )


# Default registry; registration order is report order
_DEFAULT_REGISTRY = CheckerRegistry()
_DEFAULT_REGISTRY.register(DuplicateEventChecker)
_DEFAULT_REGISTRY.register(EventGraphChecker)
_DEFAULT_REGISTRY.register(MutexChecker)
_DEFAULT_REGISTRY.register(StateMachineChecker)
_DEFAULT_REGISTRY.register(ResourceFlowChecker)
_DEFAULT_REGISTRY.register(PerformanceChecker)
_DEFAULT_REGISTRY.register(CircularDependencyChecker)
_DEFAULT_REGISTRY.register(DeadlockChecker)


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 - RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of checkers.

    Attributes
    ----------
    diagnostics            : All diagnostics from all checkers
    diagnostics_by_checker : Diagnostics grouped by checker name
    stats                  : Timing statistics
    checker_names          : Names of checkers that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.WARNING))

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    def by_error_id(self, error_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.error_id == error_id]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self.diagnostics]

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checker run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of checkers against one script.

    Usage
    -----
    >>> runner = CheckerRunner()
    >>> results = runner.run(text)
    >>> print(results.summary())

    >>> # Or select specific checkers:
    >>> results = runner.run(text, checkers=["deadlocks"])

    Parameters for constructor
    ─────────────────────────
    registry    : CheckerRegistry - source of checker classes
    config      : AnalyzerConfig - thresholds, disabled checkers and
                  globally suppressed ids
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        config: Optional[AnalyzerConfig] = None,
    ) -> None:
        self.registry = registry or _DEFAULT_REGISTRY
        self.config = config or AnalyzerConfig()

    def _select(self, checkers: Optional[Sequence[str]]) -> List[Type[Checker]]:
        if checkers is not None:
            selected: List[Type[Checker]] = []
            for name in checkers:
                cls = self.registry.get_by_name(name)
                if cls is None:
                    logger.warning("unknown checker '%s' ignored", name)
                else:
                    selected.append(cls)
            return selected
        return [
            cls for cls in self.registry.get_enabled()
            if cls.name not in self.config.disabled_checkers
        ]

    def run(
        self,
        text: str,
        checkers: Optional[Sequence[str]] = None,
        file: str = "<script>",
    ) -> CheckerRunResults:
        """
        Run checkers against *text*.

        Parameters
        ----------
        text     : the script text
        checkers : checker names to run (None = all enabled)
        file     : name used in diagnostic locations
        """
        results = CheckerRunResults()
        decls = collect_declarations(text)

        suppressions = SuppressionManager()
        suppressions.load_inline_suppressions(decls.lines)
        for eid in self.config.suppressed_ids:
            suppressions.add_global_suppression(eid)

        ctx = CheckerContext(
            text=text,
            decls=decls,
            config=self.config,
            file=file,
            suppressions=suppressions,
        )

        for cls in self._select(checkers):
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                logger.exception("checker '%s' failed", checker_name)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.WARNING,
                    location=SourceLocation(file=file),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name] = diags
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms
            logger.debug("%s: %d diagnostic(s) in %.1fms",
                         checker_name, len(diags), elapsed_ms)

        return results


# ═════════════════════════════════════════════════════════════════════════
#  PART 7 - CONVENIENCE ENTRY POINTS
# ═════════════════════════════════════════════════════════════════════════

def analyze_script(
    text: str,
    config: Optional[AnalyzerConfig] = None,
) -> List[Dict[str, Any]]:
    """Run every enabled checker and return the merged diagnostic records."""
    return CheckerRunner(config=config).run(text).to_dicts()


def analyze_section(
    section: ScriptSection,
    config: Optional[AnalyzerConfig] = None,
) -> List[Dict[str, Any]]:
    """Like :func:`analyze_script` for a structured script section."""
    return analyze_script(reconstruct_script_text(section), config)


__all__ = [
    "DiagnosticSeverity",
    "SourceLocation",
    "Diagnostic",
    "SuppressionManager",
    "CheckerContext",
    "Checker",
    "CheckerRegistry",
    "DuplicateEventChecker",
    "EventGraphChecker",
    "MutexChecker",
    "StateMachineChecker",
    "ResourceFlowChecker",
    "PerformanceChecker",
    "CircularDependencyChecker",
    "DeadlockChecker",
    "CheckerRunner",
    "CheckerRunResults",
    "analyze_script",
    "analyze_section",
]
