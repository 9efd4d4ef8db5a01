"""
mmscript.declarations
=====================

Declaration collector: the shared first pass of every detector.

Turns raw script text into

* a table of typed variable declarations (``int Counter = 0``), and
* an ordered list of event blocks (``Name::`` followed by its commands).

The scan covers the whole text, so a variable declared after its first use
is still known.  Nothing here raises on malformed text; lines that fit no
shape are kept as plain command lines or ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from mmscript.grammar import (
    find_triggers,
    parse_declaration,
    parse_event_open,
    split_comment,
)

logger = logging.getLogger(__name__)

VARIABLE_TYPES = ("int", "float", "bool", "string", "timer", "arrow")


@dataclass(frozen=True)
class ScriptLine:
    """One physical line of script text.

    Attributes
    ----------
    number  : 1-based line number
    text    : the line as written
    code    : the line with any ``#`` comment removed
    comment : comment text without the ``#``, or ``None``
    """
    number: int
    text: str
    code: str
    comment: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.code.strip()


@dataclass(frozen=True)
class ScriptVariable:
    name: str
    declared_type: str
    line: int
    initial_value: Any


@dataclass(frozen=True)
class EventDefinition:
    name: str
    start_line: int
    command_lines: Tuple[ScriptLine, ...] = ()
    guard_condition: Optional[str] = None

    @property
    def end_line(self) -> int:
        if self.command_lines:
            return self.command_lines[-1].number
        return self.start_line

    def iter_code(self) -> Iterator[Tuple[int, str]]:
        """Yield ``(line_number, code)`` for every command line."""
        for line in self.command_lines:
            yield line.number, line.code

    def mentions(self, token: str) -> bool:
        """Whether *token* occurs as a whole word in the block (opener included)."""
        if contains_word(self.name, token):
            return True
        return any(contains_word(code, token) for _, code in self.iter_code())


@dataclass
class ScriptDeclarations:
    """Everything the collector found in one script."""
    lines: List[ScriptLine] = field(default_factory=list)
    variables: Dict[str, ScriptVariable] = field(default_factory=dict)
    events: List[EventDefinition] = field(default_factory=list)

    @property
    def event_names(self) -> List[str]:
        """Distinct event names in definition order."""
        return list(dict.fromkeys(ev.name for ev in self.events))

    def events_named(self, name: str) -> List[EventDefinition]:
        return [ev for ev in self.events if ev.name == name]

    def first_event(self, name: str) -> Optional[EventDefinition]:
        for ev in self.events:
            if ev.name == name:
                return ev
        return None

    def event_at(self, line_number: int) -> Optional[EventDefinition]:
        """The event block that owns *line_number*, if any."""
        for ev in self.events:
            if ev.start_line <= line_number <= ev.end_line:
                return ev
        return None

    def duplicate_events(self) -> List[EventDefinition]:
        """Every repeated definition after the first of its name."""
        seen: Dict[str, EventDefinition] = {}
        dups: List[EventDefinition] = []
        for ev in self.events:
            if ev.name in seen:
                dups.append(ev)
            else:
                seen[ev.name] = ev
        return dups

    def variables_of_type(self, declared_type: str) -> List[ScriptVariable]:
        return [
            v for v in self.variables.values()
            if v.declared_type == declared_type
        ]


def contains_word(text: str, token: str) -> bool:
    start = text.find(token)
    while start != -1:
        before = text[start - 1] if start > 0 else " "
        end = start + len(token)
        after = text[end] if end < len(text) else " "
        if not (before.isalnum() or before == "_") and not (
            after.isalnum() or after == "_"
        ):
            return True
        start = text.find(token, start + 1)
    return False


def split_lines(script_text: str) -> List[ScriptLine]:
    """Split text into :class:`ScriptLine` records (1-based numbering)."""
    lines: List[ScriptLine] = []
    for number, raw in enumerate(script_text.split("\n"), start=1):
        raw = raw.rstrip("\r")
        code, comment = split_comment(raw)
        lines.append(ScriptLine(number=number, text=raw, code=code,
                                comment=comment))
    return lines


def coerce_value(declared_type: str, value: str) -> Any:
    """Convert a declared initial value to a Python value where possible."""
    value = value.strip()
    if declared_type == "int":
        try:
            return int(value)
        except ValueError:
            return value
    if declared_type == "float":
        try:
            return float(value)
        except ValueError:
            return value
    if declared_type == "bool":
        lowered = value.lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        return value
    if declared_type == "string":
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            return value[1:-1]
        return value
    return value


def collect_declarations(script_text: str) -> ScriptDeclarations:
    """Collect variables and event blocks from *script_text*."""
    decls = ScriptDeclarations(lines=split_lines(script_text))

    current: Optional[Tuple[str, int]] = None
    commands: List[ScriptLine] = []
    blocks: List[Tuple[str, int, List[ScriptLine]]] = []

    for line in decls.lines:
        if line.is_blank:
            continue

        name = parse_event_open(line.code)
        if name is not None:
            if current is not None:
                blocks.append((current[0], current[1], commands))
            current = (name, line.number)
            commands = []
            continue

        decl = parse_declaration(line.code)
        if decl is not None and (decl.var_type != "unknown" or current is None):
            # first declaration of a name wins
            if decl.name not in decls.variables:
                decls.variables[decl.name] = ScriptVariable(
                    name=decl.name,
                    declared_type=decl.var_type,
                    line=line.number,
                    initial_value=coerce_value(decl.var_type, decl.value),
                )
            continue

        if current is not None:
            commands.append(line)

    if current is not None:
        blocks.append((current[0], current[1], commands))

    guards: Dict[str, str] = {}
    for line in decls.lines:
        for trig in find_triggers(line.code):
            if trig.keyword == "when":
                guards.setdefault(trig.target, trig.condition.strip())

    decls.events = [
        EventDefinition(
            name=name,
            start_line=start,
            command_lines=tuple(cmds),
            guard_condition=guards.get(name),
        )
        for name, start, cmds in blocks
    ]

    logger.debug(
        "collected %d variable(s) and %d event block(s)",
        len(decls.variables), len(decls.events),
    )
    return decls


__all__ = [
    "VARIABLE_TYPES",
    "ScriptLine",
    "ScriptVariable",
    "EventDefinition",
    "ScriptDeclarations",
    "contains_word",
    "split_lines",
    "coerce_value",
    "collect_declarations",
]
