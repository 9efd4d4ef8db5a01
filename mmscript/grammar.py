"""
mmscript.grammar
================

PEG line grammar for the mission script language.

Script text is only loosely structured, so instead of parsing a whole file
the analyzer recognises *line shapes*.  Each shape is a named rule of
:data:`SCRIPT_GRAMMAR`; a rule either has to cover a whole line
(declarations, event openers) or is searched for anywhere inside a line
(triggers, assignments, invocations, ...).

Shapes
------
``declaration``    ``int Counter = 0``
``untyped_decl``   ``Counter = 0``
``event_open``     ``Name::``
``invocation``     ``Other::;``
``trigger``        ``when(cond)[Event]`` / ``if(cond)[Event]``
``when_clause``    ``when(cond)``, with or without a target
``call_command``   ``call:Event``
``assignment``     ``name:value``
``increment``      ``name + 5``  (the value of an assignment)
``oxygen``         ``oxygen:100/200``
``spawner``        ``spawncap:`` / ``addrandomspawn:``
``condition_expr`` the inside of a trigger's parentheses

Typical usage::

    from mmscript.grammar import find_triggers, parse_condition

    for trig in find_triggers("when(State==0 and ore>=5)[Open]"):
        info = parse_condition(trig.condition)
        print(trig.target, info.comparisons, info.logic_operators)
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

SCRIPT_GRAMMAR = Grammar(r'''
    declaration     = ws var_type ws1 decl_name ws "=" ws decl_value ";"? ws
    untyped_decl    = ws decl_name ws "=" !"=" ws decl_value ";"? ws
    var_type        = "int" / "float" / "bool" / "string" / "timer" / "arrow"
    decl_name       = ~r"[A-Za-z_][A-Za-z0-9_]*"
    decl_value      = ~r"[^;]*"

    event_open      = ws event_name "::" ws
    event_name      = ~r"[A-Za-z_][A-Za-z0-9_]*"

    invocation      = callee "::" ws ";"
    callee          = ~r"[A-Za-z_][A-Za-z0-9_]*"

    trigger         = trigger_kw ws "(" condition ")" ws "[" ws target ws "]"
    trigger_kw      = "when" / "if"
    condition       = ~r"(?:(?!\)\s*\[).)*"
    target          = ~r"[A-Za-z_][A-Za-z0-9_]*"

    when_clause     = "when" ws "(" when_body ")"
    when_body       = ~r"(?:(?!\)\s*\[).)*(?=\))"

    call_command    = "call" ws ":" ws call_target
    call_target     = ~r"[A-Za-z_][A-Za-z0-9_]*"

    assignment      = assignee ws ":" !":" ws assigned
    assignee        = ~r"[A-Za-z_][A-Za-z0-9_]*"
    assigned        = ~r"[^;]*"

    increment       = ws inc_name ws "+" ws inc_amount ws
    inc_name        = ~r"[A-Za-z_][A-Za-z0-9_]*"
    inc_amount      = ~r"\d+(?:\.\d+)?"

    int_value       = ws int_literal ws
    int_literal     = ~r"-?\d+"

    oxygen          = "oxygen" ws ":" ws ox_current ws "/" ws ox_max
    ox_current      = ~r"\d+"
    ox_max          = ~r"\d+"

    spawner         = spawn_kw ws ":"
    spawn_kw        = "spawncap" / "addrandomspawn"

    condition_expr  = cws (cond_item cws)*
    cond_item       = comparison / logic_op / word / number / punct
    comparison      = lhs ws cmp_op ws rhs
    lhs             = ~r"[A-Za-z_][A-Za-z0-9_]*"
    cmp_op          = "==" / "!=" / ">=" / "<=" / ">" / "<"
    rhs             = ~r"-?\d+(?:\.\d+)?|[A-Za-z_][A-Za-z0-9_]*"
    logic_op        = ~r"(?i:and|or)\b"
    word            = ~r"[A-Za-z_][A-Za-z0-9_]*"
    number          = ~r"\d+(?:\.\d+)?"
    punct           = ~r"[^A-Za-z0-9_\s]+"

    ws              = ~r"[ \t]*"
    ws1             = ~r"[ \t]+"
    cws             = ~r"\s*"
''')

_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_IDENT_START = frozenset(string.ascii_letters + "_")

# tokens in a condition that never name shared state
CONDITION_KEYWORDS = frozenset({
    "and", "or", "not", "true", "false", "AND", "OR", "NOT", "TRUE", "FALSE",
})


# ---------------------------------------------------------------------------
# Match records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Declaration:
    var_type: str          # "unknown" for untyped declarations
    name: str
    value: str


@dataclass(frozen=True)
class Trigger:
    keyword: str           # "when" or "if"
    condition: str
    target: str
    column: int


@dataclass(frozen=True)
class Assignment:
    name: str
    value: str
    column: int


@dataclass(frozen=True)
class Comparison:
    lhs: str
    op: str
    rhs: str

    def involves(self, name: str) -> bool:
        return self.lhs == name or self.rhs == name

    def other_side(self, name: str) -> Optional[str]:
        """Operand opposite *name*, or ``None`` if *name* is not compared."""
        if self.lhs == name:
            return self.rhs
        if self.rhs == name:
            return self.lhs
        return None


@dataclass(frozen=True)
class ConditionInfo:
    """What a trigger condition mentions."""
    comparisons: Tuple[Comparison, ...] = ()
    names: Tuple[str, ...] = ()
    logic_operators: int = 0


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def _find(node: Node, name: str) -> Optional[Node]:
    """Depth-first search for the first descendant produced by rule *name*."""
    if node.expr_name == name:
        return node
    for child in node.children:
        found = _find(child, name)
        if found is not None:
            return found
    return None


def _text(node: Node, name: str) -> str:
    found = _find(node, name)
    return found.text if found is not None else ""


def _full(rule: str, text: str) -> Optional[Node]:
    """Match *rule* against the whole of *text*, or return ``None``."""
    try:
        return SCRIPT_GRAMMAR[rule].parse(text)
    except ParseError:
        return None


def scan(rule: str, text: str) -> Iterator[Node]:
    """Yield non-overlapping occurrences of *rule* inside *text*.

    A match may only start on an identifier character that is not itself
    preceded by an identifier character, so ``xState:1`` never yields an
    assignment to ``State``.
    """
    expr = SCRIPT_GRAMMAR[rule]
    pos = 0
    end = len(text)
    while pos < end:
        if text[pos] not in _IDENT_START or (
            pos > 0 and text[pos - 1] in _WORD_CHARS
        ):
            pos += 1
            continue
        try:
            node = expr.match(text, pos)
        except ParseError:
            pos += 1
            continue
        yield node
        pos = max(node.end, pos + 1)


def is_identifier(token: str) -> bool:
    return bool(token) and token[0] in _IDENT_START and all(
        c in _WORD_CHARS for c in token
    )


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def split_comment(line: str) -> Tuple[str, Optional[str]]:
    """Split *line* into ``(code, comment)``.

    A ``#`` between double quotes belongs to a string literal.
    """
    in_string = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_string = not in_string
        elif ch == "#" and not in_string:
            return line[:i], line[i + 1:].strip()
    return line, None


# ---------------------------------------------------------------------------
# Whole-line shapes
# ---------------------------------------------------------------------------

def parse_declaration(code: str) -> Optional[Declaration]:
    """Recognise ``<type> <name> = <value>`` (typed) or ``<name> = <value>``."""
    node = _full("declaration", code)
    if node is not None:
        return Declaration(
            var_type=_text(node, "var_type"),
            name=_text(node, "decl_name"),
            value=_text(node, "decl_value").strip(),
        )
    node = _full("untyped_decl", code)
    if node is not None:
        return Declaration(
            var_type="unknown",
            name=_text(node, "decl_name"),
            value=_text(node, "decl_value").strip(),
        )
    return None


def parse_event_open(code: str) -> Optional[str]:
    """Return the event name if *code* is a ``Name::`` block opener."""
    node = _full("event_open", code)
    return _text(node, "event_name") if node is not None else None


def parse_increment(value: str) -> Optional[Tuple[str, float]]:
    """``Cooldown+30`` -> ``("Cooldown", 30.0)``."""
    node = _full("increment", value)
    if node is None:
        return None
    return _text(node, "inc_name"), float(_text(node, "inc_amount"))


def parse_int(value: str) -> Optional[int]:
    node = _full("int_value", value)
    return int(_text(node, "int_literal")) if node is not None else None


# ---------------------------------------------------------------------------
# In-line shapes
# ---------------------------------------------------------------------------

def find_triggers(code: str) -> List[Trigger]:
    return [
        Trigger(
            keyword=_text(node, "trigger_kw"),
            condition=_text(node, "condition"),
            target=_text(node, "target"),
            column=node.start + 1,
        )
        for node in scan("trigger", code)
    ]


def find_when_conditions(code: str) -> List[str]:
    """Conditions of every ``when(...)`` on the line, targeted or not."""
    return [_text(node, "when_body") for node in scan("when_clause", code)]


def find_invocations(code: str) -> List[str]:
    return [_text(node, "callee") for node in scan("invocation", code)]


def find_call_commands(code: str) -> List[str]:
    return [_text(node, "call_target") for node in scan("call_command", code)]


def find_assignments(code: str) -> List[Assignment]:
    return [
        Assignment(
            name=_text(node, "assignee"),
            value=_text(node, "assigned").strip(),
            column=node.start + 1,
        )
        for node in scan("assignment", code)
    ]


def find_oxygen(code: str) -> Optional[Tuple[int, int]]:
    """``oxygen:100/200`` -> ``(100, 200)``."""
    for node in scan("oxygen", code):
        return int(_text(node, "ox_current")), int(_text(node, "ox_max"))
    return None


def has_spawner(code: str) -> bool:
    return next(scan("spawner", code), None) is not None


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

class _ConditionVisitor(NodeVisitor):
    """Collect comparisons, identifier tokens and and/or operators."""

    def __init__(self) -> None:
        self.comparisons: List[Comparison] = []
        self.names: List[str] = []
        self.logic_operators = 0

    def generic_visit(self, node, visited_children):
        return node

    def visit_comparison(self, node, visited_children):
        cmp = Comparison(
            lhs=_text(node, "lhs"),
            op=_text(node, "cmp_op"),
            rhs=_text(node, "rhs"),
        )
        self.comparisons.append(cmp)
        for operand in (cmp.lhs, cmp.rhs):
            if is_identifier(operand):
                self.names.append(operand)
        return node

    def visit_logic_op(self, node, visited_children):
        self.logic_operators += 1
        return node

    def visit_word(self, node, visited_children):
        self.names.append(node.text)
        return node


def parse_condition(condition: str) -> ConditionInfo:
    """Break a trigger condition into comparisons, names and operators.

    Returns an empty :class:`ConditionInfo` if the condition cannot be read.
    """
    node = _full("condition_expr", condition)
    if node is None:
        return ConditionInfo()
    visitor = _ConditionVisitor()
    visitor.visit(node)
    return ConditionInfo(
        comparisons=tuple(visitor.comparisons),
        names=tuple(visitor.names),
        logic_operators=visitor.logic_operators,
    )


__all__ = [
    "SCRIPT_GRAMMAR",
    "CONDITION_KEYWORDS",
    "Declaration",
    "Trigger",
    "Assignment",
    "Comparison",
    "ConditionInfo",
    "scan",
    "is_identifier",
    "split_comment",
    "parse_declaration",
    "parse_event_open",
    "parse_increment",
    "parse_int",
    "find_triggers",
    "find_when_conditions",
    "find_invocations",
    "find_call_commands",
    "find_assignments",
    "find_oxygen",
    "has_spawner",
    "parse_condition",
]
