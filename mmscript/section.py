"""
mmscript.section
================

Structured script sections and their text form.

Level editors keep a script as a parsed section (variables plus events with
commands).  The detectors read text, so a section is turned back into script
text first::

    int Counter=0
    when(Counter==0)[Start]
    Start::
    msg:Hello;
    Counter:1;

Variable keys may carry their type (``"int Counter"``); otherwise the type
is inferred from the Python value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from mmscript.declarations import VARIABLE_TYPES
from mmscript.errors import InputError

ScriptValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class ScriptCommand:
    command: str
    parameters: Tuple[str, ...] = ()

    def to_line(self) -> str:
        if self.parameters:
            return f"{self.command}:{','.join(self.parameters)};"
        return f"{self.command};"


@dataclass
class ScriptEvent:
    name: str
    condition: Optional[str] = None
    commands: List[ScriptCommand] = field(default_factory=list)


@dataclass
class ScriptSection:
    """
    Attributes
    ----------
    variables : declaration key -> value, in declaration order; a key is
                either a bare name or ``"<type> <name>"``
    events    : event definitions, in order
    """
    variables: Dict[str, ScriptValue] = field(default_factory=dict)
    events: List[ScriptEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScriptSection":
        """Load the JSON shape::

            {"variables": {"int Counter": 0},
             "events": [{"name": "Start", "condition": "Counter==0",
                         "commands": [{"command": "msg",
                                       "parameters": ["Hello"]}]}]}
        """
        if not isinstance(data, Mapping):
            raise InputError("script section must be a JSON object")
        variables = data.get("variables", {})
        if not isinstance(variables, Mapping):
            raise InputError("'variables' must be an object")
        for key, value in variables.items():
            if not isinstance(value, (str, int, float, bool)):
                raise InputError(
                    f"variable '{key}' has unsupported value {value!r}"
                )
        events = data.get("events", [])
        if not isinstance(events, Sequence) or isinstance(events, str):
            raise InputError("'events' must be an array")
        return cls(
            variables=dict(variables),
            events=[_event_from_dict(ev) for ev in events],
        )


def _event_from_dict(data: Any) -> ScriptEvent:
    if not isinstance(data, Mapping) or not isinstance(data.get("name"), str):
        raise InputError(f"event entry needs a string 'name': {data!r}")
    commands: List[ScriptCommand] = []
    for cmd in data.get("commands", []):
        if not isinstance(cmd, Mapping) or not isinstance(cmd.get("command"), str):
            raise InputError(
                f"command in event '{data['name']}' needs a string 'command'"
            )
        params = cmd.get("parameters") or []
        if not isinstance(params, list):
            raise InputError(
                f"parameters of '{cmd['command']}' must be a list: {params!r}"
            )
        commands.append(ScriptCommand(
            command=cmd["command"],
            parameters=tuple(str(p) for p in params),
        ))
    condition = data.get("condition")
    return ScriptEvent(
        name=data["name"],
        condition=str(condition) if condition else None,
        commands=commands,
    )


def infer_type(value: ScriptValue) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    return "string"


def format_value(value: ScriptValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _split_key(key: str, value: ScriptValue) -> Tuple[str, str]:
    parts = key.split()
    if len(parts) == 2 and parts[0] in VARIABLE_TYPES:
        return parts[0], parts[1]
    return infer_type(value), key.strip()


def reconstruct_script_text(section: ScriptSection) -> str:
    """Render *section* as script text the detectors can read."""
    lines: List[str] = []
    for key, value in section.variables.items():
        var_type, name = _split_key(key, value)
        lines.append(f"{var_type} {name}={format_value(value)}")
    for ev in section.events:
        if ev.condition:
            lines.append(f"when({ev.condition})[{ev.name}]")
        lines.append(f"{ev.name}::")
        lines.extend(cmd.to_line() for cmd in ev.commands)
    return "\n".join(lines)


__all__ = [
    "ScriptCommand",
    "ScriptEvent",
    "ScriptSection",
    "infer_type",
    "format_value",
    "reconstruct_script_text",
]
