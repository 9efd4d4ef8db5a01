"""mmscript - static analysis for mission scripts.

Finds structural and semantic hazards in the event scripts of a tile-based
mining game without running them.

Submodules
----------
grammar
    Parsimonious PEG grammar for script line shapes and trigger conditions.

declarations
    Shared first pass: typed variables and event blocks.

event_graph
    Directed graph of calls and triggers between events, DOT export.

mutex, state_machine, resources, performance, cycles, deadlock
    One detector each; every detector has a ``detect_*``/``analyze_*``
    function taking script text.

section
    Structured script sections and their text form.

checkers
    Checker framework merging detector findings into diagnostics.

config, errors
    Analyzer configuration and exception types.

main
    CLI entry-point with subcommands ``analyze``, ``graph`` and
    ``list-checkers``.

Usage
-----
Command-line::

    python -m mmscript analyze level01.script
    mmscript graph level01.script

Programmatic::

    from mmscript import analyze_script

    for record in analyze_script(text):
        print(record["line"], record["severity"], record["message"])
"""

from __future__ import annotations

import logging

__version__: str = "0.1.0"

from mmscript.checkers import analyze_script, analyze_section  # noqa: E402
from mmscript.config import AnalyzerConfig  # noqa: E402
from mmscript.cycles import detect_circular_dependencies  # noqa: E402
from mmscript.deadlock import detect_deadlocks  # noqa: E402
from mmscript.errors import ConfigError, InputError, MMScriptError  # noqa: E402
from mmscript.mutex import detect_mutex_patterns  # noqa: E402
from mmscript.performance import analyze_performance  # noqa: E402
from mmscript.resources import analyze_resource_flow  # noqa: E402
from mmscript.state_machine import detect_state_machines  # noqa: E402

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__: list[str] = [
    "__version__",
    "AnalyzerConfig",
    "MMScriptError",
    "ConfigError",
    "InputError",
    "analyze_script",
    "analyze_section",
    "detect_mutex_patterns",
    "detect_state_machines",
    "analyze_resource_flow",
    "analyze_performance",
    "detect_circular_dependencies",
    "detect_deadlocks",
]
