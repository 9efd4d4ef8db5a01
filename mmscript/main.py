#!/usr/bin/env python3
"""mmscript/main.py - CLI entry-point for the mission script analyzer.

Usage examples
--------------
    # Analyse a script and print GCC-style diagnostics
    mmscript analyze level01.script

    # Same, for a script section exported as JSON by a level editor
    mmscript analyze level01.json --input-format json --format json

    # Only run two checkers, hide one diagnostic id
    mmscript analyze level01.script --checkers deadlocks circular-dependencies \\
        --suppress deadlockRisk

    # Print the event graph for Graphviz
    mmscript graph level01.script | dot -Tsvg > events.svg

    # List available checkers
    mmscript list-checkers

Exit codes
----------
    0   Success (no error diagnostics).
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (missing file, bad JSON, bad config, ...).

``python -m mmscript`` calls :func:`main` through ``mmscript/__main__.py``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO

from mmscript import __version__
from mmscript.checkers import _DEFAULT_REGISTRY, CheckerRunner, CheckerRunResults
from mmscript.config import AnalyzerConfig, load_config
from mmscript.declarations import collect_declarations
from mmscript.errors import InputError, MMScriptError
from mmscript.event_graph import build_event_graph
from mmscript.section import ScriptSection, reconstruct_script_text

_log = logging.getLogger("mmscript")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``mmscript`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("mmscript")
    root.setLevel(level)
    if not any(not isinstance(h, logging.NullHandler) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root.addHandler(handler)


def read_script(path: str, input_format: str = "text") -> str:
    """Return script text from a plain script file or a JSON section."""
    p = Path(path).expanduser()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"cannot read {p}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise InputError(f"{p} is not UTF-8 text: {exc}") from exc

    if input_format == "text":
        return raw
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"{p} is not valid JSON: {exc}") from exc
    return reconstruct_script_text(ScriptSection.from_dict(data))


def _open_output(dest: Optional[str]) -> TextIO:
    """``None`` or ``"-"`` → ``sys.stdout``; otherwise open *dest*."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _emit_results(results: CheckerRunResults, fmt: str, stream: TextIO) -> None:
    if fmt == "json":
        json.dump(
            [dict(d.to_dict(), errorId=d.error_id) for d in results.diagnostics],
            stream,
            indent=2,
        )
        stream.write("\n")
    elif fmt == "jsonl":
        if results.diagnostics:
            stream.write(results.to_json_lines() + "\n")
    elif fmt == "gcc":
        if results.diagnostics:
            stream.write(results.to_gcc_format() + "\n")
    else:
        if results.diagnostics:
            stream.write(results.to_gcc_format() + "\n")
        stream.write("\n" + results.summary() + "\n")


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_analyze(args: argparse.Namespace) -> int:
    """Run the checker suite over one script."""
    config = load_config(args.config) if args.config else AnalyzerConfig()
    config.suppressed_ids.extend(args.suppress or [])

    text = read_script(args.script, args.input_format)
    _log.info("analyzing %s (%d line(s))", args.script, text.count("\n") + 1)

    runner = CheckerRunner(config=config)
    results = runner.run(text, checkers=args.checkers, file=args.script)

    out = _open_output(args.output)
    try:
        _emit_results(results, args.format, out)
    finally:
        if out is not sys.stdout:
            out.close()

    _log.info("%d error(s), %d warning(s)",
              results.error_count, results.warning_count)
    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


def cmd_graph(args: argparse.Namespace) -> int:
    """Print the event graph as Graphviz DOT."""
    text = read_script(args.script, args.input_format)
    graph = build_event_graph(collect_declarations(text))
    _log.info("event graph: %s", graph.statistics())
    sys.stdout.write(graph.to_dot(title=Path(args.script).name) + "\n")
    return EXIT_OK


def cmd_list_checkers(args: argparse.Namespace) -> int:
    """List registered checkers and the ids they can report."""
    for cls in _DEFAULT_REGISTRY.get_all():
        ids = ", ".join(sorted(cls.error_ids))
        sys.stdout.write(f"{cls.name:<24} {cls.description}\n")
        sys.stdout.write(f"{'':<24} ids: {ids}\n")
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mmscript",
        description="Static analyzer for mission scripts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              mmscript analyze level01.script
              mmscript analyze level01.json --input-format json -f json
              mmscript graph level01.script
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_input_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("script", metavar="FILE", help="Script file to read.")
        p.add_argument(
            "--input-format",
            choices=["text", "json"],
            default="text",
            help="Plain script text or a JSON script section (default: text).",
        )

    # --- analyze -----------------------------------------------------------
    p_analyze = subparsers.add_parser(
        "analyze",
        aliases=["analyse"],
        help="Run the checkers on a script.",
    )
    _add_input_args(p_analyze)
    p_analyze.add_argument(
        "-f", "--format",
        choices=["gcc", "json", "jsonl", "summary"],
        default="gcc",
        help="Output format (default: gcc).",
    )
    p_analyze.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_analyze.add_argument(
        "-c", "--config",
        default=None,
        metavar="FILE",
        help="JSON analyzer configuration.",
    )
    p_analyze.add_argument(
        "--checkers",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Only run these checkers (see list-checkers).",
    )
    p_analyze.add_argument(
        "--suppress",
        nargs="+",
        default=None,
        metavar="ID",
        help="Diagnostic ids to suppress everywhere.",
    )
    p_analyze.set_defaults(func=cmd_analyze)

    # --- graph -------------------------------------------------------------
    p_graph = subparsers.add_parser(
        "graph",
        help="Print the event graph in Graphviz DOT format.",
    )
    _add_input_args(p_graph)
    p_graph.set_defaults(func=cmd_graph)

    # --- list-checkers -----------------------------------------------------
    p_list = subparsers.add_parser(
        "list-checkers",
        help="List available checkers.",
    )
    p_list.set_defaults(func=cmd_list_checkers)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the mmscript CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except MMScriptError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
