# tests/test_cli.py
"""
Tests for the ``mmscript`` command line.
"""

import json
import logging

import pytest

from mmscript.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main, read_script
from mmscript.errors import InputError

TWO_CYCLE = "A::\nB::;\nB::\nA::;\n"
CLEAN = "int Counter=0\nStart::\nmsg:Hello;\n"


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    log = logging.getLogger("mmscript")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.setLevel(logging.NOTSET)


@pytest.fixture
def cycle_file(tmp_path):
    path = tmp_path / "cycle.script"
    path.write_text(TWO_CYCLE)
    return path


@pytest.fixture
def clean_file(tmp_path):
    path = tmp_path / "clean.script"
    path.write_text(CLEAN)
    return path


class TestAnalyze:

    def test_errors_exit_one(self, cycle_file, capsys):
        assert main(["analyze", str(cycle_file)]) == EXIT_ERROR
        out = capsys.readouterr().out
        assert "[circularDependency]" in out
        assert f"{cycle_file}:4: error:" in out

    def test_clean_exit_zero(self, clean_file, capsys):
        assert main(["analyze", str(clean_file)]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_json_format(self, cycle_file, capsys):
        main(["analyze", str(cycle_file), "--format", "json"])
        records = json.loads(capsys.readouterr().out)
        assert records == [{
            "message": "Circular dependency detected: A -> B -> A",
            "line": 4,
            "column": 0,
            "severity": "error",
            "section": "script",
            "errorId": "circularDependency",
        }]

    def test_jsonl_format(self, cycle_file, capsys):
        main(["analyze", str(cycle_file), "-f", "jsonl"])
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["errorId"] == "circularDependency"

    def test_jsonl_clean_is_empty(self, clean_file, capsys):
        main(["analyze", str(clean_file), "-f", "jsonl"])
        assert capsys.readouterr().out == ""

    def test_summary_format(self, cycle_file, capsys):
        main(["analyze", str(cycle_file), "-f", "summary"])
        assert "Checker run complete: 1 diagnostics" in capsys.readouterr().out

    def test_output_file(self, cycle_file, tmp_path):
        dest = tmp_path / "out" / "report.txt"
        main(["analyze", str(cycle_file), "-o", str(dest)])
        assert "[circularDependency]" in dest.read_text()

    def test_suppress(self, cycle_file):
        code = main(["analyze", str(cycle_file), "--suppress", "circularDependency"])
        assert code == EXIT_OK

    def test_checkers(self, cycle_file):
        code = main(["analyze", str(cycle_file), "--checkers", "deadlocks"])
        assert code == EXIT_OK

    def test_config(self, cycle_file, tmp_path):
        config = tmp_path / "mmscript.json"
        config.write_text(json.dumps({"disabled_checkers": ["circular-dependencies"]}))
        assert main(["analyze", str(cycle_file), "--config", str(config)]) == EXIT_OK

    def test_bad_config(self, cycle_file, tmp_path):
        config = tmp_path / "mmscript.json"
        config.write_text(json.dumps({"bogus": 1}))
        assert main(["analyze", str(cycle_file), "--config", str(config)]) == EXIT_INFRA

    def test_missing_file(self, tmp_path, capfd):
        assert main(["analyze", str(tmp_path / "absent.script")]) == EXIT_INFRA
        err = capfd.readouterr().err
        assert "cannot read" in err
        assert "[ERROR]" in err

    def test_verbose_goes_to_stderr(self, clean_file, capfd):
        assert main(["-v", "analyze", str(clean_file)]) == EXIT_OK
        captured = capfd.readouterr()
        assert "analyzing" in captured.err
        assert captured.out == ""

    def test_handler_added_once(self, clean_file):
        main(["analyze", str(clean_file)])
        main(["analyze", str(clean_file)])
        handlers = [
            h for h in logging.getLogger("mmscript").handlers
            if not isinstance(h, logging.NullHandler)
        ]
        assert len(handlers) == 1

    def test_json_section_input(self, tmp_path, capsys):
        path = tmp_path / "section.json"
        path.write_text(json.dumps({
            "variables": {},
            "events": [
                {"name": "A", "commands": [{"command": "B::"}]},
                {"name": "B", "commands": [{"command": "A::"}]},
            ],
        }))
        code = main(["analyze", str(path), "--input-format", "json"])
        assert code == EXIT_ERROR
        assert "A -> B -> A" in capsys.readouterr().out

    def test_bad_json_input(self, tmp_path):
        path = tmp_path / "section.json"
        path.write_text("{oops")
        assert main(["analyze", str(path), "--input-format", "json"]) == EXIT_INFRA


class TestOtherCommands:

    def test_graph(self, cycle_file, capsys):
        assert main(["graph", str(cycle_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("digraph EventGraph {")
        assert '"A" -> "B"' in out

    def test_list_checkers(self, capsys):
        assert main(["list-checkers"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "deadlocks" in out
        assert "circularDependency" in out

    def test_no_command(self):
        assert main([]) == EXIT_INFRA

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "mmscript" in capsys.readouterr().out


class TestReadScript:

    def test_text(self, clean_file):
        assert read_script(str(clean_file)) == CLEAN

    def test_missing(self, tmp_path):
        with pytest.raises(InputError):
            read_script(str(tmp_path / "nope"))
