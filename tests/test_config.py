# tests/test_config.py
"""
Tests for analyzer configuration and the error hierarchy.
"""

import json

import pytest

from mmscript.config import DEFAULT_STATE_NAMES, AnalyzerConfig, load_config
from mmscript.errors import ConfigError, InputError, MMScriptError


class TestDefaults:

    def test_defaults_are_valid(self):
        config = AnalyzerConfig()
        assert config.validate() == []
        assert config.load_thresholds == (20.0, 50.0, 100.0)
        assert config.state_names == DEFAULT_STATE_NAMES

    def test_state_names_not_shared(self):
        a = AnalyzerConfig()
        a.state_names[9] = "X"
        assert 9 not in AnalyzerConfig().state_names


class TestFromDict:

    def test_overrides(self):
        config = AnalyzerConfig.from_dict({
            "timer_hint_threshold": 20,
            "load_thresholds": [25, 60, 120],
            "state_names": {"0": "OFF"},
            "disabled_checkers": ["performance"],
        })
        assert config.timer_hint_threshold == 20
        assert config.load_thresholds == (25.0, 60.0, 120.0)
        assert config.state_names == {0: "OFF"}
        assert config.disabled_checkers == ["performance"]

    @pytest.mark.parametrize("data", [
        {"no_such_key": 1},
        {"event_weight": -1},
        {"load_thresholds": [50, 20, 100]},
        {"load_thresholds": [1, 2]},
        {"load_thresholds": 5},
        {"state_names": {"zero": "IDLE"}},
        {"timer_weight": "heavy"},
    ])
    def test_rejected(self, data):
        with pytest.raises(ConfigError):
            AnalyzerConfig.from_dict(data)


class TestLoadConfig:

    def test_load(self, tmp_path):
        path = tmp_path / "mmscript.json"
        path.write_text(json.dumps({"suppressed_ids": ["mutexPattern"]}))
        assert load_config(path).suppressed_ids == ["mutexPattern"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_config(path)


class TestErrors:

    def test_hierarchy(self):
        assert issubclass(ConfigError, MMScriptError)
        assert issubclass(InputError, MMScriptError)

    def test_codes(self):
        assert str(ConfigError("bad")) == "[MMS-1001] bad"
        assert InputError("x").code == "MMS-2001"
        assert MMScriptError("x", code="MMS-9999").code == "MMS-9999"
