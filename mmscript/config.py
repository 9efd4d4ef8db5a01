# mmscript/config.py
"""
Tuning knobs for the analyzer.

Every threshold the detectors and checkers use lives here so a project can
adjust them from a JSON file without touching code::

    {
        "load_thresholds": [25, 60, 120],
        "timer_hint_threshold": 20,
        "disabled_checkers": ["performance"],
        "suppressed_ids": ["mutexPattern"]
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from mmscript.errors import ConfigError

logger = logging.getLogger(__name__)


DEFAULT_STATE_NAMES: Dict[int, str] = {
    0: "IDLE",
    1: "ACTIVE",
    2: "COMPLETE",
    3: "FAILED",
}


@dataclass
class AnalyzerConfig:
    """Thresholds and switches for one analysis run."""

    # performance score = events*w0 + complexity*w1 + timers*w2 + spawners*w3
    event_weight: float = 1.0
    complexity_weight: float = 0.5
    timer_weight: float = 2.0
    spawner_weight: float = 3.0
    # upper bounds (exclusive) of the low / medium / high buckets
    load_thresholds: Tuple[float, float, float] = (20.0, 50.0, 100.0)

    complexity_hint_threshold: int = 50
    timer_hint_threshold: int = 10
    spawner_hint_threshold: int = 5
    event_hint_threshold: int = 100

    # a cooldown shared by more events than this gets its own warning
    shared_cooldown_threshold: int = 3

    state_names: Dict[int, str] = field(
        default_factory=lambda: dict(DEFAULT_STATE_NAMES)
    )

    disabled_checkers: List[str] = field(default_factory=list)
    suppressed_ids: List[str] = field(default_factory=list)

    def validate(self) -> List[str]:
        """Return a list of problems (empty if valid)."""
        problems: List[str] = []
        for name in ("event_weight", "complexity_weight",
                     "timer_weight", "spawner_weight"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must be non-negative")
        if len(self.load_thresholds) != 3:
            problems.append("load_thresholds needs exactly three values")
        elif list(self.load_thresholds) != sorted(self.load_thresholds):
            problems.append("load_thresholds must be ascending")
        for name in ("complexity_hint_threshold", "timer_hint_threshold",
                     "spawner_hint_threshold", "event_hint_threshold",
                     "shared_cooldown_threshold"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must be non-negative")
        return problems

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalyzerConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"unknown configuration key(s): {', '.join(unknown)}"
            )

        kwargs: Dict[str, Any] = dict(data)
        if "load_thresholds" in kwargs:
            try:
                kwargs["load_thresholds"] = tuple(
                    float(v) for v in kwargs["load_thresholds"]
                )
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"invalid load_thresholds: {exc}") from exc
        if "state_names" in kwargs:
            try:
                kwargs["state_names"] = {
                    int(k): str(v) for k, v in kwargs["state_names"].items()
                }
            except (AttributeError, ValueError) as exc:
                raise ConfigError(f"invalid state_names: {exc}") from exc

        try:
            config = cls(**kwargs)
            problems = config.validate()
        except TypeError as exc:
            raise ConfigError(f"invalid configuration value: {exc}") from exc
        if problems:
            raise ConfigError("; ".join(problems))
        return config


def load_config(path: Union[str, Path]) -> AnalyzerConfig:
    """Read an :class:`AnalyzerConfig` from a JSON file."""
    p = Path(path)
    logger.debug("loading analyzer config from %s", p)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read config {p}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config {p} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {p} must contain a JSON object")
    return AnalyzerConfig.from_dict(data)


__all__ = ["AnalyzerConfig", "DEFAULT_STATE_NAMES", "load_config"]
