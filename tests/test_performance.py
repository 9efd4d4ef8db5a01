# tests/test_performance.py
"""
Tests for the performance estimate and its recommendations.
"""

import pytest

from mmscript.config import AnalyzerConfig
from mmscript.performance import (
    LoadLevel,
    PerformanceMetrics,
    analyze_performance,
    classify_load,
    performance_recommendations,
)


def _events(n):
    return "\n".join(f"E{i}::" for i in range(n))


class TestCounters:

    def test_empty_script(self):
        m = analyze_performance("")
        assert m == PerformanceMetrics()
        assert m.estimated_load is LoadLevel.LOW

    def test_counts(self):
        text = "\n".join([
            "timer Wave=30,5,10,SpawnWave",
            "timer Other=10,1,2,Tick",
            "when(a==1 and b==2 or c==3)[Start]",
            "Start::",
            "addrandomspawn:CreatureSlug_C,10,20;",
            "spawncap:CreatureSlug_C,1,3;",
            "if(x==1)[Stop]",
            "Stop::",
            "Stop::;",
        ])
        m = analyze_performance(text)
        assert m.event_count == 2
        assert m.timer_count == 2
        assert m.spawner_count == 2
        assert m.condition_complexity == 3
        assert m.score == 2 * 1 + 3 * 0.5 + 2 * 2 + 2 * 3

    def test_invocations_are_not_events(self):
        assert analyze_performance("A::\nB::;\n").event_count == 1

    def test_repeated_timer_declarations_each_count(self):
        text = "timer T=10,1,2,Tick\ntimer T=20,1,2,Tick\n"
        assert analyze_performance(text).timer_count == 2

    def test_when_without_target_counts(self):
        m = analyze_performance("when(a==1 and b==2)\nwhen(c==3)[Go]\n")
        assert m.condition_complexity == 3


class TestLoadThresholds:

    @pytest.mark.parametrize("events,level", [
        (19, LoadLevel.LOW),
        (20, LoadLevel.MEDIUM),
        (49, LoadLevel.MEDIUM),
        (50, LoadLevel.HIGH),
        (99, LoadLevel.HIGH),
        (100, LoadLevel.CRITICAL),
    ])
    def test_boundaries(self, events, level):
        m = analyze_performance(_events(events))
        assert m.score == events
        assert m.estimated_load is level

    def test_configured_thresholds(self):
        config = AnalyzerConfig(load_thresholds=(5.0, 10.0, 15.0))
        assert classify_load(4.9, config) is LoadLevel.LOW
        assert classify_load(15.0, config) is LoadLevel.CRITICAL

    def test_configured_weights(self):
        config = AnalyzerConfig(event_weight=2.0)
        assert analyze_performance(_events(10), config).score == 20.0


class TestRecommendations:

    def test_none_for_small_script(self):
        assert performance_recommendations(PerformanceMetrics()) == []

    @pytest.mark.parametrize("metrics,needle", [
        (PerformanceMetrics(condition_complexity=51), "Complex conditions"),
        (PerformanceMetrics(timer_count=11), "High timer count"),
        (PerformanceMetrics(spawner_count=6), "Multiple spawners"),
        (PerformanceMetrics(event_count=101), "Large number of events"),
    ])
    def test_each_counter(self, metrics, needle):
        hints = performance_recommendations(metrics)
        assert len(hints) == 1
        assert needle in hints[0]

    def test_thresholds_are_exclusive(self):
        m = PerformanceMetrics(condition_complexity=50, timer_count=10,
                               spawner_count=5, event_count=100)
        assert performance_recommendations(m) == []

    def test_independent_of_load(self):
        m = PerformanceMetrics(timer_count=11, estimated_load=LoadLevel.LOW)
        assert performance_recommendations(m)
