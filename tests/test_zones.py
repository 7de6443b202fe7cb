"""
Unit tests for heart-rate zones and reading summaries.
Run with:  pytest tests/
"""

from __future__ import annotations

import pytest

from rppg_monitor.zones import (
    ReadingSummary,
    ReadingTrend,
    health_insight,
    heart_rate_zone,
    reading_trend,
    summarize_readings,
)


class TestHeartRateZone:

    @pytest.mark.parametrize(
        "bpm, zone",
        [
            (45, "Resting"), (59, "Resting"),
            (60, "Normal"), (99, "Normal"),
            (100, "Elevated"), (139, "Elevated"),
            (140, "High"), (169, "High"),
            (170, "Max"), (180, "Max"),
        ],
    )
    def test_boundaries(self, bpm, zone):
        assert heart_rate_zone(bpm).zone == zone

    def test_colour_and_description(self):
        normal = heart_rate_zone(72)
        assert normal.color == "green"
        assert normal.description == "Healthy resting heart rate"


class TestSummaries:

    def test_empty(self):
        assert summarize_readings([]) == ReadingSummary(0, 0, 0, 0)

    def test_basic(self):
        assert summarize_readings([70, 80, 91]) == ReadingSummary(80, 70, 91, 3)

    def test_average_rounds_half_up(self):
        assert summarize_readings([70, 71]).average == 71


class TestTrend:

    def test_too_few_readings_is_stable(self):
        assert reading_trend([90, 60, 60]) == ReadingTrend("stable", 0)

    def test_upward(self):
        # newest first: recent half averages 90, older half 60
        assert reading_trend([90, 90, 60, 60]) == ReadingTrend("up", 50)

    def test_downward(self):
        assert reading_trend([60, 60, 80, 80]) == ReadingTrend("down", 25)

    def test_small_change_is_stable(self):
        assert reading_trend([72, 71, 70, 70]) == ReadingTrend("stable", 0)


class TestHealthInsight:

    def test_no_readings(self):
        text = health_insight(ReadingSummary(0, 0, 0, 0), ReadingTrend("stable", 0))
        assert text == "Keep measuring to get personalized insights."

    def test_optimal_range(self):
        text = health_insight(ReadingSummary(70, 65, 75, 4), ReadingTrend("stable", 0))
        assert "optimal resting range" in text

    def test_elevated_with_upward_trend(self):
        text = health_insight(ReadingSummary(110, 100, 120, 6), ReadingTrend("up", 15))
        assert "elevated" in text
        assert "trending upward" in text

    def test_downward_trend_note(self):
        text = health_insight(ReadingSummary(58, 50, 65, 6), ReadingTrend("down", 8))
        assert "below average" in text
        assert "trending lower" in text
