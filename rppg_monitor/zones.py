"""
Interpretation helpers for heart-rate readings.

Pure functions over plain BPM values; storing and fetching readings is the
caller's business.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rppg_monitor.results import round_bpm


@dataclass(frozen=True)
class HeartRateZone:
    zone: str
    color: str
    description: str


@dataclass(frozen=True)
class ReadingSummary:
    average: int
    minimum: int
    maximum: int
    count: int


@dataclass(frozen=True)
class ReadingTrend:
    direction: str  # "up", "down" or "stable"
    change: int     # absolute percentage change


# Upper bound (exclusive) → zone
_ZONES = (
    (60, HeartRateZone("Resting", "blue", "Below normal resting rate")),
    (100, HeartRateZone("Normal", "green", "Healthy resting heart rate")),
    (140, HeartRateZone("Elevated", "yellow", "Moderate activity or stress")),
    (170, HeartRateZone("High", "orange", "Vigorous activity")),
)
_MAX_ZONE = HeartRateZone("Max", "red", "Maximum effort zone")


def heart_rate_zone(bpm: float) -> HeartRateZone:
    for upper, zone in _ZONES:
        if bpm < upper:
            return zone
    return _MAX_ZONE


def summarize_readings(bpms: Sequence[int]) -> ReadingSummary:
    """Rounded average, minimum and maximum; all zero for no readings."""
    if not bpms:
        return ReadingSummary(0, 0, 0, 0)
    return ReadingSummary(
        average=round_bpm(sum(bpms) / len(bpms)),
        minimum=min(bpms),
        maximum=max(bpms),
        count=len(bpms),
    )


def reading_trend(bpms: Sequence[int], stable_band: int = 5) -> ReadingTrend:
    """
    Compare the newer half of *bpms* against the older half.

    *bpms* is ordered newest first.  Fewer than four readings, or a change
    smaller than *stable_band* percent, counts as stable.
    """
    if len(bpms) < 4:
        return ReadingTrend("stable", 0)

    mid = len(bpms) // 2
    recent = bpms[:mid]
    older = bpms[mid:]
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    if older_avg == 0:
        return ReadingTrend("stable", 0)

    change = round_bpm((recent_avg - older_avg) / older_avg * 100.0)
    if abs(change) < stable_band:
        return ReadingTrend("stable", 0)
    return ReadingTrend("up" if change > 0 else "down", abs(change))


def health_insight(summary: ReadingSummary, trend: ReadingTrend) -> str:
    avg = summary.average
    if avg == 0:
        return "Keep measuring to get personalized insights."

    if avg < 60:
        insight = (
            "Your resting heart rate is below average. This could indicate excellent "
            "cardiovascular fitness, or consult a healthcare provider if you feel symptoms."
        )
    elif avg <= 80:
        insight = (
            "Your heart rate is within the optimal resting range. "
            "This indicates good cardiovascular health."
        )
    elif avg <= 100:
        insight = (
            "Your heart rate is on the higher end of normal. "
            "Regular exercise and stress management can help lower it."
        )
    else:
        insight = (
            "Your average heart rate is elevated. Consider consulting a healthcare "
            "provider and focusing on relaxation techniques."
        )

    if trend.direction == "down" and trend.change > 5:
        insight += " Your heart rate has been trending lower, which is generally positive."
    elif trend.direction == "up" and trend.change > 10:
        insight += " Your heart rate has been trending upward. Monitor for stress or other factors."
    return insight
