from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .entries import MoodEntry, round_half_up

# Mood values are inverted (0 is the best mood), so a falling average is an
# improvement. The threshold applies to the raw difference of the averages.
TREND_THRESHOLD = 0.5


class TrendClassification(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class MonthlyComparison:
    current_avg: float
    previous_avg: float
    percent_change: int

    @property
    def delta(self) -> float:
        return round(self.current_avg - self.previous_avg, 2)


def average_mood(entries: Iterable[MoodEntry]) -> float:
    values = [entry.mood_value for entry in entries if entry.is_valid]
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)  # type: ignore[arg-type]


def percent_change(current: float, previous: float) -> int:
    if previous <= 0:
        return 0
    return round_half_up((current - previous) / previous * 100)


def classify_trend(current: float, previous: float) -> TrendClassification:
    delta = current - previous
    if delta < -TREND_THRESHOLD:
        return TrendClassification.IMPROVING
    if delta > TREND_THRESHOLD:
        return TrendClassification.DECLINING
    return TrendClassification.STABLE


def compare_periods(
    current: Iterable[MoodEntry],
    previous: Iterable[MoodEntry],
) -> MonthlyComparison:
    current_avg = average_mood(current)
    previous_avg = average_mood(previous)
    return MonthlyComparison(
        current_avg=current_avg,
        previous_avg=previous_avg,
        percent_change=percent_change(current_avg, previous_avg),
    )


__all__ = [
    "MonthlyComparison",
    "TREND_THRESHOLD",
    "TrendClassification",
    "average_mood",
    "classify_trend",
    "compare_periods",
    "percent_change",
]
