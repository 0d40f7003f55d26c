from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from .entries import MOOD_MAX, MoodEntry

TREND_WINDOW_DAYS = 7
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class WeeklyTrendPoint:
    day: str
    date: date
    score: int
    mood_value: int | None = None


def mood_score(mood_value: int) -> int:
    """Map the inverted 0..4 scale onto 20..100, higher meaning a better mood."""

    return 20 + (MOOD_MAX - mood_value) * 20


def calculate_weekly_trend(
    entries: Iterable[MoodEntry],
    reference_date: date,
    *,
    window: int = TREND_WINDOW_DAYS,
) -> tuple[WeeklyTrendPoint, ...]:
    if window < 1:
        raise ValueError("window must be positive")

    first_day = reference_date - timedelta(days=window - 1)
    by_day: dict[date, int] = {}
    for entry in entries:
        if not entry.is_valid:
            continue
        day = entry.day
        if day is None or day < first_day or day > reference_date:
            continue
        # first entry wins when the store let a duplicate day through
        by_day.setdefault(day, entry.mood_value)  # type: ignore[arg-type]

    points = []
    for offset in range(window):
        current = first_day + timedelta(days=offset)
        value = by_day.get(current)
        points.append(
            WeeklyTrendPoint(
                day=WEEKDAY_LABELS[current.weekday()],
                date=current,
                score=mood_score(value) if value is not None else 0,
                mood_value=value,
            )
        )
    return tuple(points)


__all__ = [
    "TREND_WINDOW_DAYS",
    "WEEKDAY_LABELS",
    "WeeklyTrendPoint",
    "calculate_weekly_trend",
    "mood_score",
]
