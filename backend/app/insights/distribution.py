from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from .entries import MOOD_CATEGORIES, MoodEntry, round_half_up


@dataclass(frozen=True)
class MoodDistribution:
    mood_value: int
    count: int
    percentage: int


def calculate_distribution(entries: Iterable[MoodEntry]) -> tuple[MoodDistribution, ...]:
    """Count entries per mood category, always returning all five categories.

    Entries without a parseable date or with an out-of-range mood value are
    left out of both the counts and the total.
    """

    counts = Counter(entry.mood_value for entry in entries if entry.is_valid)
    total = sum(counts.values())
    return tuple(
        MoodDistribution(
            mood_value=category,
            count=counts.get(category, 0),
            percentage=round_half_up(counts.get(category, 0) / total * 100) if total else 0,
        )
        for category in MOOD_CATEGORIES
    )


__all__ = ["MoodDistribution", "calculate_distribution"]
