from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from .entries import MoodEntry, round_half_up

TOP_FACTORS = 5


@dataclass(frozen=True)
class MoodFactor:
    tag: str
    impact_percent: int


def rank_factors(entries: Iterable[MoodEntry], *, limit: int = TOP_FACTORS) -> tuple[MoodFactor, ...]:
    """Rank tags by their share of all tag occurrences.

    A tag counts once per entry even if repeated inside it, while the
    denominator is the sum of the non-blank tag list sizes. Ties keep
    first-seen order.
    """

    tag_counts: Counter[str] = Counter()
    total_occurrences = 0
    for entry in entries:
        tags = [tag.strip() for tag in entry.tags if tag.strip()]
        total_occurrences += len(tags)
        tag_counts.update(dict.fromkeys(tags, 1))

    denominator = max(total_occurrences, 1)
    factors = [
        MoodFactor(tag=tag, impact_percent=round_half_up(count / denominator * 100))
        for tag, count in tag_counts.items()
    ]
    factors.sort(key=lambda factor: factor.impact_percent, reverse=True)
    return tuple(factors[:limit])


__all__ = ["MoodFactor", "TOP_FACTORS", "rank_factors"]
