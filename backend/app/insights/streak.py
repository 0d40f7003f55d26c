from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from itertools import pairwise

from .entries import MoodEntry


@dataclass(frozen=True)
class StreakInfo:
    current_streak: int
    longest_streak: int
    last_entry_date: datetime | None


EMPTY_STREAK = StreakInfo(current_streak=0, longest_streak=0, last_entry_date=None)


def _gap(newer: date, older: date) -> int:
    return (newer - older).days


def calculate_streaks(entries: Iterable[MoodEntry]) -> StreakInfo:
    """Compute current and longest runs of consecutive recorded days.

    The current streak is anchored at the newest recorded day, not at today.
    Several entries on the same day count as a single day.
    """

    ordered = sorted(
        (entry for entry in entries if entry.is_valid),
        key=lambda entry: entry.day,  # type: ignore[arg-type, return-value]
        reverse=True,
    )
    if not ordered:
        return EMPTY_STREAK

    days: list[date] = [entry.day for entry in ordered]  # type: ignore[misc]

    current = 1
    for newer, older in pairwise(days):
        gap = _gap(newer, older)
        if gap == 0:
            continue
        if gap != 1:
            break
        current += 1

    longest = 1
    running = 1
    for newer, older in pairwise(days):
        gap = _gap(newer, older)
        if gap == 0:
            continue
        if gap == 1:
            running += 1
            longest = max(longest, running)
        else:
            running = 1

    return StreakInfo(
        current_streak=current,
        longest_streak=longest,
        last_entry_date=ordered[0].date,
    )


__all__ = ["EMPTY_STREAK", "StreakInfo", "calculate_streaks"]
