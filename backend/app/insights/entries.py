from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any

MOOD_MIN = 0
MOOD_MAX = 4
MOOD_CATEGORIES = tuple(range(MOOD_MIN, MOOD_MAX + 1))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""

    return math.floor(value + 0.5)


def is_valid_mood(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MOOD_MIN <= value <= MOOD_MAX


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _parse_mood_value(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _parse_tags(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return ()
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, Mapping)):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class MoodEntry:
    """A single mood observation as seen by the analytics calculators.

    ``date`` keeps the original timestamp; ``day`` is its calendar day. Entries
    whose timestamp or mood value could not be parsed carry ``None`` in that
    field and are skipped by calculators that need it.
    """

    id: str | None
    date: datetime | None
    mood_value: int | None
    note: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def day(self) -> date | None:
        return self.date.date() if self.date is not None else None

    @property
    def has_valid_mood(self) -> bool:
        return is_valid_mood(self.mood_value)

    @property
    def is_valid(self) -> bool:
        return self.date is not None and self.has_valid_mood

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> MoodEntry:
        raw_mood = payload.get("moodValue")
        if raw_mood is None:
            raw_mood = payload.get("mood_value")
        raw_id = payload.get("id")
        note = payload.get("note")
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            date=_parse_timestamp(payload.get("date")),
            mood_value=_parse_mood_value(raw_mood),
            note=note if isinstance(note, str) else None,
            tags=_parse_tags(payload.get("tags")),
        )

    @classmethod
    def from_record(cls, record: Any) -> MoodEntry:
        return cls(
            id=str(record.id),
            date=record.recorded_at,
            mood_value=record.mood_value,
            note=record.note,
            tags=_parse_tags(record.tags),
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("date range end precedes start")

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end

    @classmethod
    def month_of(cls, value: date) -> DateRange:
        start = value.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return cls(start, next_month - timedelta(days=1))

    @classmethod
    def previous_month_of(cls, value: date) -> DateRange:
        last_of_previous = value.replace(day=1) - timedelta(days=1)
        return cls.month_of(last_of_previous)

    @classmethod
    def year_to_date(cls, value: date) -> DateRange:
        return cls(value.replace(month=1, day=1), value)

    @classmethod
    def trailing(cls, value: date, days: int) -> DateRange:
        if days < 1:
            raise ValueError("days must be positive")
        return cls(value - timedelta(days=days - 1), value)


__all__ = [
    "DateRange",
    "MOOD_CATEGORIES",
    "MOOD_MAX",
    "MOOD_MIN",
    "MoodEntry",
    "is_valid_mood",
    "round_half_up",
]
