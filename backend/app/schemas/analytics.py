from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..insights import MoodSnapshot, TrendClassification


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MoodDistributionItem(_CamelModel):
    mood_value: int
    count: int
    percentage: int


class WeeklyTrendItem(_CamelModel):
    day: str
    date: date
    score: int
    mood_value: int | None = None


class MoodFactorItem(_CamelModel):
    tag: str
    impact_percent: int


class StreakItem(_CamelModel):
    current_streak: int
    longest_streak: int
    last_entry_date: datetime | None = None


class MonthlyComparisonItem(_CamelModel):
    current_avg: float
    previous_avg: float
    percent_change: int
    delta: float


class MoodSnapshotResponse(_CamelModel):
    reference_date: date
    distribution: list[MoodDistributionItem]
    weekly_trend: list[WeeklyTrendItem]
    factors: list[MoodFactorItem]
    streak: StreakItem
    comparison: MonthlyComparisonItem
    average_mood: float
    trend_classification: TrendClassification
    cached: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: MoodSnapshot, *, cached: bool = False) -> MoodSnapshotResponse:
        return cls(
            reference_date=snapshot.reference_date,
            distribution=[
                MoodDistributionItem.model_validate(item) for item in snapshot.distribution
            ],
            weekly_trend=[WeeklyTrendItem.model_validate(item) for item in snapshot.weekly_trend],
            factors=[MoodFactorItem.model_validate(item) for item in snapshot.factors],
            streak=StreakItem.model_validate(snapshot.streak),
            comparison=MonthlyComparisonItem.model_validate(snapshot.comparison),
            average_mood=snapshot.average_mood,
            trend_classification=snapshot.trend_classification,
            cached=cached,
        )


__all__ = [
    "MonthlyComparisonItem",
    "MoodDistributionItem",
    "MoodFactorItem",
    "MoodSnapshotResponse",
    "StreakItem",
    "WeeklyTrendItem",
]
