"""Mood analytics: per-period calculators and the snapshot engine."""

from .cache import SnapshotCache
from .comparison import MonthlyComparison, TrendClassification
from .distribution import MoodDistribution
from .engine import (
    DataFetchError,
    InsightsError,
    MoodInsightsEngine,
    MoodSnapshot,
    build_snapshot,
    snapshot_periods,
)
from .entries import DateRange, MoodEntry
from .factors import MoodFactor
from .streak import StreakInfo
from .trend import WeeklyTrendPoint

__all__ = [
    "DataFetchError",
    "DateRange",
    "InsightsError",
    "MonthlyComparison",
    "MoodDistribution",
    "MoodEntry",
    "MoodFactor",
    "MoodInsightsEngine",
    "MoodSnapshot",
    "SnapshotCache",
    "StreakInfo",
    "TrendClassification",
    "WeeklyTrendPoint",
    "build_snapshot",
    "snapshot_periods",
]
