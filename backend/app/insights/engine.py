from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol

from ..metrics import SNAPSHOT_BUILDS, SNAPSHOT_LATENCY
from .comparison import MonthlyComparison, TrendClassification, classify_trend, compare_periods
from .distribution import MoodDistribution, calculate_distribution
from .entries import DateRange, MoodEntry
from .factors import MoodFactor, rank_factors
from .streak import StreakInfo, calculate_streaks
from .trend import TREND_WINDOW_DAYS, WeeklyTrendPoint, calculate_weekly_trend

logger = logging.getLogger(__name__)

PERIOD_CURRENT_MONTH = "current_month"
PERIOD_PREVIOUS_MONTH = "previous_month"
PERIOD_YEAR_TO_DATE = "year_to_date"
PERIOD_RECENT = "recent"


class InsightsError(Exception):
    """Base error raised by the analytics engine."""


class DataFetchError(InsightsError):
    """Retrieving mood entries failed, so no snapshot can be produced."""

    def __init__(self, period: str, reason: str) -> None:
        super().__init__(f"failed to fetch {period} entries: {reason}")
        self.period = period
        self.reason = reason


class MoodRecordStore(Protocol):
    async def fetch_entries(
        self,
        user_id: int,
        date_range: DateRange | None = None,
    ) -> Sequence[MoodEntry]: ...


@dataclass(frozen=True)
class MoodSnapshot:
    """Every derived statistic for one user and reference date."""

    reference_date: date
    distribution: tuple[MoodDistribution, ...]
    weekly_trend: tuple[WeeklyTrendPoint, ...]
    factors: tuple[MoodFactor, ...]
    streak: StreakInfo
    comparison: MonthlyComparison
    average_mood: float
    trend_classification: TrendClassification


def snapshot_periods(
    reference_date: date,
    *,
    recent_days: int = TREND_WINDOW_DAYS,
) -> dict[str, DateRange]:
    return {
        PERIOD_CURRENT_MONTH: DateRange.month_of(reference_date),
        PERIOD_PREVIOUS_MONTH: DateRange.previous_month_of(reference_date),
        PERIOD_YEAR_TO_DATE: DateRange.year_to_date(reference_date),
        PERIOD_RECENT: DateRange.trailing(reference_date, recent_days),
    }


def build_snapshot(
    current_month: Sequence[MoodEntry],
    previous_month: Sequence[MoodEntry],
    year_to_date: Sequence[MoodEntry],
    recent: Sequence[MoodEntry],
    *,
    reference_date: date,
    trend_window: int = TREND_WINDOW_DAYS,
) -> MoodSnapshot:
    """Assemble a snapshot from already fetched entries.

    Distribution, factors and the overall average describe the current month,
    the weekly trend uses the recent window, streaks use the year to date.
    """

    comparison = compare_periods(current_month, previous_month)
    return MoodSnapshot(
        reference_date=reference_date,
        distribution=calculate_distribution(current_month),
        weekly_trend=calculate_weekly_trend(recent, reference_date, window=trend_window),
        factors=rank_factors(current_month),
        streak=calculate_streaks(year_to_date),
        comparison=comparison,
        average_mood=comparison.current_avg,
        trend_classification=classify_trend(comparison.current_avg, comparison.previous_avg),
    )


class MoodInsightsEngine:
    """Fetch the four snapshot periods concurrently and build a snapshot."""

    def __init__(
        self,
        store: MoodRecordStore,
        *,
        settings: Any,
        clock: Callable[[], datetime] | None = None,
        fetch_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or datetime.now
        self._fetch_timeout = fetch_timeout or settings.analytics_fetch_timeout_sec

    async def snapshot(
        self,
        user_id: int,
        *,
        reference_date: date | None = None,
    ) -> MoodSnapshot:
        reference = reference_date or self._clock().date()
        periods = snapshot_periods(reference)
        started = time.perf_counter()
        try:
            fetched = await self._fetch_all(user_id, periods)
        except DataFetchError as exc:
            SNAPSHOT_BUILDS.labels(result="error").inc()
            logger.warning(
                "mood snapshot aborted",
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "reference_date": reference.isoformat(),
                        "period": exc.period,
                    }
                },
                exc_info=True,
            )
            raise

        snapshot = build_snapshot(
            fetched[PERIOD_CURRENT_MONTH],
            fetched[PERIOD_PREVIOUS_MONTH],
            fetched[PERIOD_YEAR_TO_DATE],
            fetched[PERIOD_RECENT],
            reference_date=reference,
        )
        SNAPSHOT_BUILDS.labels(result="ok").inc()
        SNAPSHOT_LATENCY.observe(time.perf_counter() - started)
        return snapshot

    async def _fetch_all(
        self,
        user_id: int,
        periods: dict[str, DateRange],
    ) -> dict[str, list[MoodEntry]]:
        # the task group cancels and awaits the remaining fetches on any failure
        try:
            async with asyncio.timeout(self._fetch_timeout):
                async with asyncio.TaskGroup() as group:
                    tasks = {
                        name: group.create_task(self._fetch(user_id, name, date_range))
                        for name, date_range in periods.items()
                    }
        except TimeoutError as exc:
            raise DataFetchError("all", f"timed out after {self._fetch_timeout}s") from exc
        except ExceptionGroup as group_error:
            for error in group_error.exceptions:
                if isinstance(error, DataFetchError):
                    raise error from error.__cause__
            raise DataFetchError("all", str(group_error)) from group_error
        return {name: task.result() for name, task in tasks.items()}

    async def _fetch(
        self,
        user_id: int,
        period: str,
        date_range: DateRange,
    ) -> list[MoodEntry]:
        try:
            entries = await self._store.fetch_entries(user_id, date_range)
        except Exception as exc:
            raise DataFetchError(period, str(exc) or exc.__class__.__name__) from exc
        return list(entries)


__all__ = [
    "DataFetchError",
    "InsightsError",
    "MoodInsightsEngine",
    "MoodRecordStore",
    "MoodSnapshot",
    "build_snapshot",
    "snapshot_periods",
]
