from __future__ import annotations

from datetime import date, datetime

import pytest

from backend.app.insights.trend import calculate_weekly_trend, mood_score

REFERENCE = date(2025, 3, 16)  # a Sunday


def test_trend_always_has_seven_points_for_empty_input() -> None:
    points = calculate_weekly_trend([], REFERENCE)

    assert len(points) == 7
    assert all(point.score == 0 and point.mood_value is None for point in points)
    assert points[0].date == date(2025, 3, 10)
    assert points[-1].date == REFERENCE


def test_trend_labels_follow_weekdays() -> None:
    points = calculate_weekly_trend([], date(2025, 3, 12))

    assert [point.day for point in points] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]


@pytest.mark.parametrize(
    ("mood_value", "score"),
    [(0, 100), (1, 80), (2, 60), (3, 40), (4, 20)],
)
def test_mood_score_mapping(mood_value: int, score: int) -> None:
    assert mood_score(mood_value) == score


def test_trend_places_entries_on_their_days(make_entry) -> None:
    entries = [
        make_entry(date(2025, 3, 16), 0),
        make_entry(date(2025, 3, 14), 3),
        make_entry(date(2025, 3, 1), 1),
    ]

    points = calculate_weekly_trend(entries, REFERENCE)

    assert [point.score for point in points] == [0, 0, 0, 0, 40, 0, 100]
    assert points[4].mood_value == 3
    assert points[6].mood_value == 0


def test_trend_uses_first_entry_for_duplicate_day(make_entry) -> None:
    entries = [
        make_entry(datetime(2025, 3, 16, 20, 0), 4),
        make_entry(datetime(2025, 3, 16, 8, 0), 0),
    ]

    points = calculate_weekly_trend(entries, REFERENCE)

    assert points[-1].mood_value == 4
    assert points[-1].score == 20


def test_trend_skips_malformed_entries(make_entry) -> None:
    entries = [
        make_entry(None, 1),
        make_entry(date(2025, 3, 15), 9),
        make_entry(date(2025, 3, 15), 2),
    ]

    points = calculate_weekly_trend(entries, REFERENCE)

    assert len(points) == 7
    assert points[5].mood_value == 2
    assert points[5].score == 60
