from __future__ import annotations

from datetime import date

import pytest

from backend.app.insights.comparison import (
    TrendClassification,
    average_mood,
    classify_trend,
    compare_periods,
    percent_change,
)


def test_average_is_rounded_and_zero_when_empty(make_entry) -> None:
    entries = [make_entry(date(2025, 3, day), value) for day, value in ((1, 1), (2, 2), (3, 2))]

    assert average_mood(entries) == pytest.approx(1.67)
    assert average_mood([]) == 0.0


def test_average_skips_out_of_range_values(make_entry) -> None:
    entries = [make_entry(date(2025, 3, 1), 4), make_entry(date(2025, 3, 2), 40)]

    assert average_mood(entries) == 4.0


def test_zero_previous_average_gives_zero_change() -> None:
    assert percent_change(3.0, 0.0) == 0
    assert percent_change(0.0, 0.0) == 0


def test_percent_change_uses_previous_as_base() -> None:
    assert percent_change(3.0, 2.0) == 50
    assert percent_change(1.0, 2.0) == -50


def test_compare_periods(make_entry) -> None:
    current = [make_entry(date(2025, 3, 1), 1), make_entry(date(2025, 3, 2), 1)]
    previous = [make_entry(date(2025, 2, 1), 3), make_entry(date(2025, 2, 2), 2)]

    comparison = compare_periods(current, previous)

    assert comparison.current_avg == 1.0
    assert comparison.previous_avg == 2.5
    assert comparison.percent_change == -60
    assert comparison.delta == -1.5


@pytest.mark.parametrize(
    ("current", "previous", "expected"),
    [
        (1.0, 2.0, TrendClassification.IMPROVING),
        (3.0, 2.0, TrendClassification.DECLINING),
        (2.4, 2.0, TrendClassification.STABLE),
        (2.5, 2.0, TrendClassification.STABLE),
        (1.5, 2.0, TrendClassification.STABLE),
        (0.0, 0.0, TrendClassification.STABLE),
    ],
)
def test_lower_average_means_improving(current: float, previous: float, expected) -> None:
    assert classify_trend(current, previous) is expected


def test_average_skips_entries_without_a_date(make_entry) -> None:
    entries = [make_entry(date(2025, 3, 1), 0), make_entry(None, 4)]

    assert average_mood(entries) == 0.0
    assert compare_periods(entries, [make_entry(None, 2)]).previous_avg == 0.0
