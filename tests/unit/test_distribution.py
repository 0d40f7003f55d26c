from __future__ import annotations

from datetime import date

from backend.app.insights.distribution import calculate_distribution


def test_distribution_covers_all_categories_in_order(make_entry) -> None:
    entries = [
        make_entry(date(2025, 3, 1), 0, tags=["運動"]),
        make_entry(date(2025, 3, 2), 4),
        make_entry(date(2025, 3, 3), 2, tags=["運動", "仕事"]),
    ]

    distribution = calculate_distribution(entries)

    assert [item.mood_value for item in distribution] == [0, 1, 2, 3, 4]
    assert [item.count for item in distribution] == [1, 0, 1, 0, 1]
    assert [item.percentage for item in distribution] == [33, 0, 33, 0, 33]


def test_distribution_ignores_out_of_range_values(make_entry) -> None:
    entries = [
        make_entry(date(2025, 3, 1), 1),
        make_entry(date(2025, 3, 2), 1),
        make_entry(date(2025, 3, 3), 7),
        make_entry(date(2025, 3, 4), -1),
        make_entry(date(2025, 3, 5), None),
    ]

    distribution = calculate_distribution(entries)

    assert sum(item.count for item in distribution) == 2
    assert distribution[1].count == 2
    assert distribution[1].percentage == 100


def test_distribution_empty_input_is_all_zero() -> None:
    distribution = calculate_distribution([])

    assert len(distribution) == 5
    assert all(item.count == 0 and item.percentage == 0 for item in distribution)


def test_distribution_percentages_round_half_up(make_entry) -> None:
    entries = [make_entry(date(2025, 3, day), 0) for day in range(1, 8)]
    entries.append(make_entry(date(2025, 3, 8), 3))

    distribution = calculate_distribution(entries)

    # 1/8 is 12.5 and 7/8 is 87.5
    assert distribution[3].percentage == 13
    assert distribution[0].percentage == 88
    assert 99 <= sum(item.percentage for item in distribution) <= 101


def test_distribution_skips_entries_without_a_date(make_entry) -> None:
    entries = [make_entry(date(2025, 3, 1), 0), make_entry(None, 4)]

    distribution = calculate_distribution(entries)

    assert [item.count for item in distribution] == [1, 0, 0, 0, 0]
    assert [item.percentage for item in distribution] == [100, 0, 0, 0, 0]
