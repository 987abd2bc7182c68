from datetime import date, datetime, time

import pytest

from fleetdash.models.domain import DateRangeScope
from fleetdash.services import scope as scope_service


@pytest.mark.parametrize(
    "start,end",
    [
        (datetime(2025, 3, 1, 13, 45, 12), datetime(2025, 3, 9, 2, 5)),
        (datetime(2025, 1, 31, 23, 59), datetime(2025, 2, 1, 0, 1)),
        (date(2025, 6, 1), date(2025, 6, 30)),
    ],
)
def test_normalize_clamps_to_whole_days(start, end):
    scope = scope_service.normalize(start, end)

    assert scope.start.time() == time(0, 0, 0)
    assert scope.end.time() == time(23, 59, 59, 999000)
    assert scope.start.date() == (start.date() if isinstance(start, datetime) else start)
    assert scope.end.date() == (end.date() if isinstance(end, datetime) else end)


def test_normalize_same_day_with_reversed_times_is_a_single_day():
    scope = scope_service.normalize(datetime(2025, 3, 5, 14, 0), datetime(2025, 3, 5, 9, 0))

    assert scope.start == datetime(2025, 3, 5, 0, 0, 0)
    assert scope.end == datetime(2025, 3, 5, 23, 59, 59, 999000)
    assert scope_service.contains(scope, datetime(2025, 3, 5, 12, 0))
    assert not scope_service.contains(scope, datetime(2025, 3, 6, 0, 0))


def test_normalize_swaps_reversed_days():
    scope = scope_service.normalize(date(2025, 3, 10), date(2025, 3, 1))

    assert scope.start.date() == date(2025, 3, 1)
    assert scope.end.date() == date(2025, 3, 10)


def test_normalize_keeps_missing_side_open():
    scope = scope_service.normalize(date(2025, 3, 1), None)

    assert scope.end is None
    assert not scope_service.is_active(scope)
    assert scope_service.contains(scope, datetime(2030, 1, 1))
    assert not scope_service.contains(scope, datetime(2025, 2, 28, 23, 59))


def test_for_month_covers_the_last_day():
    scope = scope_service.for_month(2024, 2)

    assert scope.start == datetime(2024, 2, 1)
    assert scope.end.date() == date(2024, 2, 29)
    assert scope_service.is_active(scope)


def test_for_month_rejects_invalid_month():
    with pytest.raises(ValueError):
        scope_service.for_month(2025, 13)


def test_clear_scope_matches_everything_including_undated_rows():
    scope = scope_service.clear()

    assert scope == DateRangeScope()
    assert scope_service.is_unbounded(scope)
    assert scope_service.contains(scope, None)
    assert not scope_service.contains(scope_service.for_month(2025, 3), None)


def test_contains_is_inclusive_at_both_ends():
    scope = scope_service.normalize(date(2025, 3, 1), date(2025, 3, 31))

    assert scope_service.contains(scope, datetime(2025, 3, 1, 0, 0))
    assert scope_service.contains(scope, datetime(2025, 3, 31, 23, 59, 59, 999000))
    assert scope_service.contains(scope, date(2025, 3, 31))


def test_overlaps_month():
    scope = scope_service.normalize(date(2025, 3, 20), date(2025, 4, 2))

    assert scope_service.overlaps_month(scope, 2025, 3)
    assert scope_service.overlaps_month(scope, 2025, 4)
    assert not scope_service.overlaps_month(scope, 2025, 5)


def test_scope_from_query_prefers_month():
    scope = scope_service.scope_from_query(date(2020, 1, 1), date(2020, 1, 2), "2025-03")

    assert scope == scope_service.for_month(2025, 3)
    assert scope_service.scope_from_query() == scope_service.clear()


def test_scope_from_query_rejects_bad_month():
    with pytest.raises(ValueError):
        scope_service.scope_from_query(month="March")
