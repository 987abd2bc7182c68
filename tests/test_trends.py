from datetime import date, datetime

import pytest

from fleetdash.models.domain import DistanceRange, MetricSample, TripRow
from fleetdash.services.scope import for_month, normalize
from fleetdash.services.trends import (
    Granularity,
    MetricSeries,
    build_trend,
    date_key,
    parse_sample_date,
    trend_from_rows,
)


def _trip(trip_id: str, when, distance_range=DistanceRange.KM_0_100, **values) -> TripRow:
    return TripRow(trip_id=trip_id, distance_range=distance_range, trip_date=when, **values)


def test_month_labels_sort_chronologically():
    series = MetricSeries(
        "revenue",
        [MetricSample("Feb'25", 2), MetricSample("Jan'25", 1), MetricSample("Mar'25", 3)],
    )

    points = build_trend([series], Granularity.MONTHLY)

    assert [point.date_key for point in points] == ["2025-01", "2025-02", "2025-03"]
    assert [point.metrics["revenue"] for point in points] == [1, 2, 3]


def test_merged_keys_are_the_union_of_every_metric():
    revenue = MetricSeries("revenue", [MetricSample(date(2025, 3, 1), 10), MetricSample(date(2025, 3, 2), 20)])
    cost = MetricSeries("cost", [MetricSample(date(2025, 3, 2), 5), MetricSample(date(2025, 3, 4), 7)])

    points = build_trend([revenue, cost], "daily")

    assert [point.date_key for point in points] == ["2025-03-01", "2025-03-02", "2025-03-04"]
    assert dict(points[0].metrics) == {"revenue": 10, "cost": 0.0}
    assert dict(points[2].metrics) == {"revenue": 0.0, "cost": 7}


def test_weekly_keys_start_on_monday():
    assert date_key(date(2025, 3, 9), Granularity.WEEKLY) == "2025-03-03"
    assert date_key(date(2025, 3, 3), Granularity.WEEKLY) == "2025-03-03"
    assert date_key(date(2025, 3, 9), Granularity.MONTHLY) == "2025-03"


def test_mean_reducer_averages_within_a_bucket():
    series = MetricSeries(
        "fulfillment",
        [MetricSample("2025-03-01", 50), MetricSample("2025-03-20", 100)],
        reducer="mean",
    )

    points = build_trend([series], "monthly")

    assert points[0].metrics["fulfillment"] == 75


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Mar'25", date(2025, 3, 1)),
        ("Mar-25", date(2025, 3, 1)),
        ("0ct'24", date(2024, 10, 1)),
        ("September 2024", date(2024, 9, 1)),
        ("2025-03", date(2025, 3, 1)),
        ("2025-03-17", date(2025, 3, 17)),
        ("2025-03-17T10:30:00", date(2025, 3, 17)),
        ("not a date", None),
    ],
)
def test_parse_sample_date(label, expected):
    assert parse_sample_date(label) == expected


def test_unparseable_samples_are_skipped(caplog):
    series = MetricSeries("revenue", [MetricSample("??", 5), MetricSample("2025-03-01", 1)])

    points = build_trend([series], "daily")

    assert len(points) == 1
    assert "Skipped 1 trend samples" in caplog.text


def test_scope_filters_samples_and_keeps_overlapping_months():
    series = MetricSeries(
        "revenue",
        [MetricSample("2025-02-28", 1), MetricSample("2025-03-15", 2), MetricSample("Mar'25", 3)],
    )

    points = build_trend([series], "monthly", normalize(date(2025, 3, 10), date(2025, 3, 20)))

    assert [point.date_key for point in points] == ["2025-03"]
    assert points[0].metrics["revenue"] == 5


def test_trend_from_rows_prices_billable_rows_only():
    rows = [
        _trip("A", datetime(2025, 3, 1, 8), bucket_count=10, cost=100),
        _trip("B", datetime(2025, 3, 1, 9), distance_range=DistanceRange.OTHER, bucket_count=10, cost=40),
        _trip("C", datetime(2025, 4, 2, 9), bucket_count=1, cost=30, is_duplicate=True),
        _trip("D", None, bucket_count=1, cost=30),
    ]

    points = trend_from_rows(rows, "monthly", metrics=("revenue", "cost", "indents"))

    assert [point.date_key for point in points] == ["2025-03", "2025-04"]
    assert dict(points[0].metrics) == {"revenue": 210, "cost": 100, "indents": 2}
    assert dict(points[1].metrics) == {"revenue": 0.0, "cost": 0.0, "indents": 1}


def test_trend_from_rows_respects_scope():
    rows = [
        _trip("A", datetime(2025, 3, 1, 8), load_kg=10),
        _trip("B", datetime(2025, 4, 1, 8), load_kg=20),
    ]

    points = trend_from_rows(rows, "daily", for_month(2025, 4), metrics=("load",))

    assert [(point.date_key, point.metrics["load"]) for point in points] == [("2025-04-01", 20)]


def test_unknown_metric_is_rejected():
    with pytest.raises(ValueError):
        trend_from_rows([], "daily", metrics=("margin",))


def test_month_labels_stay_in_their_month_for_weekly_and_daily_trends():
    series = MetricSeries("revenue", [MetricSample("Jan'25", 4), MetricSample(date(2025, 1, 8), 1)])

    weekly = build_trend([series], Granularity.WEEKLY)
    daily = build_trend([series], Granularity.DAILY)

    assert [point.date_key for point in weekly] == ["2025-01-01", "2025-01-06"]
    assert [point.date_key for point in daily] == ["2025-01-01", "2025-01-08"]
