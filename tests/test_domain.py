import pytest

from fleetdash.models.domain import DistanceRange, TimeSeriesPoint


@pytest.mark.parametrize(
    "label,expected",
    [
        ("0-100Km", DistanceRange.KM_0_100),
        (" 101 - 250 km ", DistanceRange.KM_101_250),
        ("401-600", DistanceRange.KM_401_600),
        ("DuplicateIndent", DistanceRange.DUPLICATE_INDENT),
        ("Duplicate Indents", DistanceRange.DUPLICATE_INDENT),
        ("700-900Km", DistanceRange.OTHER),
        ("", None),
        (None, None),
    ],
)
def test_from_label(label, expected):
    assert DistanceRange.from_label(label) is expected


def test_only_distance_bands_are_rated():
    assert [member for member in DistanceRange if member.is_rated] == [
        DistanceRange.KM_0_100,
        DistanceRange.KM_101_250,
        DistanceRange.KM_251_400,
        DistanceRange.KM_401_600,
    ]
    assert DistanceRange.OTHER.order < DistanceRange.DUPLICATE_INDENT.order


def test_time_series_point_metrics_are_read_only():
    source = {"revenue": 1.0}
    point = TimeSeriesPoint("2025-03", source)
    source["revenue"] = 5.0

    assert point.metrics["revenue"] == 1.0
    with pytest.raises(TypeError):
        point.metrics["revenue"] = 2.0
