from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook

from fleetdash.config import settings
from fleetdash.data import trips_repository
from fleetdash.data.trips_repository import TripSourceError, load_trip_rows, row_from_record, set_active_trips_file
from fleetdash.models.domain import DistanceRange


@pytest.fixture(autouse=True)
def clear_trip_cache(monkeypatch):
    monkeypatch.setattr(trips_repository, "fetch_table_rows", lambda table: None)
    load_trip_rows.cache_clear()
    yield
    load_trip_rows.cache_clear()


def _write_csv(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_load_csv_rows(tmp_path):
    source = _write_csv(
        tmp_path / "trips.csv",
        [
            "tripId,distanceRange,tripDate,bucketCount,barrelCount,totalCost,vehicleNumber,profitLoss",
            "T1,0-100Km,2025-03-05T10:00:00,100,2,\"1,500\",HR38AC7854,300",
            "T2,101-250Km,05-03-2025,10,0,200,,",
            "T3,,2025-03-05,5,0,10,,",
            "T4,Far Away,2025-03-06,1,0,0,,",
        ],
    )

    rows = load_trip_rows(source)

    assert [row.trip_id for row in rows] == ["T1", "T2", "T4"]
    assert rows[0].distance_range is DistanceRange.KM_0_100
    assert rows[0].cost == 1500
    assert rows[0].reported_profit_loss == 300
    assert rows[0].vehicle_number == "HR38AC7854"
    assert rows[1].trip_date == datetime(2025, 3, 5)
    assert rows[1].vehicle_number is None
    assert rows[2].distance_range is DistanceRange.OTHER


def test_load_xlsx_rows(tmp_path):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["trip_id", "distance_range", "trip_date", "bucket_count", "is_duplicate"])
    sheet.append(["T1", "251-400Km", datetime(2025, 2, 1, 9, 0), 12, "yes"])
    sheet.append(["T2", "401-600Km", None, 3, None])
    source = tmp_path / "trips.xlsx"
    workbook.save(source)

    rows = load_trip_rows(source)

    assert [row.distance_range for row in rows] == [DistanceRange.KM_251_400, DistanceRange.KM_401_600]
    assert rows[0].is_duplicate
    assert rows[0].bucket_count == 12
    assert rows[1].trip_date is None


def test_missing_required_columns(tmp_path):
    source = _write_csv(tmp_path / "trips.csv", ["tripId,bucketCount", "T1,1"])

    with pytest.raises(TripSourceError, match="distance_range"):
        load_trip_rows(source)


def test_invalid_number_is_a_source_error(tmp_path):
    source = _write_csv(tmp_path / "trips.csv", ["tripId,distanceRange,bucketCount", "T1,0-100Km,lots"])

    with pytest.raises(TripSourceError, match="record 1"):
        load_trip_rows(source)


def test_missing_and_unsupported_files(tmp_path):
    with pytest.raises(TripSourceError, match="not found"):
        load_trip_rows(tmp_path / "absent.csv")

    source = tmp_path / "trips.json"
    source.write_text("[]", encoding="utf-8")
    with pytest.raises(TripSourceError, match="Unsupported"):
        load_trip_rows(source)


def test_set_active_trips_file_refreshes_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "trips_file", tmp_path / "unused.csv")
    first = _write_csv(tmp_path / "first.csv", ["tripId,distanceRange", "A,0-100Km"])
    second = _write_csv(tmp_path / "second.csv", ["tripId,distanceRange", "B,0-100Km", "C,Other"])

    set_active_trips_file(first)
    assert len(load_trip_rows()) == 1

    set_active_trips_file(second)
    assert len(load_trip_rows()) == 2


def test_database_rows_win_over_file(tmp_path, monkeypatch):
    def _fetch(table):
        assert table == settings.supabase_trips_table
        return [{"trip_id": "DB1", "distance_range": "0-100Km"}, {"trip_id": "DB2", "distance_range": ""}]

    monkeypatch.setattr(trips_repository, "fetch_table_rows", _fetch)
    monkeypatch.setattr(settings, "trips_file", tmp_path / "absent.csv")

    rows = load_trip_rows()

    assert [row.trip_id for row in rows] == ["DB1"]


def test_database_failure_falls_back_to_file(tmp_path, monkeypatch):
    def _fetch(table):
        raise ConnectionError("network down")

    monkeypatch.setattr(trips_repository, "fetch_table_rows", _fetch)
    monkeypatch.setattr(settings, "trips_file", _write_csv(tmp_path / "trips.csv", ["tripId,distanceRange", "F1,Other"]))

    rows = load_trip_rows()

    assert [row.trip_id for row in rows] == ["F1"]


def test_fetch_table_rows_pages_through_results(monkeypatch):
    from fleetdash.db import supabase as supabase_db

    data = [{"trip_id": f"T{index}"} for index in range(5)]
    requested = []

    class _Query:
        def select(self, columns):
            return self

        def range(self, start, end):
            requested.append((start, end))
            self._window = data[start : end + 1]
            return self

        def execute(self):
            return type("Response", (), {"data": self._window})()

    class _Client:
        def table(self, name):
            return _Query()

    monkeypatch.setattr(supabase_db, "get_supabase_client", lambda: _Client())

    rows = supabase_db.fetch_table_rows("trips", page_size=2)

    assert rows == data
    assert requested == [(0, 1), (2, 3), (4, 5)]


def test_row_from_record_skips_cancelled_indents():
    assert row_from_record({"trip_id": "X", "distance_range": "  "}) is None
