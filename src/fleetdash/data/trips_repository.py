"""Trip row loader with database-first approach, falling back to an exported file."""

from __future__ import annotations

import csv
import functools
import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from openpyxl import load_workbook

from ..config import settings
from ..db.supabase import fetch_table_rows
from ..models.domain import DistanceRange, TripRow


class TripSourceError(RuntimeError):
    """Trip rows could not be read from any configured source."""


_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "trip_id": ("trip_id", "tripId", "indent", "Indent"),
    "distance_range": ("distance_range", "distanceRange", "range", "Range"),
    "trip_date": ("trip_date", "tripDate", "indent_date", "indentDate", "Indent Date"),
    "is_duplicate": ("is_duplicate", "isDuplicate"),
    "load_kg": ("load_kg", "loadKg", "total_load", "totalLoad"),
    "bucket_count": ("bucket_count", "bucketCount"),
    "barrel_count": ("barrel_count", "barrelCount"),
    "cost": ("cost", "total_cost", "totalCost", "totalCostAE"),
    "vehicle_cost": ("vehicle_cost", "vehicleCost"),
    "remaining_cost": ("remaining_cost", "remainingCost"),
    "total_km": ("total_km", "totalKm"),
    "vehicle_number": ("vehicle_number", "vehicleNumber"),
    "reported_profit_loss": ("profit_loss", "profitLoss"),
}
REQUIRED_FIELDS = ("trip_id", "distance_range")

_TRUE_VALUES = {"true", "1", "yes", "y", "t"}
_DAY_FIRST_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%d.%m.%Y")


def _pick(record: Mapping[str, Any], field_name: str) -> Any:
    for alias in _COLUMN_ALIASES[field_name]:
        if alias in record and record[alias] not in (None, ""):
            return record[alias]
    return None


def _coerce_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def _coerce_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logging.warning(f"Unrecognised trip date '{text}', treating row as undated")
    return None


def row_from_record(record: Mapping[str, Any]) -> Optional[TripRow]:
    """Build a TripRow from a loosely-named record; cancelled rows (no range) give None."""

    distance_range = DistanceRange.from_label(_pick(record, "distance_range"))
    if distance_range is None:
        return None
    vehicle = _pick(record, "vehicle_number")
    return TripRow(
        trip_id=str(_pick(record, "trip_id") or "").strip(),
        distance_range=distance_range,
        trip_date=_coerce_datetime(_pick(record, "trip_date")),
        is_duplicate=_coerce_bool(_pick(record, "is_duplicate")),
        load_kg=_coerce_float(_pick(record, "load_kg")),
        bucket_count=_coerce_float(_pick(record, "bucket_count")),
        barrel_count=_coerce_float(_pick(record, "barrel_count")),
        cost=_coerce_float(_pick(record, "cost")),
        vehicle_cost=_coerce_float(_pick(record, "vehicle_cost")),
        remaining_cost=_coerce_float(_pick(record, "remaining_cost")),
        total_km=_coerce_float(_pick(record, "total_km")),
        vehicle_number=str(vehicle).strip() if vehicle is not None else None,
        reported_profit_loss=_coerce_float(_pick(record, "reported_profit_loss")),
    )


def _check_header(header: Iterable[str], source: Path) -> None:
    names = set(header)
    missing = [
        field_name
        for field_name in REQUIRED_FIELDS
        if not any(alias in names for alias in _COLUMN_ALIASES[field_name])
    ]
    if missing:
        raise TripSourceError(f"Trip file '{source}' missing columns: {', '.join(missing)}")


def _rows_from_records(records: Iterable[Mapping[str, Any]], source: str) -> tuple[TripRow, ...]:
    rows: list[TripRow] = []
    cancelled = 0
    for index, record in enumerate(records, start=1):
        try:
            row = row_from_record(record)
        except ValueError as exc:
            raise TripSourceError(f"Invalid trip record {index} in {source}: {exc}") from exc
        if row is None:
            cancelled += 1
            continue
        rows.append(row)
    if cancelled:
        logging.info(f"Skipped {cancelled} cancelled indents without a range in {source}")
    return tuple(rows)


def _load_trips_from_database() -> tuple[TripRow, ...] | None:
    """Load trips from Supabase. Returns None if database not available or empty."""
    try:
        records = fetch_table_rows(settings.supabase_trips_table)
    except Exception as e:
        logging.warning(f"Trip query failed, falling back to file: {e}")
        return None
    if not records:
        return None
    return _rows_from_records(records, f"table '{settings.supabase_trips_table}'")


def _load_trips_from_file(source: Path | None = None) -> tuple[TripRow, ...]:
    trips_path = source or settings.trips_file
    if not trips_path.exists():
        raise TripSourceError(f"Trip file not found: {trips_path}")

    suffix = trips_path.suffix.lower()
    if suffix == ".csv":
        with trips_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            if not reader.fieldnames:
                raise TripSourceError(f"Trip file '{trips_path}' is missing a header row.")
            _check_header(reader.fieldnames, trips_path)
            return _rows_from_records(reader, trips_path.name)

    if suffix == ".xlsx":
        wb = load_workbook(trips_path, data_only=True, read_only=True)
        try:
            rows = wb.active.iter_rows(min_row=1, values_only=True)
            header = next(rows, None)
            if header is None:
                raise TripSourceError(f"Trip workbook '{trips_path}' is empty.")
            names = [str(name).strip() if name is not None else "" for name in header]
            _check_header(names, trips_path)
            records = (dict(zip(names, values)) for values in rows)
            return _rows_from_records(records, trips_path.name)
        finally:
            wb.close()

    raise TripSourceError(f"Unsupported trip file type '{suffix}' (expected .csv or .xlsx)")


@functools.lru_cache(maxsize=1)
def load_trip_rows(source: Optional[Path] = None) -> tuple[TripRow, ...]:
    """Get trip rows from the database first, falling back to the configured file."""

    if source is None:
        db_rows = _load_trips_from_database()
        if db_rows:
            logging.info(f"Loaded {len(db_rows)} trip rows from database")
            return db_rows

    file_rows = _load_trips_from_file(source)
    logging.info(f"Loaded {len(file_rows)} trip rows from {source or settings.trips_file}")
    return file_rows


def set_active_trips_file(path: Path) -> None:
    """Update the active trip export and clear the row cache."""

    settings.trips_file = path
    load_trip_rows.cache_clear()
