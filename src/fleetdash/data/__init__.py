"""Trip data access."""

from .trips_repository import TripSourceError, load_trip_rows, set_active_trips_file

__all__ = ["TripSourceError", "load_trip_rows", "set_active_trips_file"]
