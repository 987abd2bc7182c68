"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/data", status_code=status.HTTP_200_OK)
def health_data() -> dict:
    """Report whether trip rows can be loaded from the configured source."""
    from ...data.trips_repository import TripSourceError, load_trip_rows
    from ...db.supabase import get_supabase_client

    database_configured = get_supabase_client() is not None
    try:
        rows = load_trip_rows()
    except TripSourceError as exc:
        return {"databaseConfigured": database_configured, "healthy": False, "error": str(exc)}
    return {"databaseConfigured": database_configured, "healthy": True, "rows": len(rows)}
