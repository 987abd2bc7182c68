"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLEET_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Fleet Analytics API"
    api_prefix: str = "/api"
    trips_file: Path = Field(
        default=Path("data/trips.csv"),
        description="Tagged trip rows export (.csv or .xlsx) used when the database is unavailable.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )
    scope_debounce_ms: int = Field(
        default=400,
        ge=0,
        description="Quiet window before a scope change triggers a recompute (300-500 ms recommended).",
    )

    # Vehicle cost analytics
    fixed_vehicles: tuple[str, ...] = Field(
        default=("HR38AC7854", "HR38AC7243", "HR38AC0599", "HR38AC0263"),
        description="Dedicated vehicles tracked against a fixed monthly km allowance.",
    )
    vehicle_fixed_km: float = Field(default=5000.0, ge=0.0)
    vehicle_km_cost_rate: float = Field(default=31.0, ge=0.0)
    vehicle_total_budget: float = Field(default=155000.0, ge=0.0)
    truck_capacity_buckets: float = Field(
        default=300.0,
        gt=0.0,
        description="Bucket equivalents that make a fully loaded truck (fulfillment percentage).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    supabase_trips_table: str = Field(default="trips")
    supabase_page_size: int = Field(default=1000, gt=0, description="Rows requested per Supabase page.")

    @field_validator("trips_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "fixed_vehicles", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
