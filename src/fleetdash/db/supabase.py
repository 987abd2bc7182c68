"""Supabase access for the trip data store."""

import logging
from functools import lru_cache
from typing import Any

from supabase import Client, create_client

from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Cached Supabase client, or None when credentials are not configured.

    Creating the client does not open a connection; queries may still fail.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.debug("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


def fetch_table_rows(table: str, columns: str = "*", page_size: int | None = None) -> list[dict[str, Any]] | None:
    """Read every row of ``table`` page by page.

    Returns None when the database is not configured. Query errors propagate.
    """
    client = get_supabase_client()
    if client is None:
        return None

    page_size = page_size or settings.supabase_page_size
    rows: list[dict[str, Any]] = []
    start = 0
    while True:
        response = client.table(table).select(columns).range(start, start + page_size - 1).execute()
        batch = response.data or []
        rows.extend(batch)
        if len(batch) < page_size:
            break
        start += page_size
    logging.debug(f"Fetched {len(rows)} rows from table '{table}'")
    return rows
