"""Database clients and utilities."""

from .supabase import fetch_table_rows, get_supabase_client

__all__ = ["fetch_table_rows", "get_supabase_client"]
