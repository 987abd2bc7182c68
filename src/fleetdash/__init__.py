"""Fleet distance-range reconciliation backend."""
