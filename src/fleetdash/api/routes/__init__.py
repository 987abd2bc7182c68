"""Route group exports."""

from . import analytics, health

__all__ = ["analytics", "health"]
