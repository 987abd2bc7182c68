"""Date-range scope helpers shared by every analytics query."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time
from typing import Optional, Union

from ..models.domain import DateRangeScope

DateInput = Union[date, datetime, None]

END_OF_DAY = time(23, 59, 59, 999000)

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


def _as_local_day(value: DateInput) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.date()
    return value


def to_local_naive(value: DateInput) -> Optional[datetime]:
    """Coerce a date or datetime to a naive local datetime for comparisons."""

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def normalize(start: DateInput, end: DateInput) -> DateRangeScope:
    """Clamp a user window to whole local days.

    The time of day on either input is ignored. Reversed days are swapped so
    the scope is always ordered; a missing side stays unbounded.
    """

    start_day = _as_local_day(start)
    end_day = _as_local_day(end)
    if start_day is not None and end_day is not None and start_day > end_day:
        start_day, end_day = end_day, start_day

    return DateRangeScope(
        start=datetime.combine(start_day, time.min) if start_day is not None else None,
        end=datetime.combine(end_day, END_OF_DAY) if end_day is not None else None,
    )


def for_month(year: int, month: int) -> DateRangeScope:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return normalize(date(year, month, 1), date(year, month, last_day))


def clear() -> DateRangeScope:
    return DateRangeScope(start=None, end=None)


def is_active(scope: DateRangeScope) -> bool:
    return scope.start is not None and scope.end is not None


def is_unbounded(scope: DateRangeScope) -> bool:
    return scope.start is None and scope.end is None


def contains(scope: DateRangeScope, moment: DateInput) -> bool:
    """Inclusive membership test; undated values only match an unbounded scope."""

    if is_unbounded(scope):
        return True
    value = to_local_naive(moment)
    if value is None:
        return False
    if scope.start is not None and value < scope.start:
        return False
    if scope.end is not None and value > scope.end:
        return False
    return True


def overlaps_month(scope: DateRangeScope, year: int, month: int) -> bool:
    """True when any day of the given month falls inside the scope."""

    if is_unbounded(scope):
        return True
    month_scope = for_month(year, month)
    if scope.start is not None and month_scope.end < scope.start:
        return False
    if scope.end is not None and month_scope.start > scope.end:
        return False
    return True


def scope_from_query(
    start: Optional[date] = None,
    end: Optional[date] = None,
    month: Optional[str] = None,
) -> DateRangeScope:
    """Build a scope from API query parameters; ``month`` (yyyy-MM) wins."""

    if month:
        match = _MONTH_PATTERN.match(month.strip())
        if not match:
            raise ValueError(f"month must use the yyyy-MM format, got '{month}'")
        return for_month(int(match.group(1)), int(match.group(2)))
    if start is None and end is None:
        return clear()
    return normalize(start, end)
