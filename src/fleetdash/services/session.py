"""Scope session: the single owner of the active date scope.

Scope edits go through :meth:`ScopeSession.update`, which hands out a ticket.
Results computed for an older ticket are dropped instead of overwriting the
state produced for the newest scope.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from ..config import settings
from ..data.trips_repository import TripSourceError
from ..models.domain import DateRangeScope
from .scope import clear

T = TypeVar("T")

_CLOCK_EPSILON = 1e-9


@dataclass(slots=True, frozen=True)
class ScopeTicket:
    request_id: int
    scope: DateRangeScope


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    ticket: ScopeTicket
    payload: Optional[T] = None
    error: Optional[TripSourceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScopeDebouncer:
    """Coalesce bursts of scope edits into one recompute."""

    def __init__(self, window_seconds: float | None = None) -> None:
        if window_seconds is None:
            window_seconds = settings.scope_debounce_ms / 1000
        if window_seconds < 0:
            raise ValueError("window_seconds must be >= 0")
        self.window_seconds = window_seconds
        self._last_change: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._last_change is not None

    def touch(self, now: float | None = None) -> None:
        self._last_change = time.monotonic() if now is None else now

    def ready(self, now: float | None = None) -> bool:
        if self._last_change is None:
            return False
        current = time.monotonic() if now is None else now
        # float clocks land a hair short of the window on exact boundaries
        return current - self._last_change >= self.window_seconds - _CLOCK_EPSILON

    def consume(self, now: float | None = None) -> bool:
        """Return True once per quiet period, clearing the pending change."""
        if not self.ready(now):
            return False
        self._last_change = None
        return True


class ScopeSession(Generic[T]):
    def __init__(self, scope: DateRangeScope | None = None, debouncer: ScopeDebouncer | None = None) -> None:
        self._scope = scope or clear()
        self._request_id = 0
        self._latest: Optional[FetchOutcome[T]] = None
        self.debouncer = debouncer or ScopeDebouncer()

    @property
    def scope(self) -> DateRangeScope:
        return self._scope

    @property
    def latest(self) -> Optional[FetchOutcome[T]]:
        return self._latest

    def current_ticket(self) -> ScopeTicket:
        return ScopeTicket(request_id=self._request_id, scope=self._scope)

    def update(self, scope: DateRangeScope, now: float | None = None) -> ScopeTicket:
        self._scope = scope
        self._request_id += 1
        self.debouncer.touch(now)
        return self.current_ticket()

    def is_current(self, ticket: ScopeTicket) -> bool:
        return ticket.request_id == self._request_id and ticket.scope == self._scope

    def fetch(self, loader: Callable[[DateRangeScope], T], ticket: ScopeTicket | None = None) -> FetchOutcome[T]:
        """Run ``loader`` for a ticket; data-source failures come back as values."""

        ticket = ticket or self.current_ticket()
        try:
            return FetchOutcome(ticket=ticket, payload=loader(ticket.scope))
        except TripSourceError as exc:
            logging.warning(f"Trip data fetch failed for request {ticket.request_id}: {exc}")
            return FetchOutcome(ticket=ticket, error=exc)

    def apply(self, outcome: FetchOutcome[T]) -> Optional[FetchOutcome[T]]:
        if not self.is_current(outcome.ticket):
            logging.debug(
                f"Discarding stale response for request {outcome.ticket.request_id} "
                f"(active request {self._request_id})"
            )
            return None
        self._latest = outcome
        return outcome
