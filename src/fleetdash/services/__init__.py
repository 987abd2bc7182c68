"""Analytics services.

Clients that edit the date scope interactively go through ``ScopeSession``:
``update`` issues a ticket per edit, ``dashboard.refresh_session`` recomputes
once the debounce window is quiet, and results for superseded tickets are
dropped.
"""

from .session import FetchOutcome, ScopeDebouncer, ScopeSession, ScopeTicket

__all__ = ["ScopeSession", "ScopeDebouncer", "ScopeTicket", "FetchOutcome"]
