"""
Periodic and manual dashboard refreshes.

Refreshes may overlap (the timer fires while a manual refresh is still
fetching). Each refresh takes a ticket when it starts; a finished refresh
is shown only if no refresh that started after it has been shown already.
"""

import logging
import threading
from typing import Callable

import pandas as pd

from .dashboard import build_overview_from_records
from .exceptions import ApiError

logger = logging.getLogger(__name__)

FetchFn = Callable[[], tuple[list[dict], list[dict], list[dict]]]


def _utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC").tz_localize(None)


class DashboardRefresher:
    """Holds the latest accepted dashboard overview."""

    def __init__(self, fetch: FetchFn, clock: Callable[[], pd.Timestamp] = _utc_now):
        self._fetch = fetch
        self._clock = clock
        self._lock = threading.Lock()
        self._next_ticket = 0
        self._shown_ticket = -1
        self._latest: dict | None = None

    @property
    def latest(self) -> dict | None:
        with self._lock:
            return self._latest

    def begin(self) -> int:
        """Start a refresh and return its ticket."""
        with self._lock:
            ticket = self._next_ticket
            self._next_ticket += 1
            return ticket

    def complete(self, ticket: int, overview: dict) -> bool:
        """Offer a finished refresh; returns False if it was stale and dropped."""
        with self._lock:
            if ticket < self._shown_ticket:
                logger.info("Dropping stale refresh %d (showing %d)", ticket, self._shown_ticket)
                return False
            self._shown_ticket = ticket
            self._latest = overview
            return True

    def refresh(self) -> dict | None:
        """Fetch, aggregate and offer one refresh; returns the latest overview.

        Fetch failures propagate as ApiError and leave the shown overview
        unchanged.
        """
        ticket = self.begin()
        reference_date = self._clock()
        orders, products, users = self._fetch()
        overview = build_overview_from_records(orders, products, users, reference_date)
        self.complete(ticket, overview)
        return self.latest

    def watch(
        self,
        interval_seconds: float,
        stop: threading.Event,
        on_update: Callable[[dict], None] | None = None,
    ) -> None:
        """Refresh every ``interval_seconds`` until ``stop`` is set.

        Fetch failures are logged and the loop keeps going.
        """
        while not stop.is_set():
            try:
                overview = self.refresh()
            except ApiError:
                logger.exception("Dashboard refresh failed")
            else:
                if on_update is not None and overview is not None:
                    on_update(overview)
            stop.wait(interval_seconds)
