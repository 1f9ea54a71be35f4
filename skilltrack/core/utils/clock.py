"""Injectable time source for aggregation and recompute code."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from flask import current_app, has_app_context


class SystemClock:
    """Wall clock in UTC, naive datetimes to match stored columns."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock(SystemClock):
    """Clock pinned to a given instant; used by tests and backfills."""

    def __init__(self, moment: datetime | date) -> None:
        if not isinstance(moment, datetime):
            moment = datetime(moment.year, moment.month, moment.day, 12, 0, 0)
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


_default_clock = SystemClock()


def get_clock(clock: Optional[SystemClock] = None) -> SystemClock:
    """Return the explicit clock, the app-registered one, or the system clock."""
    if clock is not None:
        return clock
    if has_app_context():
        registered = current_app.extensions.get("clock")
        if registered is not None:
            return registered
    return _default_clock
