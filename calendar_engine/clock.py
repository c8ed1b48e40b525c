"""Injectable suppliers of "now" (local time, single zone)."""

from __future__ import annotations

from datetime import datetime, timedelta


class SystemClock:
    def now(self) -> datetime:
        return datetime.now().replace(second=0, microsecond=0)


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs: float) -> None:
        self._instant = self._instant + timedelta(**kwargs)
