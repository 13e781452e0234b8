"""Settable clock for deterministic tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..ports.clock import IClock


class FixedClock(IClock):
    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
