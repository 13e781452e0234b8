"""Clock port. The engine reads "now" only through it."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class IClock(Protocol):
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""
        ...


class SystemClock(IClock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
