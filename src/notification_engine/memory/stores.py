"""Dict-backed stores for unit tests and single-process use."""

from __future__ import annotations

import copy
import itertools
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..domain.enums import NotificationStatus

if TYPE_CHECKING:
    from ..domain.models import Channel, Notification, NotificationFilter, Template


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryNotificationStore:
    """
    In-memory implementation of ``INotificationStore``.

    Records are copied on the way in and out, so callers never share state
    with the store. Ids come from a monotonic counter and are never reused.
    """

    def __init__(self) -> None:
        self._rows: dict[int, Notification] = {}
        self._ids = itertools.count(1)

    async def create(self, notification: Notification) -> Notification:
        stored = notification.model_copy(deep=True, update={"id": next(self._ids)})
        self._rows[stored.id] = stored  # type: ignore[index]
        return stored.model_copy(deep=True)

    async def get(self, notification_id: int) -> Notification | None:
        row = self._live(notification_id)
        return row.model_copy(deep=True) if row else None

    async def update(
        self, notification_id: int, changes: dict[str, Any]
    ) -> Notification | None:
        row = self._live(notification_id)
        if row is None:
            return None
        stored = row.model_copy(deep=True, update=copy.deepcopy(changes))
        self._rows[notification_id] = stored
        return stored.model_copy(deep=True)

    async def soft_delete(self, notification_id: int) -> bool:
        row = self._live(notification_id)
        if row is None:
            return False
        now = _now()
        self._rows[notification_id] = row.model_copy(
            update={"deleted_at": now, "updated_at": now}
        )
        return True

    async def query(
        self,
        criteria: NotificationFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Notification], int]:
        matches = [
            row
            for row in self._rows.values()
            if not row.is_deleted and criteria.matches(row)
        ]
        matches.sort(key=lambda n: (n.created_at, n.id or 0), reverse=True)
        page = matches[offset : offset + limit]
        return [row.model_copy(deep=True) for row in page], len(matches)

    async def due(self, now: datetime) -> list[Notification]:
        due = [
            row
            for row in self._rows.values()
            if not row.is_deleted
            and row.status == NotificationStatus.SCHEDULED
            and row.scheduled_at is not None
            and row.scheduled_at <= now
        ]
        due.sort(key=lambda n: (n.scheduled_at, n.id or 0))
        return [row.model_copy(deep=True) for row in due]

    async def claim(
        self,
        notification_id: int,
        expected: NotificationStatus,
        target: NotificationStatus,
        at: datetime,
    ) -> bool:
        row = self._live(notification_id)
        if row is None or row.status != expected:
            return False
        self._rows[notification_id] = row.model_copy(
            update={"status": target, "updated_at": at}
        )
        return True

    def _live(self, notification_id: int) -> Notification | None:
        row = self._rows.get(notification_id)
        if row is None or row.is_deleted:
            return None
        return row

    # ── Test helpers ─────────────────────────────────────────────

    def raw(self, notification_id: int) -> Notification | None:
        """Return a stored record even if soft-deleted."""
        row = self._rows.get(notification_id)
        return row.model_copy(deep=True) if row else None

    def __len__(self) -> int:
        return len(self._rows)


class InMemoryTemplateStore:
    """In-memory implementation of ``ITemplateStore``."""

    def __init__(self) -> None:
        self._rows: dict[int, Template] = {}
        self._ids = itertools.count(1)

    async def create(self, template: Template) -> Template:
        stored = template.model_copy(deep=True, update={"id": next(self._ids)})
        self._rows[stored.id] = stored  # type: ignore[index]
        return stored.model_copy(deep=True)

    async def get(self, template_id: int) -> Template | None:
        row = self._rows.get(template_id)
        if row is None or row.deleted_at is not None:
            return None
        return row.model_copy(deep=True)

    async def get_by_name(self, name: str) -> Template | None:
        for row in self._rows.values():
            if row.name == name and row.deleted_at is None:
                return row.model_copy(deep=True)
        return None

    async def save(self, template: Template) -> Template | None:
        if template.id is None or await self.get(template.id) is None:
            return None
        self._rows[template.id] = template.model_copy(deep=True)
        return template.model_copy(deep=True)

    async def soft_delete(self, template_id: int) -> bool:
        row = await self.get(template_id)
        if row is None:
            return False
        self._rows[template_id] = row.model_copy(update={"deleted_at": _now()})
        return True

    async def list_all(self, active_only: bool = False) -> list[Template]:
        return [
            row.model_copy(deep=True)
            for row in sorted(self._rows.values(), key=lambda t: t.id or 0)
            if row.deleted_at is None and (row.is_active or not active_only)
        ]


class InMemoryChannelStore:
    """In-memory implementation of ``IChannelStore``."""

    def __init__(self) -> None:
        self._rows: dict[int, Channel] = {}
        self._ids = itertools.count(1)

    async def create(self, channel: Channel) -> Channel:
        stored = channel.model_copy(deep=True, update={"id": next(self._ids)})
        self._rows[stored.id] = stored  # type: ignore[index]
        return stored.model_copy(deep=True)

    async def get(self, channel_id: int) -> Channel | None:
        row = self._rows.get(channel_id)
        return row.model_copy(deep=True) if row else None

    async def get_by_name(self, name: str) -> Channel | None:
        for row in self._rows.values():
            if row.name == name:
                return row.model_copy(deep=True)
        return None

    async def list_all(self) -> list[Channel]:
        return [
            row.model_copy(deep=True)
            for row in sorted(self._rows.values(), key=lambda c: c.id or 0)
        ]
