"""Record store ports consumed by the engine and the admin services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from ..domain.enums import NotificationStatus
    from ..domain.models import Channel, Notification, NotificationFilter, Template


@runtime_checkable
class INotificationStore(Protocol):
    """
    Persistence port for notifications.

    Every method is atomic for the single record it touches. Soft-deleted
    records are invisible to ``get``, ``update``, ``query`` and ``due``.
    Storage failures surface as ``StoreError``; a missing record is reported
    by return value, never by a storage error.
    """

    async def create(self, notification: Notification) -> Notification:
        """Insert a new record and return it with its assigned id."""
        ...

    async def get(self, notification_id: int) -> Notification | None: ...

    async def update(
        self, notification_id: int, changes: dict[str, Any]
    ) -> Notification | None:
        """Apply *changes* to the named fields only. ``None`` if the record is gone."""
        ...

    async def soft_delete(self, notification_id: int) -> bool:
        """Mark a record deleted. Returns ``False`` if it does not exist."""
        ...

    async def query(
        self,
        criteria: NotificationFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Notification], int]:
        """Page of matching records, newest first, plus the unpaged total."""
        ...

    async def due(self, now: datetime) -> list[Notification]:
        """Scheduled records with ``scheduled_at <= now``, oldest first."""
        ...

    async def claim(
        self,
        notification_id: int,
        expected: NotificationStatus,
        target: NotificationStatus,
        at: datetime,
    ) -> bool:
        """Compare-and-swap the status. Returns ``True`` only for the winner."""
        ...


@runtime_checkable
class ITemplateStore(Protocol):
    """Persistence port for templates."""

    async def create(self, template: Template) -> Template: ...

    async def get(self, template_id: int) -> Template | None: ...

    async def get_by_name(self, name: str) -> Template | None: ...

    async def save(self, template: Template) -> Template | None: ...

    async def soft_delete(self, template_id: int) -> bool: ...

    async def list_all(self, active_only: bool = False) -> list[Template]: ...


@runtime_checkable
class IChannelStore(Protocol):
    """Persistence port for channel records."""

    async def create(self, channel: Channel) -> Channel: ...

    async def get(self, channel_id: int) -> Channel | None: ...

    async def get_by_name(self, name: str) -> Channel | None: ...

    async def list_all(self) -> list[Channel]: ...
