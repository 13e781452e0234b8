"""In-app sender backed by a per-recipient inbox."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..domain.enums import NotificationType
from ..exceptions import DispatchError
from ..ports.sender import IChannelSender

if TYPE_CHECKING:
    from ..domain.models import Notification

logger = logging.getLogger(__name__)


@dataclass
class InboxMessage:
    """A notification as seen by its recipient inside the application."""

    notification_id: int | None
    recipient: str
    title: str
    message: str
    delivered_at: datetime
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


class InAppInbox:
    """In-memory inbox, newest message first per recipient.

    Each recipient keeps at most ``max_per_recipient`` messages; delivering
    past the cap drops that recipient's oldest message. ``None`` disables
    the cap.
    """

    def __init__(self, max_per_recipient: int | None = 1000) -> None:
        if max_per_recipient is not None and max_per_recipient <= 0:
            raise ValueError("max_per_recipient must be positive")
        self.max_per_recipient = max_per_recipient
        self._messages: dict[str, list[InboxMessage]] = {}

    def deliver(self, message: InboxMessage) -> None:
        messages = self._messages.setdefault(message.recipient, [])
        messages.insert(0, message)
        if self.max_per_recipient is not None:
            del messages[self.max_per_recipient :]

    def list_for(
        self,
        recipient: str,
        limit: int = 10,
        offset: int = 0,
        unread_only: bool = False,
    ) -> list[InboxMessage]:
        messages = self._messages.get(recipient, [])
        if unread_only:
            messages = [m for m in messages if not m.is_read]
        return messages[offset : offset + limit]

    def mark_read(self, notification_id: int, recipient: str) -> bool:
        """Mark a message read. Returns ``False`` if the recipient has no such message."""
        for message in self._messages.get(recipient, []):
            if message.notification_id == notification_id:
                if message.read_at is None:
                    message.read_at = datetime.now(timezone.utc)
                return True
        return False

    def unread_count(self, recipient: str) -> int:
        return sum(1 for m in self._messages.get(recipient, []) if not m.is_read)


class InAppSender(IChannelSender):
    """Delivers notifications into an :class:`InAppInbox`. No network involved."""

    channel_type = NotificationType.IN_APP

    def __init__(self, inbox: InAppInbox | None = None) -> None:
        self.inbox = inbox or InAppInbox()

    async def send(self, notification: Notification) -> None:
        if not notification.recipient:
            raise DispatchError(self.channel_type.value, "", "recipient is empty")
        self.inbox.deliver(
            InboxMessage(
                notification_id=notification.id,
                recipient=notification.recipient,
                title=notification.title,
                message=notification.message,
                delivered_at=datetime.now(timezone.utc),
            )
        )
        logger.info(
            "In-app notification %s delivered to %s",
            notification.id,
            notification.recipient,
        )

    async def test_connection(self) -> None:
        return None
