"""Routes notifications to the sender registered for their type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import DispatchError, UnsupportedTypeError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..domain.enums import NotificationType
    from ..domain.models import Notification
    from ..ports.sender import IChannelSender

logger = logging.getLogger(__name__)


class ChannelDispatcher:
    """
    Holds one sender per notification type and routes strictly by type.

    A type without a sender raises ``UnsupportedTypeError``; there is no
    default sender to fall back to. Unexpected sender exceptions are turned
    into ``DispatchError`` so the engine always sees a delivery failure.
    """

    def __init__(self, senders: Iterable[IChannelSender]) -> None:
        self._senders: dict[NotificationType, IChannelSender] = {}
        for sender in senders:
            if sender.channel_type in self._senders:
                raise ValueError(
                    f"Duplicate sender for notification type {sender.channel_type.value}"
                )
            self._senders[sender.channel_type] = sender

    def supported_types(self) -> list[NotificationType]:
        return list(self._senders)

    def supports(self, notification_type: NotificationType | None) -> bool:
        return notification_type in self._senders

    def sender_for(self, notification_type: NotificationType) -> IChannelSender:
        sender = self._senders.get(notification_type)
        if sender is None:
            raise UnsupportedTypeError(notification_type)
        return sender

    async def send(self, notification: Notification) -> None:
        sender = self.sender_for(notification.type)
        try:
            await sender.send(notification)
        except DispatchError:
            raise
        except Exception as e:
            logger.exception(
                "Sender %s raised unexpectedly for notification %s",
                type(sender).__name__,
                notification.id,
            )
            raise DispatchError(
                notification.type.value, notification.recipient, str(e) or type(e).__name__
            ) from e

    async def test_connection(self, notification_type: NotificationType) -> None:
        sender = self.sender_for(notification_type)
        try:
            await sender.test_connection()
        except DispatchError:
            raise
        except Exception as e:
            raise DispatchError(
                notification_type.value, "connection-test", str(e) or type(e).__name__
            ) from e
