"""Channel sender port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.enums import NotificationType
    from ..domain.models import Notification


@runtime_checkable
class IChannelSender(Protocol):
    """
    Transport adapter for one notification type.

    Adapters must explicitly declare: class SmtpEmailSender(IChannelSender):
    """

    channel_type: NotificationType

    async def send(self, notification: Notification) -> None:
        """Deliver the notification. Raises ``DispatchError`` on any failure."""
        ...

    async def test_connection(self) -> None:
        """Check reachability/authentication without sending a message.

        Raises ``DispatchError`` when the transport is not usable.
        """
        ...
