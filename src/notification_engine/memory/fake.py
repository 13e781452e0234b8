"""Fake sender for test assertions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import DispatchError
from ..ports.sender import IChannelSender

if TYPE_CHECKING:
    from ..domain.enums import NotificationType
    from ..domain.models import Notification

logger = logging.getLogger(__name__)


class FakeSender(IChannelSender):
    """
    Test double (Fake) that records notifications in a list.

    Set ``fail_with`` to a reason string to make every send raise
    ``DispatchError``, and ``reachable = False`` to fail connection tests.
    """

    def __init__(
        self,
        channel_type: NotificationType,
        fail_with: str | None = None,
    ) -> None:
        self.channel_type = channel_type
        self.fail_with = fail_with
        self.reachable = True
        self.sent: list[Notification] = []
        self.attempts = 0

    async def send(self, notification: Notification) -> None:
        self.attempts += 1
        if self.fail_with is not None:
            raise DispatchError(
                self.channel_type.value, notification.recipient, self.fail_with
            )
        self.sent.append(notification.model_copy(deep=True))

    async def test_connection(self) -> None:
        if not self.reachable:
            raise DispatchError(self.channel_type.value, "fake", "unreachable")

    def assert_sent(self, recipient: str, count: int = 1) -> None:
        """Helper for test assertions."""
        matches = [n for n in self.sent if n.recipient == recipient]
        if len(matches) != count:
            raise AssertionError(
                f"Expected {count} notifications to {recipient} via "
                f"{self.channel_type.value}, but found {len(matches)}."
            )

    def clear(self) -> None:
        self.sent.clear()
        self.attempts = 0
