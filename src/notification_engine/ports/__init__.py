"""Port definitions for the notification engine."""

from __future__ import annotations

from .clock import IClock, SystemClock
from .sender import IChannelSender
from .store import IChannelStore, INotificationStore, ITemplateStore

__all__ = [
    "IChannelSender",
    "IChannelStore",
    "IClock",
    "INotificationStore",
    "ITemplateStore",
    "SystemClock",
]
