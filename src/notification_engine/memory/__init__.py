"""Memory adapters for testing and development."""

from __future__ import annotations

from .clock import FixedClock
from .fake import FakeSender
from .stores import InMemoryChannelStore, InMemoryNotificationStore, InMemoryTemplateStore

__all__ = [
    "FakeSender",
    "FixedClock",
    "InMemoryChannelStore",
    "InMemoryNotificationStore",
    "InMemoryTemplateStore",
]
