"""Notification type and status enums."""

from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    """Supported notification channel types."""

    EMAIL = "email"
    SLACK = "slack"
    IN_APP = "in_app"


class NotificationStatus(str, Enum):
    """Lifecycle states of a notification."""

    PENDING = "pending"
    SCHEDULED = "scheduled"
    DISPATCHING = "dispatching"
    SENT = "sent"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (NotificationStatus.SENT, NotificationStatus.FAILED)
