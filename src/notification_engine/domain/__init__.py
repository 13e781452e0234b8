"""Domain records, enums and request validation."""

from __future__ import annotations

from .enums import NotificationStatus, NotificationType
from .models import (
    ATTACHMENTS_KEY,
    BLOCKS_KEY,
    HTML_CONTENT_KEY,
    Channel,
    ChannelRequest,
    Notification,
    NotificationFilter,
    NotificationPage,
    NotificationPatch,
    NotificationRequest,
    ScheduleRequest,
    Template,
    TemplateRequest,
    can_transition,
    ensure_utc,
)
from .validation import parse_model, validate_notification_request

__all__ = [
    "ATTACHMENTS_KEY",
    "BLOCKS_KEY",
    "HTML_CONTENT_KEY",
    "Channel",
    "ChannelRequest",
    "Notification",
    "NotificationFilter",
    "NotificationPage",
    "NotificationPatch",
    "NotificationRequest",
    "NotificationStatus",
    "NotificationType",
    "ScheduleRequest",
    "Template",
    "TemplateRequest",
    "can_transition",
    "ensure_utc",
    "parse_model",
    "validate_notification_request",
]
