"""Notification, Template and Channel records plus the request types that create them."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import InvalidTransitionError
from .enums import NotificationStatus, NotificationType

# Allowed edges of the notification state machine.
_TRANSITIONS: dict[NotificationStatus, frozenset[NotificationStatus]] = {
    NotificationStatus.PENDING: frozenset(
        {NotificationStatus.SENT, NotificationStatus.FAILED}
    ),
    NotificationStatus.SCHEDULED: frozenset({NotificationStatus.DISPATCHING}),
    NotificationStatus.DISPATCHING: frozenset(
        {NotificationStatus.SENT, NotificationStatus.FAILED}
    ),
    NotificationStatus.SENT: frozenset(),
    NotificationStatus.FAILED: frozenset(),
}

# Metadata keys with meaning to a specific sender.
HTML_CONTENT_KEY = "html_content"
BLOCKS_KEY = "blocks"
ATTACHMENTS_KEY = "attachments"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def can_transition(current: NotificationStatus, target: NotificationStatus) -> bool:
    return target in _TRANSITIONS[current]


class Notification(BaseModel):
    """
    A notification record and its lifecycle.

    Status only moves along the edges in ``_TRANSITIONS``: ``pending`` and
    ``scheduled`` are initial, ``dispatching`` is the claim taken before a
    scheduled notification is sent, ``sent`` and ``failed`` are terminal.
    ``sent_at`` is set exactly once, by :meth:`mark_sent`.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int | None = None
    type: NotificationType
    status: NotificationStatus = NotificationStatus.PENDING
    title: str
    message: str
    recipient: str
    channel: str = ""
    template_id: int | None = None
    scheduled_at: datetime | None = None
    sent_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_dispatching(self, at: datetime) -> None:
        self._transition(NotificationStatus.DISPATCHING, at)

    def mark_sent(self, at: datetime) -> None:
        self._transition(NotificationStatus.SENT, at)
        self.sent_at = at

    def mark_failed(self, at: datetime) -> None:
        self._transition(NotificationStatus.FAILED, at)

    def _transition(self, target: NotificationStatus, at: datetime) -> None:
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.status, target)
        self.status = target
        self.updated_at = at


class Template(BaseModel):
    """Named message template. ``variables`` documents expected bindings only."""

    id: int | None = None
    name: str
    type: NotificationType
    subject: str = ""
    content: str
    variables: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None


class Channel(BaseModel):
    """Administrative channel record. Dispatch routes by type, not by channel."""

    id: int | None = None
    name: str
    type: NotificationType
    config: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ── Requests ─────────────────────────────────────────────────────


class NotificationRequest(BaseModel):
    """Input for an immediate notification.

    Required fields are checked by the engine, so an incomplete request can
    still be built and is rejected with a structured ``ValidationError``.
    """

    model_config = ConfigDict(frozen=True)

    type: NotificationType | None = None
    title: str = ""
    message: str = ""
    recipient: str = ""
    channel: str = ""
    template_id: int | None = None
    template_data: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ScheduleRequest(NotificationRequest):
    """Input for a deferred notification."""

    scheduled_at: datetime | None = None

    @field_validator("scheduled_at")
    @classmethod
    def _normalise_scheduled_at(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class NotificationPatch(BaseModel):
    """Partial update of the fields that do not take part in the lifecycle."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    message: str | None = None
    recipient: str | None = None
    channel: str | None = None
    metadata: dict[str, Any] | None = None


class TemplateRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: NotificationType
    subject: str = ""
    content: str = Field(min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)


class ChannelRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: NotificationType
    config: dict[str, Any] = Field(default_factory=dict)


class NotificationFilter(BaseModel):
    """Optional status/type filter for listing notifications."""

    model_config = ConfigDict(frozen=True)

    status: NotificationStatus | None = None
    type: NotificationType | None = None

    def matches(self, notification: Notification) -> bool:
        if self.status is not None and notification.status != self.status:
            return False
        return self.type is None or notification.type == self.type


class NotificationPage(BaseModel):
    items: list[Notification]
    total: int
    limit: int
    offset: int
