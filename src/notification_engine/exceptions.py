"""Exception hierarchy for the notification engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .domain.enums import NotificationStatus, NotificationType


class NotificationEngineError(Exception):
    """Root exception for the notification engine."""


class ValidationError(NotificationEngineError):
    """Raised when a request fails validation, before anything is persisted.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class NotFoundError(NotificationEngineError):
    """Raised when a record is not found (or has been soft-deleted)."""


class EntityNotFoundError(NotFoundError):
    """Raised when a specific entity cannot be found by ID."""

    entity_type = "Entity"

    def __init__(self, entity_id: object) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity_type} with id={entity_id!r} not found")


class NotificationNotFoundError(EntityNotFoundError):
    entity_type = "Notification"


class ChannelNotFoundError(EntityNotFoundError):
    entity_type = "Channel"


class TemplateError(NotificationEngineError):
    """Base class for template lookup and rendering failures."""


class TemplateNotFoundError(TemplateError, EntityNotFoundError):
    """Raised when a referenced template does not exist."""

    entity_type = "Template"


class TemplateRenderError(TemplateError):
    """Raised when a template cannot be rendered (syntax error, unbound marker)."""


class DispatchError(NotificationEngineError):
    """Raised when a transport fails to deliver a notification."""

    def __init__(self, channel: str, recipient: str, reason: str) -> None:
        self.channel = channel
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to deliver via {channel} to {recipient}: {reason}")


class UnsupportedTypeError(NotificationEngineError):
    """Raised when no sender is registered for a notification type."""

    def __init__(self, notification_type: NotificationType | str) -> None:
        self.notification_type = notification_type
        value = getattr(notification_type, "value", notification_type)
        super().__init__(f"Unsupported notification type: {value}")


class InvalidTransitionError(NotificationEngineError):
    """Raised when a notification is moved along an edge the state machine lacks."""

    def __init__(self, current: NotificationStatus, target: NotificationStatus) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot transition notification from {current.value} to {target.value}"
        )


class DuplicateNameError(NotificationEngineError):
    """Raised when a template or channel name is already taken."""

    def __init__(self, entity_type: str, name: str) -> None:
        self.entity_type = entity_type
        self.name = name
        super().__init__(f"{entity_type} named {name!r} already exists")


class StoreError(NotificationEngineError):
    """Raised when the record store fails. The original error is chained."""
