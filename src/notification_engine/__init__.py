"""Notification engine: lifecycle, scheduling, channel dispatch and templating."""

from __future__ import annotations

from .admin import ChannelService, TemplateService
from .channels import ChannelDispatcher
from .config import NotificationSettings
from .domain import (
    Channel,
    ChannelRequest,
    Notification,
    NotificationFilter,
    NotificationPage,
    NotificationPatch,
    NotificationRequest,
    NotificationStatus,
    NotificationType,
    ScheduleRequest,
    Template,
    TemplateRequest,
)
from .exceptions import (
    ChannelNotFoundError,
    DispatchError,
    DuplicateNameError,
    EntityNotFoundError,
    InvalidTransitionError,
    NotFoundError,
    NotificationEngineError,
    NotificationNotFoundError,
    StoreError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
    UnsupportedTypeError,
    ValidationError,
)
from .scheduling import NotificationSchedulerWorker
from .service import NotificationService, ProcessDueReport, SubmitResult
from .template import RenderedContent, TemplateRenderer

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "ChannelDispatcher",
    "ChannelNotFoundError",
    "ChannelRequest",
    "ChannelService",
    "DispatchError",
    "DuplicateNameError",
    "EntityNotFoundError",
    "InvalidTransitionError",
    "NotFoundError",
    "Notification",
    "NotificationEngineError",
    "NotificationFilter",
    "NotificationNotFoundError",
    "NotificationPage",
    "NotificationPatch",
    "NotificationRequest",
    "NotificationSchedulerWorker",
    "NotificationService",
    "NotificationSettings",
    "NotificationStatus",
    "NotificationType",
    "ProcessDueReport",
    "RenderedContent",
    "ScheduleRequest",
    "StoreError",
    "SubmitResult",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateRenderer",
    "TemplateRequest",
    "UnsupportedTypeError",
    "ValidationError",
    "__version__",
]
