"""Default templates and channels for a fresh database."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..domain.enums import NotificationType
from ..domain.models import Channel, Template

if TYPE_CHECKING:
    from ..ports.store import IChannelStore, ITemplateStore

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: tuple[Template, ...] = (
    Template(
        name="welcome_email",
        type=NotificationType.EMAIL,
        subject="Welcome to our platform!",
        content=(
            "Hello {{.Name}},\n\n"
            "Welcome to our platform! We're excited to have you on board.\n\n"
            "Best regards,\nThe Team"
        ),
        variables={"Name": "string"},
    ),
    Template(
        name="password_reset",
        type=NotificationType.EMAIL,
        subject="Password Reset Request",
        content=(
            "Hello {{.Name}},\n\n"
            "You requested a password reset. Click the link below to reset "
            "your password:\n\n{{.ResetLink}}\n\n"
            "If you didn't request this, please ignore this email.\n\n"
            "Best regards,\nThe Team"
        ),
        variables={"Name": "string", "ResetLink": "string"},
    ),
    Template(
        name="slack_alert",
        type=NotificationType.SLACK,
        content=(
            "\U0001f6a8 Alert: {{.AlertType}}\n\n{{.Message}}\n\n"
            "Time: {{.Timestamp}}\nSeverity: {{.Severity}}"
        ),
        variables={
            "AlertType": "string",
            "Message": "string",
            "Timestamp": "string",
            "Severity": "string",
        },
    ),
    Template(
        name="in_app_notification",
        type=NotificationType.IN_APP,
        content="{{.Title}}\n\n{{.Message}}\n\n{{.ActionText}}: {{.ActionUrl}}",
        variables={
            "Title": "string",
            "Message": "string",
            "ActionText": "string",
            "ActionUrl": "string",
        },
    ),
)

DEFAULT_CHANNELS: tuple[Channel, ...] = (
    Channel(name="default_email", type=NotificationType.EMAIL),
    Channel(name="default_slack", type=NotificationType.SLACK),
    Channel(name="default_in_app", type=NotificationType.IN_APP),
)


async def seed_defaults(templates: ITemplateStore, channels: IChannelStore) -> int:
    """Insert missing default records by name. Returns how many were created."""
    created = 0
    for template in DEFAULT_TEMPLATES:
        if await templates.get_by_name(template.name) is None:
            await templates.create(template)
            created += 1
    for channel in DEFAULT_CHANNELS:
        if await channels.get_by_name(channel.name) is None:
            await channels.create(channel)
            created += 1
    if created:
        logger.info("Seeded %d default records", created)
    return created
