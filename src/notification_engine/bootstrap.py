"""Composition root: builds every component from one ``NotificationSettings``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from typing_extensions import assert_never

from .admin import ChannelService, TemplateService
from .channels import (
    ChannelDispatcher,
    InAppInbox,
    InAppSender,
    SlackChatSender,
    SmtpEmailSender,
)
from .domain.enums import NotificationType
from .persistence import (
    SQLAlchemyChannelStore,
    SQLAlchemyNotificationStore,
    SQLAlchemyTemplateStore,
    create_engine,
    create_schema,
    create_session_factory,
    seed_defaults,
)
from .ports.clock import SystemClock
from .scheduling import NotificationSchedulerWorker
from .service import NotificationService
from .template import TemplateRenderer

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from .config import NotificationSettings
    from .ports.clock import IClock
    from .ports.sender import IChannelSender

logger = logging.getLogger(__name__)


def build_sender(
    notification_type: NotificationType,
    settings: NotificationSettings,
    inbox: InAppInbox,
) -> IChannelSender:
    """Build the sender for one notification type from settings."""
    match notification_type:
        case NotificationType.EMAIL:
            return SmtpEmailSender(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username or None,
                password=settings.smtp_password or None,
                use_tls=settings.smtp_use_tls,
                timeout=settings.smtp_timeout,
                from_email=settings.email_from or None,
            )
        case NotificationType.SLACK:
            return SlackChatSender(
                token=settings.slack_token,
                default_channel=settings.slack_default_channel,
                api_url=settings.slack_api_url,
                timeout=settings.slack_timeout,
            )
        case NotificationType.IN_APP:
            return InAppSender(inbox)
        case _:
            assert_never(notification_type)


def build_dispatcher(
    settings: NotificationSettings, inbox: InAppInbox | None = None
) -> ChannelDispatcher:
    if inbox is None:
        inbox = InAppInbox(settings.inbox_max_per_recipient)
    return ChannelDispatcher(build_sender(t, settings, inbox) for t in NotificationType)


def inbox_of(dispatcher: ChannelDispatcher) -> InAppInbox | None:
    """The inbox the dispatcher's in-app sender writes to, if it has one."""
    if not dispatcher.supports(NotificationType.IN_APP):
        return None
    sender = dispatcher.sender_for(NotificationType.IN_APP)
    return sender.inbox if isinstance(sender, InAppSender) else None


@dataclass
class NotificationContainer:
    """Wired application components. Call :meth:`close` on shutdown.

    ``inbox`` is the one the in-app sender writes to, or ``None`` when the
    dispatcher has no :class:`InAppSender`.
    """

    settings: NotificationSettings
    engine: AsyncEngine
    inbox: InAppInbox | None
    dispatcher: ChannelDispatcher
    notifications: NotificationService
    templates: TemplateService
    channels: ChannelService
    worker: NotificationSchedulerWorker

    async def close(self) -> None:
        await self.worker.stop()
        await self.engine.dispose()


async def build_container(
    settings: NotificationSettings,
    clock: IClock | None = None,
    dispatcher: ChannelDispatcher | None = None,
) -> NotificationContainer:
    """Create the schema, seed defaults when enabled, and wire the services."""
    clock = clock or SystemClock()
    engine = create_engine(settings.database_url, echo=settings.database_echo)
    await create_schema(engine)
    session_factory = create_session_factory(engine)

    notification_store = SQLAlchemyNotificationStore(session_factory)
    template_store = SQLAlchemyTemplateStore(session_factory)
    channel_store = SQLAlchemyChannelStore(session_factory)
    if settings.seed_defaults:
        await seed_defaults(template_store, channel_store)

    if dispatcher is None:
        inbox: InAppInbox | None = InAppInbox(settings.inbox_max_per_recipient)
        dispatcher = build_dispatcher(settings, inbox)
    else:
        inbox = inbox_of(dispatcher)
    renderer = TemplateRenderer()
    service = NotificationService(
        notification_store,
        template_store,
        dispatcher,
        renderer=renderer,
        clock=clock,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
    worker = NotificationSchedulerWorker(
        service,
        interval=settings.scheduler_interval_seconds,
        shutdown_grace=settings.scheduler_shutdown_grace_seconds,
    )
    logger.info(
        "Notification engine ready (types: %s)",
        ", ".join(t.value for t in dispatcher.supported_types()),
    )
    return NotificationContainer(
        settings=settings,
        engine=engine,
        inbox=inbox,
        dispatcher=dispatcher,
        notifications=service,
        templates=TemplateService(template_store, renderer=renderer, clock=clock),
        channels=ChannelService(channel_store, dispatcher, clock=clock),
        worker=worker,
    )
