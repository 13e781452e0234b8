"""Tests for the composition root."""

import pytest

from notification_engine.bootstrap import build_container, build_dispatcher, build_sender
from notification_engine.channels import (
    ChannelDispatcher,
    InAppInbox,
    InAppSender,
    SlackChatSender,
    SmtpEmailSender,
)
from notification_engine.config import NotificationSettings
from notification_engine.domain import NotificationRequest, NotificationType


def _settings(**overrides):
    fields = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "smtp_host": "mail.internal",
        "smtp_port": 2525,
        "smtp_from_email": "noreply@example.com",
        "slack_token": "xoxb-test",
        "slack_default_channel": "#alerts",
        "scheduler_interval_seconds": 5,
    }
    fields.update(overrides)
    return NotificationSettings(_env_file=None, **fields)


def test_build_sender_per_type():
    """Test every notification type gets its sender, configured from settings."""
    settings = _settings()
    inbox = InAppInbox()

    email = build_sender(NotificationType.EMAIL, settings, inbox)
    slack = build_sender(NotificationType.SLACK, settings, inbox)
    in_app = build_sender(NotificationType.IN_APP, settings, inbox)

    assert isinstance(email, SmtpEmailSender)
    assert (email.host, email.port, email.from_email) == (
        "mail.internal",
        2525,
        "noreply@example.com",
    )
    assert isinstance(slack, SlackChatSender)
    assert slack.default_channel == "#alerts"
    assert isinstance(in_app, InAppSender)
    assert in_app.inbox is inbox


def test_dispatcher_covers_every_type():
    """Test the built dispatcher supports the whole closed set of types."""
    dispatcher = build_dispatcher(_settings())

    assert set(dispatcher.supported_types()) == set(NotificationType)


@pytest.mark.asyncio
async def test_build_container_wires_and_seeds():
    """Test the container creates the schema, seeds defaults and works end to end."""
    container = await build_container(_settings())
    try:
        assert len(await container.templates.list()) == 4
        assert len(await container.channels.list()) == 3

        result = await container.notifications.submit(
            NotificationRequest(
                type=NotificationType.IN_APP,
                title="Hi",
                message="Welcome",
                recipient="u1",
            )
        )
        assert result.ok
        assert container.inbox.unread_count("u1") == 1

        await container.worker.start()
        assert container.worker.running
    finally:
        await container.close()
    assert not container.worker.running


@pytest.mark.asyncio
async def test_seeding_can_be_disabled():
    """Test seed_defaults=False leaves the tables empty."""
    container = await build_container(_settings(seed_defaults=False))
    try:
        assert await container.templates.list() == []
    finally:
        await container.close()


def test_default_inbox_uses_configured_cap():
    dispatcher = build_dispatcher(_settings(inbox_max_per_recipient=3))

    sender = dispatcher.sender_for(NotificationType.IN_APP)

    assert isinstance(sender, InAppSender)
    assert sender.inbox.max_per_recipient == 3


@pytest.mark.asyncio
async def test_injected_dispatcher_exposes_its_inbox():
    """Test the container's inbox is the one the injected in-app sender writes to."""
    inbox = InAppInbox()
    dispatcher = ChannelDispatcher([InAppSender(inbox)])
    container = await build_container(_settings(), dispatcher=dispatcher)
    try:
        assert container.inbox is inbox

        await container.notifications.submit(
            NotificationRequest(
                type=NotificationType.IN_APP,
                title="Hi",
                message="Welcome",
                recipient="u1",
            )
        )
        assert container.inbox.unread_count("u1") == 1
    finally:
        await container.close()


@pytest.mark.asyncio
async def test_injected_dispatcher_without_in_app_has_no_inbox():
    """Test the container reports no inbox when nothing delivers in-app."""
    settings = _settings()
    dispatcher = ChannelDispatcher(
        [build_sender(NotificationType.SLACK, settings, InAppInbox())]
    )
    container = await build_container(settings, dispatcher=dispatcher)
    try:
        assert container.inbox is None
    finally:
        await container.close()
