"""Test configuration for notification-engine."""

import pytest

from notification_engine.channels import ChannelDispatcher, InAppInbox, InAppSender
from notification_engine.domain import NotificationType
from notification_engine.memory import (
    FakeSender,
    FixedClock,
    InMemoryNotificationStore,
    InMemoryTemplateStore,
)
from notification_engine.service import NotificationService

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notification_store():
    return InMemoryNotificationStore()


@pytest.fixture
def template_store():
    return InMemoryTemplateStore()


@pytest.fixture
def email_sender():
    return FakeSender(NotificationType.EMAIL)


@pytest.fixture
def slack_sender():
    return FakeSender(NotificationType.SLACK)


@pytest.fixture
def inbox():
    return InAppInbox()


@pytest.fixture
def dispatcher(email_sender, slack_sender, inbox):
    return ChannelDispatcher([email_sender, slack_sender, InAppSender(inbox)])


@pytest.fixture
def service(notification_store, template_store, dispatcher, clock):
    return NotificationService(
        notification_store,
        template_store,
        dispatcher,
        clock=clock,
        default_page_size=10,
        max_page_size=50,
    )
