"""Channel senders and the type-based dispatcher."""

from __future__ import annotations

from .chat import SlackChatSender
from .dispatcher import ChannelDispatcher
from .email import SmtpEmailSender
from .in_app import InAppInbox, InAppSender, InboxMessage

__all__ = [
    "ChannelDispatcher",
    "InAppInbox",
    "InAppSender",
    "InboxMessage",
    "SlackChatSender",
    "SmtpEmailSender",
]
