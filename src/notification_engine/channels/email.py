"""SMTP email sender."""

from __future__ import annotations

import asyncio
import email.message
import email.policy
import logging
from typing import TYPE_CHECKING

import aiosmtplib

from ..domain.enums import NotificationType
from ..domain.models import HTML_CONTENT_KEY
from ..exceptions import DispatchError
from ..ports.sender import IChannelSender

if TYPE_CHECKING:
    from ..domain.models import Notification

logger = logging.getLogger(__name__)

_SMTP_ERRORS = (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError)


class SmtpEmailSender(IChannelSender):
    """
    Async SMTP email sender using aiosmtplib.

    The notification title becomes the subject and the message the plain-text
    body. A string under ``metadata["html_content"]`` is attached as an HTML
    alternative; any other value there is ignored.
    """

    channel_type = NotificationType.EMAIL

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        from_email: str | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email

    def build_message(self, notification: Notification) -> email.message.EmailMessage:
        message = email.message.EmailMessage(policy=email.policy.default)
        message["To"] = notification.recipient
        if self.from_email:
            message["From"] = self.from_email
        message["Subject"] = notification.title

        message.set_content(notification.message, subtype="plain", charset="utf-8")
        html = notification.metadata.get(HTML_CONTENT_KEY)
        if isinstance(html, str) and html:
            message.add_alternative(html, subtype="html", charset="utf-8")
        return message

    async def send(self, notification: Notification) -> None:
        if not self.from_email:
            raise DispatchError(
                self.channel_type.value,
                notification.recipient,
                "sender address (from_email) is not configured",
            )

        message = self.build_message(notification)
        try:
            async with self._client() as smtp:
                await self._login(smtp)
                await smtp.send_message(message)
        except _SMTP_ERRORS as e:
            logger.error("Failed to send email to %s: %s", notification.recipient, e)
            raise DispatchError(
                self.channel_type.value, notification.recipient, str(e) or type(e).__name__
            ) from e

        logger.info("Email sent to %s via SMTP", notification.recipient)

    async def test_connection(self) -> None:
        try:
            async with self._client() as smtp:
                await self._login(smtp)
        except _SMTP_ERRORS as e:
            raise DispatchError(
                self.channel_type.value,
                f"{self.host}:{self.port}",
                f"failed to connect to SMTP server: {e}",
            ) from e

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            timeout=self.timeout,
            start_tls=self.use_tls,
        )

    async def _login(self, smtp: aiosmtplib.SMTP) -> None:
        if self.username and self.password:
            await smtp.login(self.username, self.password)
