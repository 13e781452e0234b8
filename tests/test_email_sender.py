"""Tests for the SMTP email sender."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest

from notification_engine.channels import SmtpEmailSender
from notification_engine.domain import Notification, NotificationType
from notification_engine.exceptions import DispatchError


def _notification(**overrides):
    fields = {
        "id": 7,
        "type": NotificationType.EMAIL,
        "title": "Welcome",
        "message": "Plain body",
        "recipient": "ada@example.com",
        "channel": "ignored@example.com",
    }
    fields.update(overrides)
    return Notification(**fields)


def _smtp_client():
    smtp = AsyncMock()
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=smtp)
    client.__aexit__ = AsyncMock(return_value=False)
    return client, smtp


def _sender(**overrides):
    fields = {
        "host": "smtp.example.com",
        "port": 587,
        "username": "user",
        "password": "secret",
        "from_email": "noreply@example.com",
    }
    fields.update(overrides)
    return SmtpEmailSender(**fields)


def test_build_message_headers_and_body():
    """Test To is the recipient and the title becomes the subject."""
    message = _sender().build_message(_notification())

    assert message["To"] == "ada@example.com"
    assert message["From"] == "noreply@example.com"
    assert message["Subject"] == "Welcome"
    assert message.get_content().strip() == "Plain body"


def test_build_message_html_alternative():
    """Test a string html_content adds an HTML part; other values are ignored."""
    sender = _sender()

    with_html = sender.build_message(
        _notification(metadata={"html_content": "<p>Hi</p>"})
    )
    without_html = sender.build_message(_notification(metadata={"html_content": 3}))

    assert with_html.is_multipart()
    html = with_html.get_body(preferencelist=("html",))
    assert "<p>Hi</p>" in html.get_content()
    assert not without_html.is_multipart()


@pytest.mark.asyncio
async def test_send_logs_in_and_sends():
    """Test credentials are used and the message is handed to SMTP."""
    client, smtp = _smtp_client()

    with patch("aiosmtplib.SMTP", return_value=client) as smtp_cls:
        await _sender().send(_notification())

    smtp_cls.assert_called_once_with(
        hostname="smtp.example.com", port=587, timeout=10.0, start_tls=True
    )
    smtp.login.assert_awaited_once_with("user", "secret")
    smtp.send_message.assert_awaited_once()
    sent = smtp.send_message.await_args.args[0]
    assert sent["To"] == "ada@example.com"


@pytest.mark.asyncio
async def test_send_without_credentials_skips_login():
    """Test anonymous relays are supported."""
    client, smtp = _smtp_client()

    with patch("aiosmtplib.SMTP", return_value=client):
        await _sender(username=None, password=None).send(_notification())

    smtp.login.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_failure_raises_dispatch_error():
    """Test SMTP errors surface as DispatchError."""
    client, smtp = _smtp_client()
    smtp.send_message.side_effect = aiosmtplib.SMTPException("mailbox unavailable")

    with patch("aiosmtplib.SMTP", return_value=client):
        with pytest.raises(DispatchError) as exc_info:
            await _sender().send(_notification())

    assert exc_info.value.channel == "email"
    assert exc_info.value.recipient == "ada@example.com"
    assert "mailbox unavailable" in exc_info.value.reason


@pytest.mark.asyncio
async def test_send_requires_from_address():
    """Test a missing sender address fails without contacting the server."""
    with patch("aiosmtplib.SMTP") as smtp_cls:
        with pytest.raises(DispatchError):
            await _sender(from_email=None).send(_notification())

    smtp_cls.assert_not_called()


@pytest.mark.asyncio
async def test_test_connection():
    """Test the connection check logs in and reports connect errors."""
    client, smtp = _smtp_client()
    with patch("aiosmtplib.SMTP", return_value=client):
        await _sender().test_connection()
    smtp.login.assert_awaited_once()
    smtp.send_message.assert_not_awaited()

    with patch("aiosmtplib.SMTP", side_effect=OSError("refused")):
        with pytest.raises(DispatchError):
            await _sender().test_connection()
