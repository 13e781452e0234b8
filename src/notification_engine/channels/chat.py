"""Slack chat sender using httpx against the Slack Web API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from ..domain.enums import NotificationType
from ..domain.models import ATTACHMENTS_KEY, BLOCKS_KEY
from ..exceptions import DispatchError
from ..ports.sender import IChannelSender

if TYPE_CHECKING:
    from ..domain.models import Notification

logger = logging.getLogger(__name__)


def _structured_list(value: Any) -> list[dict[str, Any]] | None:
    """Return *value* as a list of dicts, or ``None`` if it is not one."""
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(item, Mapping) for item in value):
        return None
    return [dict(item) for item in value]


class SlackChatSender(IChannelSender):
    """
    Posts notifications to Slack with ``chat.postMessage``.

    The destination is the notification's channel override, or the
    configured default channel. Lists of mappings under ``metadata["blocks"]``
    and ``metadata["attachments"]`` are attached as-is; malformed values are
    dropped without failing the send.
    """

    channel_type = NotificationType.SLACK

    def __init__(
        self,
        token: str,
        default_channel: str = "#general",
        api_url: str = "https://slack.com/api",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.default_channel = default_channel
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, notification: Notification) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "channel": notification.channel or self.default_channel,
            "text": notification.message,
        }
        for key in (BLOCKS_KEY, ATTACHMENTS_KEY):
            if key not in notification.metadata:
                continue
            items = _structured_list(notification.metadata[key])
            if items is None:
                logger.debug(
                    "Ignoring malformed %r metadata on notification %s",
                    key,
                    notification.id,
                )
                continue
            payload[key] = items
        return payload

    async def send(self, notification: Notification) -> None:
        payload = self.build_payload(notification)
        destination = payload["channel"]
        try:
            await self._call("chat.postMessage", payload)
        except DispatchError as e:
            logger.error("Failed to send Slack message to %s: %s", destination, e.reason)
            raise DispatchError(self.channel_type.value, destination, e.reason) from e

        logger.info("Slack message sent to %s", destination)

    async def test_connection(self) -> None:
        await self._call("auth.test", {})

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.api_url}/{method}", json=payload, headers=headers
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise DispatchError(
                self.channel_type.value, method, f"HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise DispatchError(self.channel_type.value, method, str(e)) from e

        if not isinstance(body, dict):
            raise DispatchError(self.channel_type.value, method, "unexpected response body")
        if not body.get("ok"):
            error = body.get("error", "unknown_error")
            raise DispatchError(
                self.channel_type.value, method, f"Slack API error: {error}"
            )
        return body
