"""Template and channel administration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .domain.models import Channel, ChannelRequest, Template, TemplateRequest
from .domain.validation import parse_model
from .exceptions import (
    ChannelNotFoundError,
    DuplicateNameError,
    TemplateNotFoundError,
)
from .ports.clock import SystemClock
from .template.renderer import TemplateRenderer

if TYPE_CHECKING:
    from .channels.dispatcher import ChannelDispatcher
    from .domain.enums import NotificationType
    from .ports.clock import IClock
    from .ports.store import IChannelStore, ITemplateStore

logger = logging.getLogger(__name__)


def _coerce(model_cls: Any, payload: Any) -> Any:
    if isinstance(payload, model_cls):
        return payload
    return parse_model(model_cls, payload)


class TemplateService:
    """
    CRUD over message templates.

    Names are unique among non-deleted templates. Content and subject are
    parsed on write, so a template with broken syntax is never stored.
    """

    def __init__(
        self,
        templates: ITemplateStore,
        renderer: TemplateRenderer | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._templates = templates
        self._renderer = renderer or TemplateRenderer()
        self._clock = clock or SystemClock()

    async def create(self, request: TemplateRequest | dict[str, Any]) -> Template:
        request = _coerce(TemplateRequest, request)
        if await self._templates.get_by_name(request.name) is not None:
            raise DuplicateNameError("Template", request.name)
        self._check(request.content, request.subject)

        now = self._clock.now()
        template = await self._templates.create(
            Template(
                name=request.name,
                type=request.type,
                subject=request.subject,
                content=request.content,
                variables=dict(request.variables),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Template %r created (id=%s)", template.name, template.id)
        return template

    async def list(self, active_only: bool = False) -> list[Template]:
        return await self._templates.list_all(active_only=active_only)

    async def get(self, template_id: int) -> Template:
        template = await self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    async def update(
        self,
        template_id: int,
        request: TemplateRequest | dict[str, Any],
        is_active: bool | None = None,
    ) -> Template:
        """Replace a template's definition, keeping its id and creation time."""
        request = _coerce(TemplateRequest, request)
        current = await self.get(template_id)
        if request.name != current.name:
            clash = await self._templates.get_by_name(request.name)
            if clash is not None and clash.id != template_id:
                raise DuplicateNameError("Template", request.name)
        self._check(request.content, request.subject)

        updated = current.model_copy(
            update={
                "name": request.name,
                "type": request.type,
                "subject": request.subject,
                "content": request.content,
                "variables": dict(request.variables),
                "is_active": current.is_active if is_active is None else is_active,
                "updated_at": self._clock.now(),
            }
        )
        saved = await self._templates.save(updated)
        if saved is None:
            raise TemplateNotFoundError(template_id)
        return saved

    async def delete(self, template_id: int) -> None:
        if not await self._templates.soft_delete(template_id):
            raise TemplateNotFoundError(template_id)
        logger.info("Template %s deleted", template_id)

    def _check(self, content: str, subject: str) -> None:
        self._renderer.check_syntax(content)
        if subject:
            self._renderer.check_syntax(subject)


class ChannelService:
    """Channel records plus connection tests against the live senders."""

    def __init__(
        self,
        channels: IChannelStore,
        dispatcher: ChannelDispatcher,
        clock: IClock | None = None,
    ) -> None:
        self._channels = channels
        self._dispatcher = dispatcher
        self._clock = clock or SystemClock()

    async def create(self, request: ChannelRequest | dict[str, Any]) -> Channel:
        request = _coerce(ChannelRequest, request)
        if await self._channels.get_by_name(request.name) is not None:
            raise DuplicateNameError("Channel", request.name)
        now = self._clock.now()
        channel = await self._channels.create(
            Channel(
                name=request.name,
                type=request.type,
                config=dict(request.config),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Channel %r created (id=%s)", channel.name, channel.id)
        return channel

    async def list(self) -> list[Channel]:
        return await self._channels.list_all()

    async def get(self, channel_id: int) -> Channel:
        channel = await self._channels.get(channel_id)
        if channel is None:
            raise ChannelNotFoundError(channel_id)
        return channel

    async def test_connection(self, notification_type: NotificationType) -> None:
        """Raise ``DispatchError`` if the sender for *notification_type* is unusable."""
        await self._dispatcher.test_connection(notification_type)
        logger.info("Connection test passed for %s", notification_type.value)
