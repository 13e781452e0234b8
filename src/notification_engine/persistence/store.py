"""SQLAlchemy async implementations of the record store ports."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..domain.enums import NotificationStatus
from ..domain.models import Channel, Notification, Template
from ..exceptions import StoreError
from .models import ChannelModel, NotificationModel, TemplateModel

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ..domain.models import NotificationFilter

logger = logging.getLogger(__name__)

# Domain field name -> ORM attribute name, where they differ.
_NOTIFICATION_ATTRS = {"metadata": "metadata_"}


class _SessionScoped:
    """One session and one transaction per store call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error("Store operation failed: %s", e)
            raise StoreError(str(e)) from e


# ── Notifications ────────────────────────────────────────────────


def _to_notification(row: NotificationModel) -> Notification:
    return Notification(
        id=row.id,
        type=row.type,
        status=row.status,
        title=row.title,
        message=row.message,
        recipient=row.recipient,
        channel=row.channel or "",
        template_id=row.template_id,
        scheduled_at=row.scheduled_at,
        sent_at=row.sent_at,
        metadata=dict(row.metadata_ or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


class SQLAlchemyNotificationStore(_SessionScoped):
    """
    SQLAlchemy-backed ``INotificationStore``.

    Soft-deleted rows stay in the table with ``deleted_at`` set, so the
    autoincrement id of a deleted record is never handed out again.
    """

    async def create(self, notification: Notification) -> Notification:
        row = NotificationModel(
            type=notification.type,
            status=notification.status,
            title=notification.title,
            message=notification.message,
            recipient=notification.recipient,
            channel=notification.channel,
            template_id=notification.template_id,
            scheduled_at=notification.scheduled_at,
            sent_at=notification.sent_at,
            metadata_=dict(notification.metadata),
            created_at=notification.created_at,
            updated_at=notification.updated_at,
        )
        async with self._transaction() as session:
            session.add(row)
            await session.flush()
            return _to_notification(row)

    async def get(self, notification_id: int) -> Notification | None:
        async with self._transaction() as session:
            row = await self._live(session, notification_id)
            return _to_notification(row) if row else None

    async def update(
        self, notification_id: int, changes: dict[str, Any]
    ) -> Notification | None:
        async with self._transaction() as session:
            row = await self._live(session, notification_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, _NOTIFICATION_ATTRS.get(key, key), value)
            await session.flush()
            return _to_notification(row)

    async def soft_delete(self, notification_id: int) -> bool:
        now = datetime.now(timezone.utc)
        async with self._transaction() as session:
            result = await session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.id == notification_id,
                    NotificationModel.deleted_at.is_(None),
                )
                .values(deleted_at=now, updated_at=now)
            )
            return bool(result.rowcount)

    async def query(
        self,
        criteria: NotificationFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Notification], int]:
        stmt = select(NotificationModel).where(NotificationModel.deleted_at.is_(None))
        if criteria.status is not None:
            stmt = stmt.where(NotificationModel.status == criteria.status)
        if criteria.type is not None:
            stmt = stmt.where(NotificationModel.type == criteria.type)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        page_stmt = (
            stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._transaction() as session:
            total = (await session.execute(count_stmt)).scalar_one()
            rows = (await session.execute(page_stmt)).scalars().all()
            return [_to_notification(r) for r in rows], int(total)

    async def due(self, now: datetime) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.status == NotificationStatus.SCHEDULED,
                NotificationModel.scheduled_at <= now,
                NotificationModel.deleted_at.is_(None),
            )
            .order_by(NotificationModel.scheduled_at, NotificationModel.id)
        )
        async with self._transaction() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_notification(r) for r in rows]

    async def claim(
        self,
        notification_id: int,
        expected: NotificationStatus,
        target: NotificationStatus,
        at: datetime,
    ) -> bool:
        async with self._transaction() as session:
            result = await session.execute(
                update(NotificationModel)
                .where(
                    NotificationModel.id == notification_id,
                    NotificationModel.status == expected,
                    NotificationModel.deleted_at.is_(None),
                )
                .values(status=target, updated_at=at)
            )
            return result.rowcount == 1

    @staticmethod
    async def _live(
        session: AsyncSession, notification_id: int
    ) -> NotificationModel | None:
        row = await session.get(NotificationModel, notification_id)
        if row is None or row.deleted_at is not None:
            return None
        return row


# ── Templates ────────────────────────────────────────────────────


def _to_template(row: TemplateModel) -> Template:
    return Template(
        id=row.id,
        name=row.name,
        type=row.type,
        subject=row.subject or "",
        content=row.content,
        variables=dict(row.variables or {}),
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


class SQLAlchemyTemplateStore(_SessionScoped):
    """SQLAlchemy-backed ``ITemplateStore``."""

    async def create(self, template: Template) -> Template:
        row = TemplateModel(
            name=template.name,
            type=template.type,
            subject=template.subject,
            content=template.content,
            variables=dict(template.variables),
            is_active=template.is_active,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
        async with self._transaction() as session:
            session.add(row)
            await session.flush()
            return _to_template(row)

    async def get(self, template_id: int) -> Template | None:
        async with self._transaction() as session:
            row = await session.get(TemplateModel, template_id)
            if row is None or row.deleted_at is not None:
                return None
            return _to_template(row)

    async def get_by_name(self, name: str) -> Template | None:
        stmt = select(TemplateModel).where(
            TemplateModel.name == name, TemplateModel.deleted_at.is_(None)
        )
        async with self._transaction() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _to_template(row) if row else None

    async def save(self, template: Template) -> Template | None:
        if template.id is None:
            return None
        async with self._transaction() as session:
            row = await session.get(TemplateModel, template.id)
            if row is None or row.deleted_at is not None:
                return None
            row.name = template.name
            row.type = template.type
            row.subject = template.subject
            row.content = template.content
            row.variables = dict(template.variables)
            row.is_active = template.is_active
            row.updated_at = template.updated_at
            await session.flush()
            return _to_template(row)

    async def soft_delete(self, template_id: int) -> bool:
        now = datetime.now(timezone.utc)
        async with self._transaction() as session:
            result = await session.execute(
                update(TemplateModel)
                .where(TemplateModel.id == template_id, TemplateModel.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
            )
            return bool(result.rowcount)

    async def list_all(self, active_only: bool = False) -> list[Template]:
        stmt = select(TemplateModel).where(TemplateModel.deleted_at.is_(None))
        if active_only:
            stmt = stmt.where(TemplateModel.is_active.is_(True))
        async with self._transaction() as session:
            rows = (await session.execute(stmt.order_by(TemplateModel.id))).scalars().all()
            return [_to_template(r) for r in rows]


# ── Channels ─────────────────────────────────────────────────────


def _to_channel(row: ChannelModel) -> Channel:
    return Channel(
        id=row.id,
        name=row.name,
        type=row.type,
        config=dict(row.config or {}),
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SQLAlchemyChannelStore(_SessionScoped):
    """SQLAlchemy-backed ``IChannelStore``."""

    async def create(self, channel: Channel) -> Channel:
        row = ChannelModel(
            name=channel.name,
            type=channel.type,
            config=dict(channel.config),
            is_active=channel.is_active,
            created_at=channel.created_at,
            updated_at=channel.updated_at,
        )
        async with self._transaction() as session:
            session.add(row)
            await session.flush()
            return _to_channel(row)

    async def get(self, channel_id: int) -> Channel | None:
        async with self._transaction() as session:
            row = await session.get(ChannelModel, channel_id)
            return _to_channel(row) if row else None

    async def get_by_name(self, name: str) -> Channel | None:
        stmt = select(ChannelModel).where(ChannelModel.name == name)
        async with self._transaction() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _to_channel(row) if row else None

    async def list_all(self) -> list[Channel]:
        async with self._transaction() as session:
            rows = (
                (await session.execute(select(ChannelModel).order_by(ChannelModel.id)))
                .scalars()
                .all()
            )
            return [_to_channel(r) for r in rows]
