"""NotificationService: the notification lifecycle engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .domain.enums import NotificationStatus
from .domain.models import (
    Notification,
    NotificationFilter,
    NotificationPage,
    NotificationPatch,
    ensure_utc,
)
from .domain.validation import parse_model, validate_notification_request
from .exceptions import (
    DispatchError,
    NotificationNotFoundError,
    TemplateError,
    TemplateNotFoundError,
    UnsupportedTypeError,
    ValidationError,
)
from .ports.clock import SystemClock
from .template.renderer import TemplateRenderer

if TYPE_CHECKING:
    from datetime import datetime

    from .channels.dispatcher import ChannelDispatcher
    from .domain.enums import NotificationType
    from .domain.models import NotificationRequest, ScheduleRequest
    from .ports.clock import IClock
    from .ports.store import INotificationStore, ITemplateStore

logger = logging.getLogger(__name__)

# Fields that must stay non-blank after a patch.
_REQUIRED_PATCH_FIELDS = ("title", "message", "recipient")


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of an immediate submission.

    The record is always persisted; ``error`` is set when delivery failed
    and the record is ``failed``.
    """

    notification: Notification
    error: DispatchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProcessDueReport:
    """Counts from one scheduling pass. ``skipped`` records were claimed elsewhere."""

    sent: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def processed(self) -> int:
        return self.sent + self.failed


class NotificationService:
    """
    Creates, dispatches, schedules, lists and edits notifications.

    Every status change goes through the store, so the stored record always
    reflects the latest lifecycle state. Scheduled notifications are claimed
    with a compare-and-swap (``scheduled`` to ``dispatching``) before they are
    sent, so two concurrent passes never deliver the same record twice.
    """

    def __init__(
        self,
        notifications: INotificationStore,
        templates: ITemplateStore,
        dispatcher: ChannelDispatcher,
        renderer: TemplateRenderer | None = None,
        clock: IClock | None = None,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ) -> None:
        self._notifications = notifications
        self._templates = templates
        self._dispatcher = dispatcher
        self._renderer = renderer or TemplateRenderer()
        self._clock = clock or SystemClock()
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    # ── Creation ─────────────────────────────────────────────────

    async def submit(self, request: NotificationRequest) -> SubmitResult:
        """
        Persist a notification and deliver it right away.

        Raises ``ValidationError``, ``UnsupportedTypeError`` or
        ``TemplateError`` before anything is stored. A delivery failure is
        not raised: the record is stored as ``failed`` and the error is
        returned alongside it.
        """
        notification = await self._prepare(request, NotificationStatus.PENDING)
        notification = await self._notifications.create(notification)
        logger.info(
            "Notification %s created (%s to %s)",
            notification.id,
            notification.type.value,
            notification.recipient,
        )

        try:
            await self._dispatcher.send(notification)
        except DispatchError as e:
            failed = await self._finish(notification, NotificationStatus.FAILED)
            logger.warning("Notification %s failed: %s", notification.id, e.reason)
            return SubmitResult(failed, e)

        sent = await self._finish(notification, NotificationStatus.SENT)
        return SubmitResult(sent)

    async def schedule(self, request: ScheduleRequest) -> Notification:
        """Persist a notification in ``scheduled`` status. Nothing is sent."""
        notification = await self._prepare(request, NotificationStatus.SCHEDULED)
        notification = notification.model_copy(
            update={"scheduled_at": request.scheduled_at}
        )
        notification = await self._notifications.create(notification)
        logger.info(
            "Notification %s scheduled for %s",
            notification.id,
            notification.scheduled_at.isoformat() if notification.scheduled_at else "?",
        )
        return notification

    async def _prepare(
        self, request: NotificationRequest, status: NotificationStatus
    ) -> Notification:
        validate_notification_request(request)
        if not self._dispatcher.supports(request.type):
            raise UnsupportedTypeError(request.type)  # type: ignore[arg-type]

        title, message = request.title, request.message
        if request.template_id is not None:
            template = await self._templates.get(request.template_id)
            if template is None:
                raise TemplateNotFoundError(request.template_id)
            if not template.is_active:
                raise TemplateError(f"Template {template.name!r} is inactive")
            rendered = self._renderer.render(
                template.content, template.subject, request.template_data
            )
            message = rendered.body
            if template.subject:
                title = rendered.subject

        now = self._clock.now()
        return Notification(
            type=request.type,  # type: ignore[arg-type]
            status=status,
            title=title,
            message=message,
            recipient=request.recipient,
            channel=request.channel,
            template_id=request.template_id,
            metadata=dict(request.metadata),
            created_at=now,
            updated_at=now,
        )

    # ── Scheduling ───────────────────────────────────────────────

    async def process_due(self, now: datetime | None = None) -> ProcessDueReport:
        """
        Deliver every scheduled notification whose time has come.

        One failing record never stops the pass: errors are logged and the
        loop moves on. Records another pass claimed first are skipped.
        """
        cutoff = ensure_utc(now) if now is not None else self._clock.now()
        due = await self._notifications.due(cutoff)
        if not due:
            return ProcessDueReport()

        sent = failed = skipped = 0
        for notification in due:
            try:
                outcome = await self._process_one(notification)
            except Exception:
                logger.exception(
                    "Failed to process scheduled notification %s", notification.id
                )
                failed += 1
                continue
            if outcome is None:
                skipped += 1
            elif outcome is NotificationStatus.SENT:
                sent += 1
            else:
                failed += 1

        logger.info(
            "Scheduled pass done: %d sent, %d failed, %d skipped", sent, failed, skipped
        )
        return ProcessDueReport(sent=sent, failed=failed, skipped=skipped)

    async def _process_one(
        self, notification: Notification
    ) -> NotificationStatus | None:
        assert notification.id is not None
        at = self._clock.now()
        claimed = await self._notifications.claim(
            notification.id,
            NotificationStatus.SCHEDULED,
            NotificationStatus.DISPATCHING,
            at,
        )
        if not claimed:
            logger.debug("Notification %s already claimed", notification.id)
            return None

        # Send what is stored now, not the snapshot taken when the pass began.
        current = await self._notifications.get(notification.id)
        if current is None:
            logger.debug("Notification %s deleted after claim", notification.id)
            return None
        notification = current

        try:
            await self._dispatcher.send(notification)
        except (DispatchError, UnsupportedTypeError) as e:
            await self._finish(notification, NotificationStatus.FAILED)
            logger.warning(
                "Failed to send scheduled notification %s: %s", notification.id, e
            )
            return NotificationStatus.FAILED

        await self._finish(notification, NotificationStatus.SENT)
        return NotificationStatus.SENT

    async def _finish(
        self, notification: Notification, target: NotificationStatus
    ) -> Notification:
        assert notification.id is not None
        at = self._clock.now()
        if target is NotificationStatus.SENT:
            notification.mark_sent(at)
        else:
            notification.mark_failed(at)

        changes: dict[str, Any] = {"status": target, "updated_at": at}
        if notification.sent_at is not None:
            changes["sent_at"] = notification.sent_at
        stored = await self._notifications.update(notification.id, changes)
        if stored is None:
            raise NotificationNotFoundError(notification.id)
        return stored

    # ── Queries and edits ────────────────────────────────────────

    async def get(self, notification_id: int) -> Notification:
        notification = await self._notifications.get(notification_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        return notification

    async def list(
        self,
        limit: int | None = None,
        offset: int = 0,
        status: NotificationStatus | str | None = None,
        type: NotificationType | str | None = None,
    ) -> NotificationPage:
        """Page of notifications, newest first. ``limit`` is capped at the max page size."""
        if limit is None:
            limit = self._default_page_size
        errors: dict[str, list[str]] = {}
        if limit <= 0:
            errors["limit"] = ["must be greater than 0"]
        if offset < 0:
            errors["offset"] = ["must not be negative"]
        if errors:
            raise ValidationError(errors)

        criteria = parse_model(NotificationFilter, {"status": status, "type": type})
        limit = min(limit, self._max_page_size)
        items, total = await self._notifications.query(criteria, limit, offset)
        return NotificationPage(items=items, total=total, limit=limit, offset=offset)

    async def update(
        self,
        notification_id: int,
        patch: NotificationPatch | dict[str, Any],
    ) -> Notification:
        """
        Change content fields of a notification.

        Status, type and timestamps are not editable; a dict naming them is
        rejected with ``ValidationError``.
        """
        if not isinstance(patch, NotificationPatch):
            patch = parse_model(NotificationPatch, patch)
        changes = patch.model_dump(exclude_unset=True)

        errors: dict[str, list[str]] = {}
        for name in _REQUIRED_PATCH_FIELDS:
            if name in changes and not (changes[name] or "").strip():
                errors[name] = ["must not be blank"]
        if "channel" in changes and changes["channel"] is None:
            changes["channel"] = ""
        if "metadata" in changes and changes["metadata"] is None:
            changes["metadata"] = {}
        if errors:
            raise ValidationError(errors)

        changes["updated_at"] = self._clock.now()
        updated = await self._notifications.update(notification_id, changes)
        if updated is None:
            raise NotificationNotFoundError(notification_id)
        return updated

    async def delete(self, notification_id: int) -> None:
        if not await self._notifications.soft_delete(notification_id):
            raise NotificationNotFoundError(notification_id)
        logger.info("Notification %s deleted", notification_id)
