"""Tests for the in-memory stores used by unit tests and single-process setups."""

from datetime import datetime, timezone

import pytest

from notification_engine.domain import Notification, NotificationStatus, NotificationType
from notification_engine.memory import InMemoryNotificationStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _notification(**overrides):
    fields = {
        "type": NotificationType.IN_APP,
        "title": "t",
        "message": "m",
        "recipient": "u1",
        "metadata": {"tags": ["a"]},
    }
    fields.update(overrides)
    return Notification(**fields)


@pytest.mark.asyncio
async def test_records_are_copied():
    """Test callers cannot mutate stored state through returned records."""
    store = InMemoryNotificationStore()
    created = await store.create(_notification())

    created.metadata["tags"].append("b")
    fetched = await store.get(created.id)

    assert fetched.metadata == {"tags": ["a"]}


@pytest.mark.asyncio
async def test_claim_is_compare_and_swap():
    """Test only the first claim on a scheduled record wins."""
    store = InMemoryNotificationStore()
    created = await store.create(
        _notification(status=NotificationStatus.SCHEDULED, scheduled_at=T0)
    )

    first = await store.claim(
        created.id, NotificationStatus.SCHEDULED, NotificationStatus.DISPATCHING, T0
    )
    second = await store.claim(
        created.id, NotificationStatus.SCHEDULED, NotificationStatus.DISPATCHING, T0
    )

    assert (first, second) == (True, False)
    assert (await store.get(created.id)).status == NotificationStatus.DISPATCHING


@pytest.mark.asyncio
async def test_soft_deleted_rows_are_kept_but_hidden():
    """Test soft delete hides a row from reads while keeping it stored."""
    store = InMemoryNotificationStore()
    created = await store.create(_notification())

    assert await store.soft_delete(created.id)

    assert await store.get(created.id) is None
    assert store.raw(created.id).deleted_at is not None
    assert len(store) == 1
