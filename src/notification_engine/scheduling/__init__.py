"""Background scheduling loop."""

from __future__ import annotations

from .worker import NotificationSchedulerWorker

__all__ = ["NotificationSchedulerWorker"]
