"""SQLAlchemy persistence for notifications, templates and channels."""

from __future__ import annotations

from .database import create_engine, create_schema, create_session_factory
from .models import Base, ChannelModel, NotificationModel, TemplateModel
from .seed import DEFAULT_CHANNELS, DEFAULT_TEMPLATES, seed_defaults
from .store import (
    SQLAlchemyChannelStore,
    SQLAlchemyNotificationStore,
    SQLAlchemyTemplateStore,
)
from .types import JSONType, UTCDateTime

__all__ = [
    "DEFAULT_CHANNELS",
    "DEFAULT_TEMPLATES",
    "Base",
    "ChannelModel",
    "JSONType",
    "NotificationModel",
    "SQLAlchemyChannelStore",
    "SQLAlchemyNotificationStore",
    "SQLAlchemyTemplateStore",
    "TemplateModel",
    "UTCDateTime",
    "create_engine",
    "create_schema",
    "create_session_factory",
    "seed_defaults",
]
