"""Request validation: pydantic models in, structured ``ValidationError`` out."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from .models import NotificationRequest, ScheduleRequest

M = TypeVar("M", bound=BaseModel)

_REQUIRED_FIELDS = ("type", "title", "message", "recipient")


def errors_from_pydantic(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Convert pydantic errors to ``{field: [messages]}``."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors


def parse_model(model_cls: type[M], payload: dict[str, Any]) -> M:
    """Build *model_cls* from a raw payload, raising our ``ValidationError``."""
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(errors_from_pydantic(exc)) from exc


def validate_notification_request(request: NotificationRequest) -> None:
    """Reject requests missing a required field (blank strings count as missing)."""
    errors: dict[str, list[str]] = {}
    for name in _REQUIRED_FIELDS:
        value = getattr(request, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.setdefault(name, []).append("is required")
    if isinstance(request, ScheduleRequest) and request.scheduled_at is None:
        errors.setdefault("scheduled_at", []).append("is required")
    if errors:
        raise ValidationError(errors)
