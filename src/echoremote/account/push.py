"""Push event channel for out-of-band notification changes.

The websocket transport that receives server pushes lives outside this
package; it hands each raw payload to :meth:`PushChannel.publish`, which
validates it and fans it out to subscribers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class PushEventType(StrEnum):
    CHANGE = "CHANGE"
    DELETE = "DELETE"


class PushEvent(BaseModel):
    """A ``notification-change`` push: id and version hint, no payload."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: PushEventType = Field(alias="eventType")
    notification_id: str = Field(alias="notificationId", min_length=1)
    notification_version: str | None = Field(default=None, alias="notificationVersion")

    @field_validator("notification_version", mode="before")
    @classmethod
    def _version_as_str(cls, value: Any) -> str | None:
        return None if value is None else str(value)


PushHandler = Callable[[PushEvent], object]


class PushChannel:
    """In-process fan-out of validated push events."""

    def __init__(self) -> None:
        self._handlers: list[PushHandler] = []

    def subscribe(self, handler: PushHandler) -> Callable[[], None]:
        """Register *handler*; returns a callable that unregisters it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, payload: PushEvent | dict[str, Any]) -> PushEvent:
        """Validate *payload* and deliver it to every subscriber.

        Raises:
            pydantic.ValidationError: If the payload lacks an id or event type.
        """
        event = payload if isinstance(payload, PushEvent) else PushEvent.model_validate(payload)
        logger.debug(
            "Push %s %s @ %s", event.event_type, event.notification_id, event.notification_version,
        )
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Push handler failed for %s", event.notification_id)
        return event

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()
