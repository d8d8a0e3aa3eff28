"""Notification data models."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from echoremote.account.push import PushEvent


class NotificationKind(StrEnum):
    REMINDER = "Reminder"
    ALARM = "Alarm"
    TIMER = "Timer"


class NotificationStatus(StrEnum):
    ON = "ON"
    OFF = "OFF"
    PAUSED = "PAUSED"


class UpdateKind(StrEnum):
    CHANGE = "CHANGE"
    DELETE = "DELETE"


def parse_version(value: Any) -> float | None:
    """Return *value* as a number, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


class NotificationRecord(BaseModel):
    """A reminder, alarm or timer as returned by the server.

    Only the fields the cache relies on are declared; everything else the
    server sends is kept as extra data and written back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    notification_index: str | None = Field(default=None, alias="notificationIndex")
    kind: str = Field(alias="type")
    version: str | None = None
    status: str | None = None
    reminder_label: str | None = Field(default=None, alias="reminderLabel")
    timer_label: str | None = Field(default=None, alias="timerLabel")

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_str(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def key(self) -> str:
        """Cache key; push events refer to records by notification index."""
        return self.notification_index or self.id

    @property
    def label(self) -> str | None:
        return self.timer_label if self.kind == NotificationKind.TIMER else self.reminder_label

    @property
    def version_number(self) -> float | None:
        return parse_version(self.version)

    def to_payload(self) -> dict[str, Any]:
        """Serialise back to the wire shape."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class PendingUpdate(BaseModel):
    """One queued push hint awaiting reconciliation."""

    model_config = ConfigDict(frozen=True)

    kind: UpdateKind
    id: str
    version: str | None = None

    @classmethod
    def from_push(cls, event: PushEvent) -> PendingUpdate:
        return cls(
            kind=UpdateKind(event.event_type.value),
            id=event.notification_id,
            version=event.notification_version,
        )

    def __str__(self) -> str:
        return f"{self.kind} {self.id} @ {self.version}"
