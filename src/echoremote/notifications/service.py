"""Notification service: full refreshes, push handling and local writes."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from echoremote.account.client import AccountClient, ensure_match
from echoremote.account.push import PushEvent
from echoremote.core.config import NotificationConfig
from echoremote.core.errors import NotFoundError, UnexpectedResponseError
from echoremote.core.types import WarningSink
from echoremote.devices.models import Device
from echoremote.devices.store import DeviceStore
from echoremote.notifications.models import (
    NotificationKind,
    NotificationRecord,
    NotificationStatus,
    PendingUpdate,
    UpdateKind,
)
from echoremote.notifications.payloads import apply_changes, build_notification, load_defaults
from echoremote.notifications.reconciler import NotificationReconciler
from echoremote.notifications.store import NotificationStore

logger = logging.getLogger(__name__)

NOTIFICATIONS_PATH = "/api/notifications"


class NotificationService:
    """Owns the notification cache and the reconciler that maintains it.

    The service is also the reconciler's FullRefreshFetcher.

    Args:
        client: Account transport.
        devices: Device cache used to resolve the target of new notifications.
        store: Optional pre-built NotificationStore.
        config: NotificationConfig; ``defaults_path`` overrides the bundled
            payload defaults.
        warn: Sink for reconciliation failures.
    """

    def __init__(
        self,
        client: AccountClient,
        devices: DeviceStore,
        store: NotificationStore | None = None,
        config: NotificationConfig | None = None,
        warn: WarningSink | None = None,
    ) -> None:
        self._client = client
        self._devices = devices
        self._store = store or NotificationStore()
        self._config = config or NotificationConfig()
        self._defaults = load_defaults(self._config.defaults_path)
        self._reconciler = NotificationReconciler(self._store, self, warn)

    @property
    def store(self) -> NotificationStore:
        return self._store

    @property
    def reconciler(self) -> NotificationReconciler:
        return self._reconciler

    # -- cache maintenance ---------------------------------------------------

    async def fetch_all(self) -> list[NotificationRecord]:
        response = await self._client.get(NOTIFICATIONS_PATH)
        items = ensure_match(response, "notifications")
        if not all("id" in item for item in items):
            raise UnexpectedResponseError(f"unexpected notifications response: {response!r}")
        return [NotificationRecord.model_validate(item) for item in items]

    async def initialize(self) -> list[NotificationRecord]:
        records = await self._reconciler.refresh()
        logger.info("Loaded %d notification(s)", len(records))
        return records

    def handle_push(self, event: PushEvent) -> asyncio.Task | None:
        return self._reconciler.enqueue(PendingUpdate.from_push(event))

    # -- lookups -------------------------------------------------------------

    def find(self, ref: NotificationRecord | str) -> NotificationRecord | None:
        if isinstance(ref, NotificationRecord):
            return ref
        return self._store.find(ref)

    def require(self, ref: NotificationRecord | str) -> NotificationRecord:
        found = self.find(ref)
        if found is None:
            raise NotFoundError("notification", ref)
        return found

    # -- local writes --------------------------------------------------------

    async def create(
        self,
        device: Device | str,
        kind: str,
        label: str | None,
        when: datetime | int | float | str,
        status: str = NotificationStatus.ON,
        sound: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        """Create a reminder, alarm or timer on *device*.

        Raises:
            NotFoundError: If the device is unknown.
            ValueError: On an invalid kind, status, time or duration.
        """
        target = self._devices.require(device)
        body = build_notification(target, kind, label, when, status, sound, defaults=self._defaults)
        response = await self._client.put(f"{NOTIFICATIONS_PATH}/createReminder", json=body)
        record = NotificationRecord.model_validate(response)
        self._reconciler.upsert(record)
        return record

    async def change(
        self,
        ref: NotificationRecord | str,
        label: str | None = None,
        when: datetime | int | float | str | None = None,
        status: str | None = None,
        sound: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        found = self.require(ref)
        body = apply_changes(found.to_payload(), label, when, status, sound)
        response = await self._client.put(f"{NOTIFICATIONS_PATH}/{found.id}", json=body)
        record = NotificationRecord.model_validate(response)
        self._reconciler.upsert(record)
        return record

    async def delete(self, ref: NotificationRecord | str) -> Any:
        """Delete on the server, then let the reconciler drop the cached copy."""
        found = self.require(ref)
        response = await self._client.delete(
            f"{NOTIFICATIONS_PATH}/{found.id}", json=found.to_payload(),
        )
        self._reconciler.enqueue(
            PendingUpdate(kind=UpdateKind.DELETE, id=found.key, version=found.version)
        )
        return response

    # -- sounds and device state ---------------------------------------------

    def _device_params(self, device: Device | str) -> dict[str, Any]:
        target = self._devices.require(device)
        return {
            "deviceSerialNumber": target.serial_number,
            "deviceType": target.device_type,
            "softwareVersion": target.software_version,
        }

    async def get_sounds(self, device: Device | str) -> list[dict[str, Any]]:
        response = await self._client.get(
            "/api/notification/migration/sounds", **self._device_params(device),
        )
        return ensure_match(response, "notificationSounds")

    async def get_default_sound(
        self,
        device: Device | str,
        kind: str = NotificationKind.ALARM,
    ) -> Any:
        return await self._client.get(
            "/api/notification/migration/default-sound",
            notificationType=str(kind).upper(),
            **self._device_params(device),
        )

    async def get_device_notification_states(self) -> list[dict[str, Any]]:
        response = await self._client.get("/api/device-notification-state")
        return ensure_match(response, "deviceNotificationStates")
