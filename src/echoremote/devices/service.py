"""Device operations against the account API."""

from __future__ import annotations

import logging

from echoremote.account.client import AccountClient, ensure_match
from echoremote.devices.models import Device
from echoremote.devices.store import DeviceStore

logger = logging.getLogger(__name__)

DEVICES_PATH = "/api/devices-v2/device"


class DeviceService:
    """Keeps a DeviceStore in sync with the account and edits devices."""

    def __init__(self, client: AccountClient, store: DeviceStore | None = None) -> None:
        self._client = client
        self._store = store or DeviceStore()

    @property
    def store(self) -> DeviceStore:
        return self._store

    async def refresh(self) -> list[Device]:
        response = await self._client.get(DEVICES_PATH)
        devices = [Device.model_validate(d) for d in ensure_match(response, "devices")]
        self._store.replace_all(devices)
        logger.info("Loaded %d device(s)", len(devices))
        return devices

    async def rename(self, ref: Device | str, name: str) -> Device:
        """Rename a device. The cache is updated if the server echoes the new name."""
        device = self._store.require(ref)
        response = await self._client.put(
            f"{DEVICES_PATH}/{device.serial_number}",
            json={
                "accountName": name,
                "serialNumber": device.serial_number,
                "deviceAccountId": device.device_account_id,
                "deviceType": device.device_type,
            },
        )
        if not (isinstance(response, dict) and "accountName" in response and "serialNumber" in response):
            logger.warning("Rename of %s returned an unexpected body", device.serial_number)
            return device
        renamed = device.model_copy(update={"account_name": response["accountName"]})
        self._store.upsert(renamed)
        return renamed

    async def delete(self, ref: Device | str) -> None:
        device = self._store.require(ref)
        await self._client.delete(
            f"/api/devices/device/{device.serial_number}?deviceType={device.device_type}",
        )
        self._store.delete(device.serial_number)
