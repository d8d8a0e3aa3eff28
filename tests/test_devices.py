"""Tests for the device cache and device operations."""

from __future__ import annotations

import pytest

from echoremote.core.errors import NotFoundError, UnexpectedResponseError
from echoremote.core.signals import ChangeNotifier
from echoremote.devices import Device, DeviceService, DeviceStore


def _device(serial: str, name: str, **extra) -> Device:
    return Device(serialNumber=serial, accountName=name, deviceType="A1", **extra)


class TestDeviceStore:
    def setup_method(self) -> None:
        self.notifier = ChangeNotifier()
        self.events: list[str] = []
        self.notifier.subscribe(self.events.append)
        self.store = DeviceStore(self.notifier)
        self.store.replace_all([_device("S1", "Living Room"), _device("S2", "Kitchen's Echo")])

    def test_find_by_serial(self) -> None:
        assert self.store.find("S1").account_name == "Living Room"

    def test_find_by_normalised_name(self) -> None:
        assert self.store.find("living room").serial_number == "S1"
        assert self.store.find("kitchens echo").serial_number == "S2"

    def test_find_passes_device_through(self) -> None:
        other = _device("S9", "Elsewhere")
        assert self.store.find(other) is other

    def test_find_rejects_non_strings(self) -> None:
        assert self.store.find(None) is None
        assert self.store.find(42) is None  # type: ignore[arg-type]

    def test_require(self) -> None:
        with pytest.raises(NotFoundError, match="device not found"):
            self.store.require("Garage")

    def test_delete_reindexes(self) -> None:
        assert self.store.delete("S1") is True
        assert self.store.find("living room") is None
        assert self.store.delete("S1") is False
        assert self.events == ["change-device", "change-device"]


class TestDeviceService:
    @pytest.mark.asyncio
    async def test_refresh(self, routed_client) -> None:
        routed_client.routes[("GET", "/api/devices-v2/device")] = {
            "devices": [
                {"serialNumber": "S1", "accountName": "Office", "deviceType": "A1", "online": True},
            ],
        }
        service = DeviceService(routed_client)
        devices = await service.refresh()
        assert [d.serial_number for d in devices] == ["S1"]
        assert service.store.find("office").online is True

    @pytest.mark.asyncio
    async def test_refresh_unexpected_shape(self, routed_client) -> None:
        routed_client.routes[("GET", "/api/devices-v2/device")] = {"devices": "nope"}
        with pytest.raises(UnexpectedResponseError):
            await DeviceService(routed_client).refresh()

    @pytest.mark.asyncio
    async def test_rename(self, routed_client) -> None:
        store = DeviceStore()
        store.replace_all([_device("S1", "Office", deviceAccountId="acc-1")])
        routed_client.routes[("PUT", "/api/devices-v2/device/S1")] = {
            "serialNumber": "S1", "accountName": "Study",
        }
        renamed = await DeviceService(routed_client, store).rename("office", "Study")

        _, _, body, _ = routed_client.requests[-1]
        assert body["accountName"] == "Study"
        assert body["deviceAccountId"] == "acc-1"
        assert renamed.account_name == "Study"
        assert store.find("study") is renamed
        assert store.find("office") is None

    @pytest.mark.asyncio
    async def test_rename_unexpected_body_keeps_cache(self, routed_client) -> None:
        store = DeviceStore()
        store.replace_all([_device("S1", "Office")])
        routed_client.routes[("PUT", "/api/devices-v2/device/S1")] = None
        result = await DeviceService(routed_client, store).rename("S1", "Study")
        assert result.account_name == "Office"

    @pytest.mark.asyncio
    async def test_delete(self, routed_client) -> None:
        store = DeviceStore()
        store.replace_all([_device("S1", "Office")])
        routed_client.routes[("DELETE", "/api/devices/device/S1?deviceType=A1")] = None
        await DeviceService(routed_client, store).delete("Office")
        assert store.list_all() == []
