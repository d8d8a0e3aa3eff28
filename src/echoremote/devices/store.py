"""In-memory device cache indexed by serial number and name."""

from __future__ import annotations

from collections.abc import Iterable

from echoremote.core.errors import NotFoundError
from echoremote.core.signals import ChangeNotifier
from echoremote.core.types import ChangeEvent, normalize_name
from echoremote.devices.models import Device


class DeviceStore:
    """In-memory store for devices."""

    def __init__(self, notifier: ChangeNotifier | None = None) -> None:
        self._notifier = notifier or ChangeNotifier()
        self._by_serial: dict[str, Device] = {}
        self._by_name: dict[str, Device] = {}

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    def replace_all(self, devices: Iterable[Device]) -> None:
        self._by_serial = {d.serial_number: d for d in devices}
        self._changed()

    def upsert(self, device: Device) -> None:
        self._by_serial[device.serial_number] = device
        self._changed()

    def delete(self, serial_number: str) -> bool:
        if self._by_serial.pop(serial_number, None) is None:
            return False
        self._changed()
        return True

    def _changed(self) -> None:
        self._by_name = {normalize_name(d.account_name): d for d in self._by_serial.values()}
        self._notifier.signal(ChangeEvent.DEVICE)

    def find(self, ref: Device | str | None) -> Device | None:
        """Resolve a device by serial number or (normalised) name.

        A Device instance is returned unchanged.
        """
        if isinstance(ref, Device):
            return ref
        if not isinstance(ref, str):
            return None
        return self._by_serial.get(ref) or self._by_name.get(normalize_name(ref))

    def require(self, ref: Device | str | None) -> Device:
        device = self.find(ref)
        if device is None:
            raise NotFoundError("device", ref)
        return device

    def list_all(self) -> list[Device]:
        return list(self._by_serial.values())

    @property
    def serial_numbers(self) -> list[str]:
        return list(self._by_serial)
