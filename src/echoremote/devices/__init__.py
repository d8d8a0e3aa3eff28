"""Echo device cache and device operations."""

from echoremote.devices.models import Device
from echoremote.devices.service import DeviceService
from echoremote.devices.store import DeviceStore

__all__ = ["Device", "DeviceService", "DeviceStore"]
