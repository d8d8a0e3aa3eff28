"""Request bodies for creating and changing notifications."""

from __future__ import annotations

import copy
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from echoremote.devices.models import Device
from echoremote.notifications.models import NotificationKind, NotificationStatus

_DEFAULTS_PATH = Path(__file__).resolve().parent / "defaults.yml"
_NON_DIGITS = re.compile(r"[^0-9]")


def load_defaults(path: str | Path | None = None) -> dict[str, Any]:
    """Load payload defaults (default sound, recurrence fields) from YAML."""
    path = Path(path) if path else _DEFAULTS_PATH
    if not path.exists():
        return {}
    with open(path) as fh:
        return yaml.safe_load(fh) or {}


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_duration(value: int | float | str) -> int:
    """Parse a timer duration into milliseconds.

    Numbers are seconds. Strings are ``[[[d:]h:]m:]s`` with any non-digit
    separator, e.g. ``"5:00"`` is five minutes and ``"1 2 0 0"`` is a day
    and two hours.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return int(value * 1000)
    if isinstance(value, str):
        pieces = [int(p) for p in _NON_DIGITS.split(value) if p]
        if pieces:
            d, h, m, s = ([0, 0, 0, 0] + pieces)[-4:]
            return (((d * 24 + h) * 60 + m) * 60 + s) * 1000
    raise ValueError(f"invalid duration: {value!r}")


def parse_datetime(value: datetime | int | float | str) -> int:
    """Return *value* as epoch milliseconds. Numbers are taken as milliseconds."""
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        try:
            return int(datetime.fromisoformat(value).timestamp() * 1000)
        except ValueError:
            pass
    raise ValueError(f"invalid date/time: {value!r}")


def _date_pieces(ms: int) -> tuple[str, str]:
    dt = datetime.fromtimestamp(ms / 1000)
    return dt.strftime("%Y-%m-%d"), dt.strftime("%H:%M:%S.") + f"{dt.microsecond // 1000:03d}"


def _check_status(status: str) -> str:
    if status not in {s.value for s in NotificationStatus}:
        raise ValueError(f"invalid notification status: {status!r}")
    return status


def build_notification(
    device: Device,
    kind: str,
    label: str | None,
    when: datetime | int | float | str,
    status: str = NotificationStatus.ON,
    sound: dict[str, Any] | None = None,
    *,
    created_ms: int | None = None,
    defaults: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the body of a create-reminder request.

    For timers *when* is a duration (see parse_duration); for reminders and
    alarms it is a point in time.
    """
    if kind not in {k.value for k in NotificationKind}:
        raise ValueError(f"invalid notification type: {kind!r}")
    _check_status(status)
    defaults = load_defaults() if defaults is None else defaults

    timer = kind == NotificationKind.TIMER
    moment = parse_duration(when) if timer else parse_datetime(when)
    created = now_ms() if created_ms is None else created_ms
    original_date, original_time = (None, None) if timer else _date_pieces(moment)
    slug = kind.lower()

    recurrence = None
    if kind == NotificationKind.REMINDER:
        recurrence = {f: None for f in defaults.get("reminder_recurrence_fields", [])}

    return {
        "alarmTime": 0 if timer else moment,
        "createdDate": created,
        "deferredAtTime": None,
        "deviceSerialNumber": device.serial_number,
        "deviceType": device.device_type,
        "extensibleAttribute": None,
        "geoLocationTriggerData": None,
        "id": f"{device.device_type}-{device.serial_number}-{slug}-{created}",
        "lastUpdatedDate": created,
        "musicAlarmId": None,
        "musicEntity": None,
        "notificationIndex": f"{slug}-{created}",
        "originalDate": original_date,
        "originalTime": original_time,
        "personProfile": None,
        "provider": None,
        "rRuleData": recurrence,
        "recurringPattern": None,
        "remainingTime": moment if timer else 0,
        "reminderLabel": None if timer else label,
        "skillInfo": None,
        "snoozedToTime": None,
        "sound": sound or copy.deepcopy(defaults.get("default_sound")),
        "status": status,
        "targetPersonProfiles": None,
        "timeZoneId": None,
        "timerLabel": label if timer else None,
        "triggerTime": 0,
        "type": kind,
        "version": "1",
    }


def apply_changes(
    notification: dict[str, Any],
    label: str | None = None,
    when: datetime | int | float | str | None = None,
    status: str | None = None,
    sound: dict[str, Any] | None = None,
    *,
    changed_ms: int | None = None,
) -> dict[str, Any]:
    """Return a copy of *notification* with the given fields changed."""
    if status:
        _check_status(status)
    changed = copy.deepcopy(notification)
    timer = changed.get("type") == NotificationKind.TIMER

    moment = None
    if when is not None:
        moment = parse_duration(when) if timer else parse_datetime(when)

    if timer:
        if status and status != changed.get("status"):
            changed["triggerTime"] = now_ms() if changed_ms is None else changed_ms
        if label:
            changed["timerLabel"] = label
        if moment is not None:
            changed["remainingTime"] = moment
    else:
        changed["reminderIndex"] = None
        changed["isSaveInFlight"] = True
        changed["isRecurring"] = bool(changed.get("recurringPattern"))
        if label:
            changed["reminderLabel"] = label
        if moment is not None:
            changed["alarmTime"] = moment
            changed["originalDate"], changed["originalTime"] = _date_pieces(moment)

    if status:
        changed["status"] = status
    if sound:
        changed["sound"] = sound
    return changed
