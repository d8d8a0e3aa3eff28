"""Tests for notification request bodies and time parsing."""

from __future__ import annotations

from datetime import datetime

import pytest

from echoremote.devices.models import Device
from echoremote.notifications.payloads import (
    apply_changes,
    build_notification,
    load_defaults,
    parse_datetime,
    parse_duration,
)


@pytest.fixture
def device() -> Device:
    return Device(serialNumber="G090LF1", accountName="Kitchen", deviceType="A3S5BH2HU6VAYF")


class TestParseDuration:
    def test_number_is_seconds(self) -> None:
        assert parse_duration(90) == 90_000
        assert parse_duration(1.5) == 1_500

    def test_minutes_and_seconds(self) -> None:
        assert parse_duration("5:00") == 300_000

    def test_full_form(self) -> None:
        assert parse_duration("1:02:03:04") == ((1 * 24 + 2) * 3600 + 3 * 60 + 4) * 1000

    def test_any_separator(self) -> None:
        assert parse_duration("1h 30m 0s") == 5_400_000

    def test_extra_leading_pieces_ignored(self) -> None:
        assert parse_duration("9:0:0:0:10") == 10_000

    @pytest.mark.parametrize("value", ["", "abc", None, True, [1]])
    def test_invalid(self, value) -> None:
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration(value)


class TestParseDatetime:
    def test_datetime(self) -> None:
        dt = datetime(2026, 5, 1, 8, 30)
        assert parse_datetime(dt) == int(dt.timestamp() * 1000)

    def test_iso_string(self) -> None:
        assert parse_datetime("2026-05-01T08:30:00") == int(datetime(2026, 5, 1, 8, 30).timestamp() * 1000)

    def test_number_is_milliseconds(self) -> None:
        assert parse_datetime(1_700_000_000_000) == 1_700_000_000_000

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="invalid date/time"):
            parse_datetime("next tuesday-ish")


class TestBuildNotification:
    def test_reminder(self, device) -> None:
        when = datetime(2026, 5, 1, 8, 30, 15)
        body = build_notification(device, "Reminder", "Water plants", when, created_ms=1000)
        assert body["type"] == "Reminder"
        assert body["reminderLabel"] == "Water plants"
        assert body["timerLabel"] is None
        assert body["alarmTime"] == int(when.timestamp() * 1000)
        assert body["originalDate"] == "2026-05-01"
        assert body["originalTime"] == "08:30:15.000"
        assert body["id"] == "A3S5BH2HU6VAYF-G090LF1-reminder-1000"
        assert body["notificationIndex"] == "reminder-1000"
        assert body["deviceSerialNumber"] == "G090LF1"
        assert body["rRuleData"]["recurrenceRules"] is None
        assert body["status"] == "ON"
        assert body["version"] == "1"

    def test_timer(self, device) -> None:
        body = build_notification(device, "Timer", "Eggs", "7:00", created_ms=5)
        assert body["remainingTime"] == 420_000
        assert body["alarmTime"] == 0
        assert body["timerLabel"] == "Eggs"
        assert body["reminderLabel"] is None
        assert body["originalDate"] is None
        assert body["rRuleData"] is None

    def test_default_sound_from_yaml(self, device) -> None:
        body = build_notification(device, "Alarm", None, datetime(2026, 1, 1, 7, 0))
        assert body["sound"]["id"] == "system_alerts_melodic_01"
        assert body["sound"]["displayName"] == "Simple Alarm"

    def test_explicit_sound(self, device) -> None:
        sound = {"id": "custom", "providerId": "ECHO"}
        body = build_notification(device, "Alarm", None, datetime(2026, 1, 1), sound=sound)
        assert body["sound"] == sound

    def test_invalid_kind(self, device) -> None:
        with pytest.raises(ValueError, match="invalid notification type"):
            build_notification(device, "Nap", None, 60)

    def test_invalid_status(self, device) -> None:
        with pytest.raises(ValueError, match="invalid notification status"):
            build_notification(device, "Timer", None, 60, status="SNOOZED")


class TestApplyChanges:
    def test_reminder_changes(self) -> None:
        original = {"type": "Reminder", "status": "ON", "reminderLabel": "Old", "recurringPattern": "P1D"}
        when = datetime(2026, 3, 2, 9, 15)
        changed = apply_changes(original, label="New", when=when, status="OFF")

        assert changed["reminderLabel"] == "New"
        assert changed["status"] == "OFF"
        assert changed["alarmTime"] == int(when.timestamp() * 1000)
        assert changed["originalDate"] == "2026-03-02"
        assert changed["isRecurring"] is True
        assert changed["isSaveInFlight"] is True
        assert changed["reminderIndex"] is None
        assert original["reminderLabel"] == "Old"

    def test_reminder_without_time_keeps_schedule(self) -> None:
        original = {"type": "Alarm", "status": "ON", "alarmTime": 42}
        changed = apply_changes(original, status="OFF")
        assert changed["alarmTime"] == 42
        assert "originalDate" not in changed

    def test_timer_pause(self) -> None:
        original = {"type": "Timer", "status": "ON", "timerLabel": "Tea", "remainingTime": 1000}
        changed = apply_changes(original, status="PAUSED", changed_ms=77)
        assert changed["status"] == "PAUSED"
        assert changed["triggerTime"] == 77
        assert changed["remainingTime"] == 1000

    def test_timer_new_duration(self) -> None:
        original = {"type": "Timer", "status": "ON"}
        changed = apply_changes(original, when=30)
        assert changed["remainingTime"] == 30_000
        assert "triggerTime" not in changed

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError):
            apply_changes({"type": "Timer"}, status="MAYBE")


class TestLoadDefaults:
    def test_missing_file(self, tmp_path) -> None:
        assert load_defaults(tmp_path / "nope.yml") == {}

    def test_custom_file(self, tmp_path) -> None:
        path = tmp_path / "defaults.yml"
        path.write_text("default_sound:\n  id: chime\n")
        assert load_defaults(path) == {"default_sound": {"id": "chime"}}
