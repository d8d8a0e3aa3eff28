"""Core helpers shared across all echoremote modules."""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import StrEnum

_NON_ALNUM = re.compile(r"[^a-z0-9]", re.IGNORECASE)


class ChangeEvent(StrEnum):
    """Names of the change signals emitted by the local caches."""

    DEVICE = "change-device"
    NOTIFICATION = "change-notification"
    SMARTHOME = "change-smarthome"


def normalize_name(value: object) -> str:
    """Return a case and punctuation insensitive form of *value*.

    Used as the key of every name-based lookup index, so ``"Kitchen Echo"``,
    ``"kitchen-echo"`` and ``"KITCHEN ECHO!"`` all resolve to the same entry.
    """
    return _NON_ALNUM.sub("", str(value)).lower()


WarningSink = Callable[[BaseException], None]


def ignore_warning(error: BaseException) -> None:
    """Default warning sink that drops the error."""
