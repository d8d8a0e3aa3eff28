"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from echoremote.account.client import AccountClient
from echoremote.notifications.models import NotificationRecord


def record(
    key: str,
    version: int | str = 1,
    kind: str = "Reminder",
    label: str | None = None,
    **extra: Any,
) -> NotificationRecord:
    """Build a NotificationRecord the way the server would send it."""
    data: dict[str, Any] = {
        "id": f"A1-SERIAL-{key}",
        "notificationIndex": key,
        "type": kind,
        "version": str(version),
        "status": "ON",
    }
    if kind == "Timer":
        data["timerLabel"] = label
    else:
        data["reminderLabel"] = label
    data.update(extra)
    return NotificationRecord.model_validate(data)


class FakeFetcher:
    """FullRefreshFetcher double.

    ``gate`` (when set) holds every fetch until released, ``error`` makes the
    next fetches fail, and ``active``/``max_active`` count overlapping calls.
    """

    def __init__(self, records: list[NotificationRecord] | None = None) -> None:
        self.records = list(records or [])
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    async def fetch_all(self) -> list[NotificationRecord]:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            return list(self.records)
        finally:
            self.active -= 1


class RoutedClient(AccountClient):
    """AccountClient double answering from a ``(method, path) -> response`` table.

    A response that is an exception instance is raised. Every request is
    recorded in ``requests`` as ``(method, path, json, params)``.
    """

    def __init__(self, routes: dict[tuple[str, str], Any] | None = None) -> None:
        self.routes = dict(routes or {})
        self.requests: list[tuple[str, str, Any, dict[str, Any] | None]] = []
        self.closed = False

    async def request(self, method, path, *, json=None, params=None):
        self.requests.append((method, path, json, params))
        try:
            response = self.routes[(method, path)]
        except KeyError:
            raise AssertionError(f"unexpected request {method} {path}") from None
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def routed_client() -> RoutedClient:
    return RoutedClient()


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
