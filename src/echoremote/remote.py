"""Account facade wiring the caches, services and push channel together.

This is the primary entry point: it loads the caches on ``initialize`` and
routes server pushes into the notification reconciler.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from echoremote.account.client import AccountClient, HttpAccountClient
from echoremote.account.push import PushChannel
from echoremote.core.config import Settings
from echoremote.core.errors import EchoRemoteError
from echoremote.core.signals import ChangeNotifier
from echoremote.core.types import WarningSink, ignore_warning
from echoremote.devices.models import Device
from echoremote.devices.service import DeviceService
from echoremote.devices.store import DeviceStore
from echoremote.lists.service import ListService
from echoremote.notifications.service import NotificationService
from echoremote.notifications.store import NotificationStore
from echoremote.sequences.service import SequenceService
from echoremote.smarthome.service import SmarthomeService

logger = logging.getLogger(__name__)

ACCOUNTS_PATH = "/api/accounts"


class EchoRemote:
    """Local caches and convenience operations over one cloud account.

    Args:
        settings: Application settings. Defaults to Settings().
        client: Optional pre-built AccountClient; an HttpAccountClient is
            created from ``settings.account`` otherwise.
        warn: Sink for non-fatal failures (smarthome initialisation,
            notification reconciliation).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: AccountClient | None = None,
        warn: WarningSink | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.client = client or HttpAccountClient(self.settings.account)
        self.push = PushChannel()
        self.notifier = ChangeNotifier()
        self._warn = warn or ignore_warning
        self.comms_id: str | None = None

        self.devices = DeviceService(self.client, DeviceStore(self.notifier))
        self.notifications = NotificationService(
            self.client,
            self.devices.store,
            store=NotificationStore(self.notifier),
            config=self.settings.notification,
            warn=self._warn,
        )
        self.smarthome = SmarthomeService(self.client, self.notifier)
        self.lists = ListService(self.client, self.settings.lists)
        self.sequences = SequenceService(self.client)
        self._unsubscribe_push: Callable[[], None] | None = None

    async def initialize(self) -> None:
        """Load every cache and start listening for notification pushes.

        Account, device and notification loading must succeed; a smarthome
        failure is only reported to the warning sink.
        """
        await asyncio.gather(
            self._init_account(),
            self.devices.refresh(),
            self._init_notifications(),
            self._optional(self.smarthome.refresh, "initialise smarthome entities"),
        )
        if self._unsubscribe_push is None:
            self._unsubscribe_push = self.push.subscribe(self.notifications.handle_push)

    async def refresh(self) -> None:
        await self.initialize()

    async def check_authentication(self) -> bool:
        return await self.client.check_authentication()

    def find(self, ref: Device | str | None) -> Device | None:
        return self.devices.store.find(ref)

    def on_change(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to ``change-device`` / ``change-notification`` / ``change-smarthome``."""
        return self.notifier.subscribe(listener)

    async def close(self) -> None:
        if self._unsubscribe_push is not None:
            self._unsubscribe_push()
            self._unsubscribe_push = None
        self.push.clear()
        self.notifier.clear()
        await self.notifications.reconciler.wait_idle()
        await self.client.close()

    # -- internal ------------------------------------------------------------

    async def _init_account(self) -> None:
        response = await self.client.get(ACCOUNTS_PATH)
        for account in response or []:
            if isinstance(account, dict) and account.get("commsId"):
                self.comms_id = account["commsId"]
                break

    async def _init_notifications(self) -> None:
        if self.settings.notification.refresh_on_start:
            await self.notifications.initialize()

    async def _optional(self, load: Callable[[], Awaitable[Any]], what: str) -> None:
        try:
            await load()
        except Exception as exc:
            logger.warning("Failed to %s: %s", what, exc)
            error = EchoRemoteError(f"failed to {what}: {exc}")
            error.__cause__ = exc
            self._warn(error)
