"""Notification reconciliation: applies push hints to the local cache.

Push events carry only an id and a version hint. The reconciler logs them
as pending updates and drains the log in a single background pass at a
time:

* ``DELETE`` removes the cached record, or is a no-op if it is already gone.
* ``CHANGE`` is skipped when the cached record's version is numerically
  greater than or equal to the hint. Otherwise the whole notification list
  is pulled again and swapped in, since the event has no payload to patch
  with.

Updates are taken from the end of the log (last in, first out). A pass keeps
draining until the log is empty, so hints that arrive while it is waiting on
a refresh are applied before it returns to idle.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Protocol, runtime_checkable

from echoremote.core.errors import ReconcileError
from echoremote.core.types import WarningSink, ignore_warning
from echoremote.notifications.models import (
    NotificationRecord,
    PendingUpdate,
    UpdateKind,
    parse_version,
)
from echoremote.notifications.store import NotificationStore

logger = logging.getLogger(__name__)


@runtime_checkable
class FullRefreshFetcher(Protocol):
    """Pulls the complete notification list from the server."""

    async def fetch_all(self) -> list[NotificationRecord]: ...


class ReconcilerState(StrEnum):
    IDLE = "idle"
    DRAINING = "draining"


class NotificationReconciler:
    """Serialises pending notification updates against a NotificationStore.

    Drain passes, full refreshes and local writes never interleave: a pass
    or a refresh holds ``_lock`` for its whole duration, and local writes
    that land meanwhile are deferred until the holder's next step.

    Args:
        store: The cache to keep in sync. Only the reconciler mutates it.
        fetcher: Source of full refreshes for CHANGE updates.
        warn: Sink for drain-pass failures. Called with a ReconcileError
            whose ``__cause__`` is the original exception.
    """

    def __init__(
        self,
        store: NotificationStore,
        fetcher: FullRefreshFetcher,
        warn: WarningSink | None = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._warn = warn or ignore_warning
        self._pending: list[PendingUpdate] = []
        self._local: list[NotificationRecord] = []
        self._state = ReconcilerState.IDLE
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._active_passes = 0
        self.passes_started = 0
        self.max_concurrent_passes = 0

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def enqueue(self, update: PendingUpdate) -> asyncio.Task | None:
        """Queue *update* and start a drain pass if none is running.

        Never blocks and never raises. On the reconciler's event loop it
        returns the task of the pass that will apply the update. From any
        other thread the update is handed over to that loop and None is
        returned; if no loop is known yet, the update waits in the log for
        the next pass.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        foreign = self._loop is not None and loop is not self._loop and self._loop.is_running()
        if loop is None or foreign:
            self._enqueue_off_loop(update)
            return None

        self._loop = loop
        self._pending.append(update)
        logger.debug("Notification update queued: %s", update)

        if self._state is ReconcilerState.DRAINING:
            logger.debug("Notification update pass already running")
            return self._task

        self._task = loop.create_task(self._drain())
        self._state = ReconcilerState.DRAINING
        return self._task

    def _enqueue_off_loop(self, update: PendingUpdate) -> None:
        loop = self._loop
        if loop is not None and loop.is_running():
            loop.call_soon_threadsafe(self.enqueue, update)
            return
        self._pending.append(update)
        logger.warning("No event loop for notification update %s, kept for the next pass", update)

    def enqueue_threadsafe(
        self,
        update: PendingUpdate,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Hand *update* to the reconciler from a thread other than *loop*'s."""
        if loop is None:
            self._enqueue_off_loop(update)
        else:
            loop.call_soon_threadsafe(self.enqueue, update)

    def upsert(self, record: NotificationRecord) -> None:
        """Store the server's answer to a local create or change.

        While a pass or refresh is running the write is deferred and applied
        after its current step, unless the cache has meanwhile received a
        newer version of the record.
        """
        if self._lock.locked():
            logger.debug("Notification %s written locally during a pass, deferred", record.key)
            self._local.append(record)
            return
        logger.debug("Notification %s written locally @ %s", record.key, record.version)
        self._store.upsert(record)

    async def refresh(self) -> list[NotificationRecord]:
        """Pull the full list and swap it in once no pass is active.

        Unlike a drain pass, failures propagate to the caller.
        """
        self._loop = asyncio.get_running_loop()
        async with self._lock:
            try:
                records = await self._fetcher.fetch_all()
                self._store.replace_all(records)
            finally:
                self._flush_local()
        return records

    async def wait_idle(self) -> None:
        """Wait until no drain pass is active."""
        while self._task is not None and not self._task.done():
            await self._task

    # -- drain pass ----------------------------------------------------------

    async def _drain(self) -> None:
        failure: Exception | None = None
        async with self._lock:
            self._active_passes += 1
            self.passes_started += 1
            self.max_concurrent_passes = max(self.max_concurrent_passes, self._active_passes)
            logger.debug("Notification update pass starting")

            try:
                while self._pending:
                    update = self._pending.pop()
                    await self._apply(update)
                    self._flush_local()
            except Exception as exc:
                failure = exc
            finally:
                # No await between the emptiness check and this reset.
                self._flush_local()
                self._active_passes -= 1
                self._state = ReconcilerState.IDLE

        if failure is None:
            logger.info("Notification update pass completed")
            return

        logger.warning(
            "Notification update pass aborted with %d update(s) left: %s",
            len(self._pending), failure,
        )
        error = ReconcileError(f"failed to update notifications: {failure}")
        error.__cause__ = failure
        try:
            self._warn(error)
        except Exception:
            logger.exception("Warning sink raised while reporting %s", error)

    def _flush_local(self) -> None:
        while self._local:
            record = self._local.pop(0)
            current = self._store.find_by_id(record.key)
            if current is not None:
                stored, written = current.version_number, record.version_number
                if stored is not None and written is not None and stored > written:
                    logger.info(
                        "Local write of %s @ %s superseded by %s",
                        record.key, record.version, current.version,
                    )
                    continue
            self._store.upsert(record)

    async def _apply(self, update: PendingUpdate) -> None:
        current = self._store.find_by_id(update.id)

        if update.kind is UpdateKind.DELETE:
            if current is None:
                logger.info("Notification update %s: already gone", update)
                return
            logger.debug("Applying %s (previous version: %s)", update, current.version)
            self._store.delete(update.id)
            return

        if current is not None:
            stored = current.version_number
            incoming = parse_version(update.version)
            if stored is not None and incoming is not None and stored >= incoming:
                logger.info("Notification update %s: already up to date", update)
                return

        logger.debug(
            "Applying %s (previous version: %s)",
            update, current.version if current else None,
        )
        records = await self._fetcher.fetch_all()
        self._store.replace_all(records)
