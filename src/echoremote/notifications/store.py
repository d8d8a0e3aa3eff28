"""In-memory notification cache with a derived label index."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from echoremote.core.signals import ChangeNotifier
from echoremote.core.types import ChangeEvent, normalize_name
from echoremote.notifications.models import NotificationRecord

logger = logging.getLogger(__name__)


class NotificationStore:
    """Primary map key -> record plus a label index rebuilt on every change.

    Every mutating call signals ``change-notification`` exactly once, after
    both maps have been swapped in.
    """

    def __init__(self, notifier: ChangeNotifier | None = None) -> None:
        self._notifier = notifier or ChangeNotifier()
        self._by_id: dict[str, NotificationRecord] = {}
        self._by_label: dict[str, NotificationRecord] = {}

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    # -- mutations -----------------------------------------------------------

    def replace_all(self, records: Iterable[NotificationRecord]) -> None:
        self._commit({r.key: r for r in records})

    def upsert(self, record: NotificationRecord) -> None:
        by_id = dict(self._by_id)
        by_id[record.key] = record
        self._commit(by_id)

    def delete(self, notification_id: str) -> bool:
        """Remove a record. Returns False (and signals nothing) if absent."""
        if notification_id not in self._by_id:
            logger.info("Notification %s not cached, nothing to delete", notification_id)
            return False
        by_id = dict(self._by_id)
        del by_id[notification_id]
        self._commit(by_id)
        return True

    def _commit(self, by_id: dict[str, NotificationRecord]) -> None:
        by_label = {
            normalize_name(r.label): r
            for r in by_id.values()
            if r.label
        }
        self._by_id, self._by_label = by_id, by_label
        self._notifier.signal(ChangeEvent.NOTIFICATION)

    # -- lookups -------------------------------------------------------------

    def find_by_id(self, notification_id: str) -> NotificationRecord | None:
        return self._by_id.get(notification_id)

    def find_by_label(self, label: str) -> NotificationRecord | None:
        return self._by_label.get(normalize_name(label))

    def find(self, ref: str) -> NotificationRecord | None:
        """Resolve *ref* as a notification id first, then as a label."""
        return self.find_by_id(ref) or self.find_by_label(ref)

    def list_all(self) -> list[NotificationRecord]:
        return list(self._by_id.values())

    @property
    def count(self) -> int:
        return len(self._by_id)
