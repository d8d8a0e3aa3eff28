"""To-do and shopping list operations."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from echoremote.account.client import AccountClient
from echoremote.core.config import ListConfig
from echoremote.notifications.payloads import now_ms

TODOS_PATH = "/api/todos"


class ListType(StrEnum):
    TASK = "TASK"
    SHOPPING_ITEM = "SHOPPING_ITEM"


def _list_type(value: str) -> ListType:
    try:
        return ListType(value)
    except ValueError:
        raise ValueError(f"invalid list type: {value!r}") from None


class ListService:
    """Reads and appends to the account's to-do and shopping lists."""

    def __init__(self, client: AccountClient, config: ListConfig | None = None) -> None:
        self._client = client
        self._config = config or ListConfig()

    async def get_list(self, list_type: str = ListType.TASK, size: int | None = None) -> Any:
        kind = _list_type(list_type)
        return await self._client.get(
            TODOS_PATH, type=kind.value, size=size or self._config.default_size,
        )

    async def add_item(self, list_type: str, text: str) -> Any:
        kind = _list_type(list_type)
        return await self._client.post(
            TODOS_PATH,
            json={
                "type": kind.value,
                "text": text,
                "createdDate": now_ms(),
                "completed": False,
                "deleted": False,
            },
        )
