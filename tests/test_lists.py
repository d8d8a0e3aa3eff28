"""Tests for list operations."""

from __future__ import annotations

import pytest

from echoremote.core.config import ListConfig
from echoremote.lists import ListService, ListType


class TestListService:
    @pytest.mark.asyncio
    async def test_get_list_uses_default_size(self, routed_client) -> None:
        routed_client.routes[("GET", "/api/todos")] = {"values": []}
        service = ListService(routed_client, ListConfig(default_size=25))
        assert await service.get_list("SHOPPING_ITEM") == {"values": []}
        _, _, _, params = routed_client.requests[-1]
        assert params == {"type": "SHOPPING_ITEM", "size": 25}

    @pytest.mark.asyncio
    async def test_add_item(self, routed_client) -> None:
        routed_client.routes[("POST", "/api/todos")] = None
        await ListService(routed_client).add_item(ListType.TASK, "Buy milk")
        _, _, body, _ = routed_client.requests[-1]
        assert body["type"] == "TASK"
        assert body["text"] == "Buy milk"
        assert body["completed"] is False
        assert body["deleted"] is False

    @pytest.mark.asyncio
    async def test_invalid_type(self, routed_client) -> None:
        service = ListService(routed_client)
        with pytest.raises(ValueError, match="invalid list type"):
            await service.get_list("GROCERIES")
        with pytest.raises(ValueError, match="invalid list type"):
            await service.add_item("GROCERIES", "x")
        assert routed_client.requests == []
