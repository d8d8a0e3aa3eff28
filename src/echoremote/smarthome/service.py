"""Smarthome entity cache, lookup and control requests."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from echoremote.account.client import AccountClient
from echoremote.core.errors import NotFoundError, UnexpectedResponseError
from echoremote.core.signals import ChangeNotifier
from echoremote.core.types import ChangeEvent
from echoremote.smarthome.flatten import flatten_entities
from echoremote.smarthome.models import EntityType, SmarthomeEntity

logger = logging.getLogger(__name__)

STATE_PATH = "/api/phoenix/state"
SMARTHOME_SKILL_ID = "amzn1.ask.1p.smarthome"


class SmarthomeService:
    """Caches flattened smarthome entities and issues state/control requests."""

    def __init__(self, client: AccountClient, notifier: ChangeNotifier | None = None) -> None:
        self._client = client
        self._notifier = notifier or ChangeNotifier()
        self._entities: dict[str, SmarthomeEntity] = {}

    @property
    def entities(self) -> dict[str, SmarthomeEntity]:
        return dict(self._entities)

    async def refresh(self) -> dict[str, SmarthomeEntity]:
        groups, entities, devices = await asyncio.gather(
            self._client.get("/api/phoenix/group"),
            self._client.get("/api/behaviors/entities", skillId=SMARTHOME_SKILL_ID),
            self._client.get("/api/phoenix"),
        )
        if not isinstance(groups, dict) or not isinstance(entities, list) or not isinstance(devices, dict):
            raise UnexpectedResponseError("unexpected smarthome response layout")
        self._entities = flatten_entities(groups.get("applianceGroups") or [], entities, devices)
        self._notifier.signal(ChangeEvent.SMARTHOME)
        logger.info("Loaded %d smarthome entities", len(self._entities))
        return self.entities

    def find(self, ref: str) -> SmarthomeEntity | None:
        """Resolve *ref* by entity id, then appliance id, then case-insensitive name."""
        if not isinstance(ref, str):
            return None
        if ref in self._entities:
            return self._entities[ref]
        for entity in self._entities.values():
            if entity.appliance_id == ref:
                return entity
        lowered = ref.lower()
        for entity in self._entities.values():
            if entity.name.lower() == lowered:
                return entity
        return None

    def require(self, ref: str) -> SmarthomeEntity:
        entity = self.find(ref)
        if entity is None:
            raise NotFoundError("smarthome entity", ref)
        return entity

    async def query_states(self, refs: list[str]) -> tuple[list[dict], list[dict]]:
        """Query device states. Unknown refs are skipped.

        Returns:
            A ``(device_states, errors)`` tuple as reported by the server.
        """
        requests = [
            {"entityId": e.target_id, "entityType": e.type}
            for e in (self.find(r) for r in refs)
            if e is not None
        ]
        response = await self._client.post(STATE_PATH, json={"stateRequests": requests})
        if not (
            isinstance(response, dict)
            and isinstance(response.get("deviceStates"), list)
            and isinstance(response.get("errors"), list)
        ):
            raise UnexpectedResponseError(f"unexpected response layout: {response!r}")
        return response["deviceStates"], response["errors"]

    async def execute_actions(self, requests: list[tuple[str, dict[str, Any]]]) -> Any:
        """Send ``(entity ref, parameters)`` control requests, e.g. ``("Lamp", {"action": "turnOn"})``."""
        controls = []
        for ref, parameters in requests:
            entity = self.require(ref)
            controls.append({
                "entityId": entity.target_id,
                "entityType": entity.type,
                "parameters": parameters,
            })
        return await self._client.put(STATE_PATH, json={"controlRequests": controls})

    async def delete_device(self, ref: str) -> None:
        entity = self.find(ref)
        if entity is None or entity.type is not EntityType.APPLIANCE:
            raise NotFoundError("smarthome device", ref)
        await self._client.delete(f"/api/phoenix/appliance/{entity.appliance_id}")
        self._forget(entity)

    async def delete_group(self, ref: str) -> None:
        entity = self.find(ref)
        if entity is None or entity.type is not EntityType.GROUP:
            raise NotFoundError("smarthome group", ref)
        await self._client.delete(f"/api/phoenix/group/{entity.group_id}")
        self._forget(entity)

    async def delete_all_devices(self) -> None:
        await self._client.delete("/api/phoenix")
        self._entities = {
            k: e for k, e in self._entities.items() if e.type is EntityType.GROUP
        }
        self._notifier.signal(ChangeEvent.SMARTHOME)

    def _forget(self, entity: SmarthomeEntity) -> None:
        self._entities.pop(entity.entity_id, None)
        self._notifier.signal(ChangeEvent.SMARTHOME)
