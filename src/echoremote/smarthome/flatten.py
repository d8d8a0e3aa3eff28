"""Flatten the nested smarthome payloads into one entity map.

The device listing nests appliances under bridges under locations, the
entity listing carries the supported operations, and groups only list
appliance ids. ``flatten_entities`` joins the three into a single
``entity_id -> SmarthomeEntity`` map holding appliances and groups.
"""

from __future__ import annotations

import logging
from typing import Any

from echoremote.smarthome.models import EntityType, SmarthomeEntity

logger = logging.getLogger(__name__)


def appliances_by_id(devices_response: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Collect appliance details from every bridge of every location."""
    appliances: dict[str, dict[str, Any]] = {}
    for location in (devices_response.get("locationDetails") or {}).values():
        bridges = location.get("amazonBridgeDetails", {}).get("amazonBridgeDetails", {})
        for bridge in bridges.values():
            appliances.update(bridge.get("applianceDetails", {}).get("applianceDetails", {}))
    return appliances


def _appliance_types(device: dict[str, Any]) -> list[str]:
    types = list(device.get("applianceTypes") or [])
    driver = device.get("driverIdentity") or {}
    if (
        types
        and types[0] == "OTHER"
        and device.get("manufacturerName") == "AMAZON"
        and driver.get("namespace") == "AAA"
    ):
        # Echo devices show up as unnamed Amazon appliances.
        types[0] = "ECHO"
    return types


def _unique(values: list[list[str]]) -> list[str]:
    return list(dict.fromkeys(v for group in values for v in group))


def flatten_entities(
    groups: list[dict[str, Any]],
    entities: list[dict[str, Any]],
    devices_response: dict[str, Any],
) -> dict[str, SmarthomeEntity]:
    entities_by_id = {e["id"]: e for e in entities if "id" in e}
    devices = appliances_by_id(devices_response)
    flat: dict[str, SmarthomeEntity] = {}

    for device in devices.values():
        properties = [
            prop["name"]
            for capability in device.get("capabilities", [])
            for prop in capability.get("properties", {}).get("supported", [])
        ]
        entity = entities_by_id.get(device.get("entityId"), {})
        flat[device["entityId"]] = SmarthomeEntity(
            entity_id=device["entityId"],
            appliance_id=device.get("applianceId"),
            name=device.get("friendlyName", ""),
            type=EntityType.APPLIANCE,
            actions=list(entity.get("supportedOperations") or []),
            properties=properties,
            appliance_types=_appliance_types(device),
        )

    for group in groups:
        child_ids = [
            devices[a]["entityId"]
            for a in group.get("applianceIds") or []
            if a in devices and devices[a].get("entityId")
        ]
        children = [flat[i] for i in child_ids if i in flat]
        group_id = group["groupId"]
        entity_id = group_id.rsplit(".", 1)[-1]
        flat[entity_id] = SmarthomeEntity(
            entity_id=entity_id,
            group_id=group_id,
            name=group.get("name", ""),
            type=EntityType.GROUP,
            actions=_unique([c.actions for c in children]),
            properties=_unique([c.properties for c in children]),
            appliance_types=_unique([c.appliance_types for c in children]),
            children=children,
        )

    logger.debug("Flattened %d appliance(s) and %d group(s)", len(devices), len(groups))
    return flat
