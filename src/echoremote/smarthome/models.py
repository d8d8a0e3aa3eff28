"""Smarthome entity models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class EntityType(StrEnum):
    APPLIANCE = "APPLIANCE"
    GROUP = "GROUP"


class SmarthomeEntity(BaseModel):
    """A flattened smarthome appliance or appliance group."""

    entity_id: str
    name: str
    type: EntityType
    appliance_id: str | None = None
    group_id: str | None = None
    actions: list[str] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)
    appliance_types: list[str] = Field(default_factory=list)
    children: list[SmarthomeEntity] = Field(default_factory=list)

    @property
    def target_id(self) -> str:
        """Id the state and control endpoints expect for this entity."""
        if self.type is EntityType.GROUP:
            return self.group_id or self.entity_id
        return self.appliance_id or self.entity_id
