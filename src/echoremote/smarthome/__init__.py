"""Smarthome entity flattening and control."""

from echoremote.smarthome.flatten import flatten_entities
from echoremote.smarthome.models import EntityType, SmarthomeEntity
from echoremote.smarthome.service import SmarthomeService

__all__ = ["EntityType", "SmarthomeEntity", "SmarthomeService", "flatten_entities"]
