"""To-do and shopping lists."""

from echoremote.lists.service import ListService, ListType

__all__ = ["ListService", "ListType"]
