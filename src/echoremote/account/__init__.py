"""Cloud account transport: REST client and push event channel."""

from echoremote.account.client import AccountClient, HttpAccountClient, ensure_match
from echoremote.account.push import PushChannel, PushEvent, PushEventType

__all__ = [
    "AccountClient",
    "HttpAccountClient",
    "PushChannel",
    "PushEvent",
    "PushEventType",
    "ensure_match",
]
