"""Exception hierarchy shared across echoremote modules."""

from __future__ import annotations


class EchoRemoteError(Exception):
    """Base class for all echoremote errors."""


class UnexpectedResponseError(EchoRemoteError, ValueError):
    """The server answered with a payload of an unexpected shape."""


class NotFoundError(EchoRemoteError, LookupError):
    """A device, entity or notification reference could not be resolved."""

    def __init__(self, what: str, ref: object) -> None:
        super().__init__(f"{what} not found: {ref!r}")
        self.what = what
        self.ref = ref


class ReconcileError(EchoRemoteError):
    """A notification drain pass failed; the original error is ``__cause__``."""
