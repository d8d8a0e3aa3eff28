"""Voice-assistant command sequences."""

from echoremote.sequences.service import SequenceService

__all__ = ["SequenceService"]
