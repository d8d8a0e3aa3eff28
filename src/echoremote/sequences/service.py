"""Run behavior sequence nodes (speak, volume, routines ...) on the account."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from echoremote.account.client import AccountClient

logger = logging.getLogger(__name__)

PREVIEW_PATH = "/api/behaviors/preview"
SEQUENCE_TYPE = "com.amazon.alexa.behaviors.model.Sequence"


class SequenceService:
    """Sends one-off behavior sequences through the preview endpoint."""

    def __init__(self, client: AccountClient) -> None:
        self._client = client

    async def send_sequence_node(self, node: Mapping[str, Any]) -> Any:
        """Wrap *node* in a Sequence and run it.

        The server usually acknowledges with an empty body, returned as None.

        Raises:
            ValueError: If *node* is not a mapping with an ``@type``.
        """
        if not isinstance(node, Mapping) or not node.get("@type"):
            raise ValueError(f"invalid sequence node: {node!r}")
        sequence = {"@type": SEQUENCE_TYPE, "startNode": dict(node)}
        logger.debug("Running sequence node %s", node["@type"])
        return await self._client.post(
            PREVIEW_PATH,
            json={
                "behaviorId": "PREVIEW",
                "sequenceJson": json.dumps(sequence),
                "status": "ENABLED",
            },
        )
