"""Account REST client interface and httpx implementation."""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any

import httpx

from echoremote.core.config import AccountConfig
from echoremote.core.errors import UnexpectedResponseError

logger = logging.getLogger(__name__)

BOOTSTRAP_PATH = "/api/bootstrap"


class AccountClient(abc.ABC):
    """Abstract base class for the authenticated cloud account session.

    Authentication and cookie refresh happen outside this package; a client
    only needs to issue requests on behalf of an established session.
    """

    @abc.abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body, or None if empty."""

    async def get(self, path: str, **params: Any) -> Any:
        return await self.request("GET", path, params=params or None)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        return await self.request("DELETE", path, json=json)

    async def close(self) -> None:
        """Clean up resources. Override if the client holds connections."""

    async def check_authentication(self) -> bool:
        """Ask the account whether the current session is still signed in."""
        response = await self.get(BOOTSTRAP_PATH, version=0)
        auth = response.get("authentication") if isinstance(response, dict) else None
        if not isinstance(auth, dict):
            raise UnexpectedResponseError(f"unexpected bootstrap response: {response!r}")
        return bool(auth.get("authenticated"))


class HttpAccountClient(AccountClient):
    """Talks to the cloud account REST API over an existing cookie session.

    5xx answers and transport errors are retried ``max_retries`` times with
    exponential backoff; any other error status raises
    ``httpx.HTTPStatusError``.
    """

    def __init__(self, config: AccountConfig | None = None) -> None:
        self.config = config or AccountConfig()
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json; charset=utf-8",
        }
        if self.config.cookie:
            headers["Cookie"] = self.config.cookie
        if self.config.csrf:
            headers["csrf"] = self.config.csrf
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.config.timeout_seconds),
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        attempts = max(1, self.config.max_retries + 1)
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await self._http.request(method, path, json=json, params=params or None)
            except httpx.TransportError as exc:
                if attempt == attempts:
                    raise
                await self._backoff(method, path, attempt, attempts, exc)
                continue
            if resp.is_server_error and attempt < attempts:
                await self._backoff(method, path, attempt, attempts, f"HTTP {resp.status_code}")
                continue
            resp.raise_for_status()
            return self._decode(method, path, resp)

    async def close(self) -> None:
        await self._http.aclose()

    async def _backoff(self, method: str, path: str, attempt: int, attempts: int, reason: object) -> None:
        delay = self.config.retry_backoff_seconds * 2 ** (attempt - 1)
        logger.warning(
            "%s %s failed (%s), attempt %d/%d, retrying in %.1fs",
            method, path, reason, attempt, attempts, delay,
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _decode(method: str, path: str, resp: httpx.Response) -> Any:
        # Several endpoints acknowledge writes with an empty body.
        if not resp.content.strip():
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise UnexpectedResponseError(f"{method} {path} returned a non-JSON body") from exc


def ensure_match(response: Any, key: str, item_type: type = dict) -> list[Any]:
    """Check that *response* is a dict holding a list of *item_type* under *key*.

    Returns the list. Raises UnexpectedResponseError otherwise.
    """
    items = response.get(key) if isinstance(response, dict) else None
    if not isinstance(items, list) or not all(isinstance(i, item_type) for i in items):
        raise UnexpectedResponseError(f"unexpected response: {response!r}")
    return items
