"""HTTP client for the event endpoints of the locally started server."""

from __future__ import annotations

import asyncio
import logging
from http.client import HTTPResponse
from typing import cast
from urllib import error, request

from dev_session import __version__

__all__ = ["EventCallError", "EventsClient"]

logger = logging.getLogger("dev_session.events")

STORE_SYSTEM_TOKEN_PATH = "/events/store-system-token"
CONTENT_SYNC_PATH = "/events/content-sync"


class EventCallError(RuntimeError):
    """Raised when an event endpoint cannot be reached or answers with an error."""


class EventsClient:
    """Fire parameterless GET calls at ``/events/*``; response bodies are discarded."""

    def __init__(self, *, base_url: str, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def store_system_token(self) -> int:
        return self._get(STORE_SYSTEM_TOKEN_PATH)

    def content_sync(self) -> int:
        return self._get(CONTENT_SYNC_PATH)

    async def store_system_token_async(self) -> int:
        return await asyncio.to_thread(self.store_system_token)

    async def content_sync_async(self) -> int:
        return await asyncio.to_thread(self.content_sync)

    def _get(self, path: str) -> int:
        url = f"{self.base_url}{path}"
        headers = {"User-Agent": f"dev-session/{__version__}"}
        req = request.Request(url, headers=headers, method="GET")
        logger.debug("GET %s", url)
        try:
            with cast(HTTPResponse, request.urlopen(req, timeout=self._timeout)) as resp:
                resp.read()
                return resp.status
        except error.HTTPError as exc:
            raise EventCallError(f"Server error {exc.code} from {url}: {exc.reason}") from exc
        except (error.URLError, OSError) as exc:
            raise EventCallError(f"Failed to reach {url}: {exc}") from exc
