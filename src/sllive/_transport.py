"""HTTP transport for the vehicle snapshot endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from sllive._constants import USER_AGENT
from sllive.config import LiveMapConfig
from sllive.exceptions import SlLiveTransportError

_logger = logging.getLogger(__name__)


class SnapshotTransport(Protocol):
    """Structural transport interface used by the client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpSnapshotTransport`) concrete.
    """

    async def fetch_snapshot(self) -> list[Any]:
        ...


class HttpSnapshotTransport:
    """GET the snapshot endpoint and decode its JSON array body."""

    def __init__(self, config: LiveMapConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def fetch_snapshot(self) -> list[Any]:
        url = self._config.api_url
        headers = {
            "accept": "application/json",
            "cache-control": "no-store",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise SlLiveTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except SlLiveTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError, UnicodeDecodeError) as exc:
            raise SlLiveTransportError(
                f"Request to {url} failed: {exc!r}",
                endpoint=url,
            ) from exc

        try:
            body: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SlLiveTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                endpoint=url,
            ) from exc

        if not isinstance(body, list):
            raise SlLiveTransportError(
                f"Expected a JSON array from {url}, got {type(body).__name__}",
                endpoint=url,
            )

        return body
