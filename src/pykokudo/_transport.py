"""HTTP transport for the web collaborators (geocoders, encyclopedia)."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the collaborator modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`AiohttpTransport`) concrete.
    """

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...


class AiohttpTransport:
    """JSON-over-HTTP GET transport on top of an ``aiohttp`` session."""

    def __init__(self, config: KokudoConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        request_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }
        if headers:
            request_headers.update(headers)

        _logger.debug("GET %s params=%s", url, dict(params or {}))

        try:
            async with self._http.get(url, params=params, headers=request_headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise KokudoTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except KokudoTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise KokudoTransportError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientError as exc:
            raise KokudoTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise KokudoTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=200,
                url=url,
            ) from exc
