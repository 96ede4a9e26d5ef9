"""Async client for the web collaborators."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pykokudo._api import geocode as _geocode_api
from pykokudo._api import wiki as _wiki_api
from pykokudo._transport import AiohttpTransport, Transport
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoError
from pykokudo.models.geocode import GeocodeCandidate
from pykokudo.models.wiki import RouteWikiInfo

_logger = logging.getLogger(__name__)


class KokudoClient:
    """Async client for geocoding and route descriptions.

    Usage::

        async with KokudoClient(config) as client:
            candidates = await client.geocode("道の駅 川場田園プラザ")
            info = await client.fetch_route_wiki_info(17)
    """

    def __init__(
        self,
        config: KokudoConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> KokudoConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> KokudoClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = AiohttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise KokudoError("Client not initialized. Use 'async with KokudoClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    async def geocode(self, query: str) -> list[GeocodeCandidate]:
        """Geocode a free-text place name.

        Chain-store abbreviations are expanded first. Returns an empty
        list when nothing matched.
        """
        normalized = _geocode_api.normalize_chain_name(query.strip())
        if not normalized:
            raise ValueError("query must be non-empty")
        if normalized != query.strip():
            _logger.debug("Expanded geocoding query %r to %r", query, normalized)
        return await _geocode_api.fetch_candidates(self._require_transport(), self._config, normalized)

    async def fetch_route_wiki_info(self, route_id: int) -> RouteWikiInfo | None:
        return await _wiki_api.fetch_route_wiki_info(self._require_transport(), self._config, route_id)
