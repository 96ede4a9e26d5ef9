"""Place-name geocoding.

Two services are queried in order:
  - GSI address search (Japanese place names and addresses)
  - Nominatim (OpenStreetMap), restricted to Japan, with query variants
    for roadside stations, service areas, interchanges and chain stores

Individual request failures are logged and skipped. Only when every
request failed is the lookup reported as a network error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pykokudo._constants import (
    CHAIN_KEYWORDS,
    CHAIN_NORMALIZE,
    COORD_DECIMALS,
    DUPLICATE_COORD_TOLERANCE,
    GSI_RESULT_LIMIT,
    MAX_GEOCODE_CANDIDATES,
    NOMINATIM_RESULT_LIMIT,
)
from pykokudo._transport import Transport
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoTransportError
from pykokudo.models._base import safe_float
from pykokudo.models.geocode import GeocodeCandidate

_logger = logging.getLogger(__name__)

GSI_SOURCE = "地理院"
OSM_SOURCE = "OSM"


def normalize_chain_name(query: str) -> str:
    """Expand a leading chain-store abbreviation (``ファミマ`` → ``ファミリーマート``)."""
    for pattern, replacement in CHAIN_NORMALIZE:
        if pattern.search(query):
            return pattern.sub(replacement, query, count=1)
    return query


def is_chain_store(query: str) -> bool:
    return any(keyword in query for keyword in CHAIN_KEYWORDS)


def search_variants(query: str) -> list[str]:
    """Nominatim query variants, most specific first."""
    variants = [query]
    if is_chain_store(query):
        if not query.endswith("店"):
            variants.append(query + "店")
        return variants

    if "道の駅" not in query and "駅" not in query and len(query) <= 10:
        variants.append("道の駅" + query)
    if "SA" not in query and "サービスエリア" not in query and len(query) <= 8:
        variants.append(query + "サービスエリア")
        variants.append(query + "SA")
    if "道路" not in query and "IC" not in query and len(query) <= 8:
        variants.append(query + "インターチェンジ")
    if len(query) <= 12 and not query.endswith("店"):
        variants.append(query + "店")
    return variants


def _round_coord(value: float) -> float:
    return round(value, COORD_DECIMALS)


def _is_duplicate(results: list[GeocodeCandidate], lat: float, lng: float) -> bool:
    return any(
        abs(r.lat - lat) < DUPLICATE_COORD_TOLERANCE and abs(r.lng - lng) < DUPLICATE_COORD_TOLERANCE
        for r in results
    )


def parse_gsi_results(data: Any, query: str) -> list[GeocodeCandidate]:
    """Convert GSI GeoJSON features; coordinates are ``[lng, lat]``."""
    if not isinstance(data, list):
        return []
    results: list[GeocodeCandidate] = []
    for item in data[:GSI_RESULT_LIMIT]:
        if not isinstance(item, dict):
            continue
        coords = (item.get("geometry") or {}).get("coordinates")
        if not isinstance(coords, list) or len(coords) < 2:
            continue
        lng, lat = safe_float(coords[0]), safe_float(coords[1])
        if lat is None or lng is None:
            continue
        title = (item.get("properties") or {}).get("title")
        results.append(
            GeocodeCandidate(
                label=str(title) if title else query,
                lat=_round_coord(lat),
                lng=_round_coord(lng),
                source=GSI_SOURCE,
            )
        )
    return results


def parse_nominatim_results(data: Any, existing: list[GeocodeCandidate]) -> list[GeocodeCandidate]:
    """Convert Nominatim places, skipping ones next to an already known result."""
    if not isinstance(data, list):
        return []
    known = list(existing)
    added: list[GeocodeCandidate] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        lat, lng = safe_float(item.get("lat")), safe_float(item.get("lon"))
        if lat is None or lng is None:
            continue
        lat, lng = _round_coord(lat), _round_coord(lng)
        if _is_duplicate(known, lat, lng):
            continue
        parts = [part.strip() for part in str(item.get("display_name", "")).split(",")]
        candidate = GeocodeCandidate(label=" ".join(parts[:2]), lat=lat, lng=lng, source=OSM_SOURCE)
        known.append(candidate)
        added.append(candidate)
    return added


async def fetch_candidates(transport: Transport, config: KokudoConfig, query: str) -> list[GeocodeCandidate]:
    """Look up *query* and return at most five candidates.

    Raises
    ------
    KokudoTransportError
        If no request reached a service successfully.
    """
    results: list[GeocodeCandidate] = []
    attempts = 0
    failures = 0
    last_error: KokudoTransportError | None = None

    if config.gsi_enabled:
        attempts += 1
        try:
            data = await transport.get_json(config.gsi_url, params={"q": query})
            results.extend(parse_gsi_results(data, query))
        except KokudoTransportError as exc:
            failures += 1
            last_error = exc
            _logger.warning("GSI lookup for %r failed: %s", query, exc)

    nominatim_requests = 0
    for variant in search_variants(query):
        if len(results) >= MAX_GEOCODE_CANDIDATES:
            break
        if nominatim_requests > 0 and config.nominatim_delay > 0:
            await asyncio.sleep(config.nominatim_delay)
        nominatim_requests += 1
        attempts += 1
        params = {
            "format": "json",
            "limit": str(NOMINATIM_RESULT_LIMIT),
            "countrycodes": "jp",
            "q": variant,
        }
        try:
            data = await transport.get_json(
                config.nominatim_url,
                params=params,
                headers={"accept-language": config.language},
            )
        except KokudoTransportError as exc:
            failures += 1
            last_error = exc
            _logger.warning("Nominatim lookup for %r failed: %s", variant, exc)
            continue
        results.extend(parse_nominatim_results(data, results))

    if attempts and failures == attempts:
        raise KokudoTransportError(
            f"Geocoding {query!r} failed: every request errored",
            status_code=last_error.status_code if last_error else None,
            url=last_error.url if last_error else "",
        ) from last_error

    _logger.debug("Geocoding %r produced %d candidates", query, len(results))
    return results[:MAX_GEOCODE_CANDIDATES]
