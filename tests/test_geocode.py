from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pykokudo._api import geocode
from pykokudo.client import KokudoClient
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoError, KokudoTransportError

_GSI_URL = "https://gsi.test/search"
_OSM_URL = "https://osm.test/search"


def _config(**overrides: Any) -> KokudoConfig:
    values: dict[str, Any] = {"gsi_url": _GSI_URL, "nominatim_url": _OSM_URL, "nominatim_delay": 0.0}
    values.update(overrides)
    return KokudoConfig(**values)


class _FakeTransport:
    def __init__(self, gsi: Any = None, osm: Any = None) -> None:
        self._responses = {_GSI_URL: gsi if gsi is not None else [], _OSM_URL: osm if osm is not None else []}
        self.calls: list[tuple[str, dict[str, str], dict[str, str]]] = []

    async def get_json(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        self.calls.append((url, dict(params or {}), dict(headers or {})))
        response = self._responses[url]
        if isinstance(response, Exception):
            raise response
        return response


def _gsi_feature(title: str, lat: float, lng: float) -> dict[str, Any]:
    return {"geometry": {"coordinates": [lng, lat]}, "properties": {"title": title}}


def _osm_place(name: str, lat: str, lng: str) -> dict[str, Any]:
    return {"display_name": name, "lat": lat, "lon": lng}


class TestQueryHelpers:
    def test_chain_abbreviations_are_expanded(self) -> None:
        assert geocode.normalize_chain_name("ファミマ 高崎店") == "ファミリーマート 高崎店"
        assert geocode.normalize_chain_name("セブン前橋") == "セブンイレブン前橋"
        assert geocode.normalize_chain_name("セブンイレブン前橋") == "セブンイレブン前橋"
        assert geocode.normalize_chain_name("日本橋") == "日本橋"

    def test_chain_store_variants(self) -> None:
        assert geocode.search_variants("ローソン 沼田") == ["ローソン 沼田", "ローソン 沼田店"]
        assert geocode.search_variants("ローソン 沼田店") == ["ローソン 沼田店"]

    def test_short_place_variants(self) -> None:
        assert geocode.search_variants("川場") == [
            "川場",
            "道の駅川場",
            "川場サービスエリア",
            "川場SA",
            "川場インターチェンジ",
            "川場店",
        ]

    def test_station_query_skips_station_variant(self) -> None:
        assert geocode.search_variants("道の駅川場田園プラザ") == ["道の駅川場田園プラザ", "道の駅川場田園プラザ店"]


def test_gsi_results_are_rounded_and_capped() -> None:
    data = [_gsi_feature(f"地点{i}", 36.123456789, 139.987654321) for i in range(5)]

    results = geocode.parse_gsi_results(data, "q")

    assert len(results) == 3
    assert results[0].lat == 36.123457
    assert results[0].lng == 139.987654
    assert results[0].source == "地理院"


def test_gsi_results_skip_malformed_features() -> None:
    data = [{"geometry": {"coordinates": [139.0]}}, {"geometry": {"coordinates": [139.0, 35.0]}}, "x"]

    results = geocode.parse_gsi_results(data, "fallback")

    assert [(r.label, r.lat) for r in results] == [("fallback", 35.0)]
    assert geocode.parse_gsi_results({"type": "FeatureCollection"}, "q") == []


def test_nominatim_results_dedupe_near_known_points() -> None:
    known = geocode.parse_gsi_results([_gsi_feature("川場", 36.69, 139.06)], "q")
    data = [
        _osm_place("道の駅 川場田園プラザ, 川場村, 群馬県", "36.6905", "139.0604"),
        _osm_place("川場スキー場, 川場村, 群馬県", "36.75", "139.12"),
        _osm_place("duplicate", "36.7502", "139.1201"),
    ]

    added = geocode.parse_nominatim_results(data, known)

    assert [c.label for c in added] == ["川場スキー場 川場村"]
    assert added[0].source == "OSM"


@pytest.mark.asyncio
async def test_fetch_candidates_merges_sources() -> None:
    transport = _FakeTransport(
        gsi=[_gsi_feature("川場村", 36.69, 139.06)],
        osm=[_osm_place("川場スキー場, 川場村", "36.75", "139.12")],
    )

    results = await geocode.fetch_candidates(transport, _config(language="ja"), "道の駅川場田園プラザ")

    assert [(c.label, c.source) for c in results] == [("川場村", "地理院"), ("川場スキー場 川場村", "OSM")]
    assert transport.calls[0][0] == _GSI_URL
    assert transport.calls[0][1] == {"q": "道の駅川場田園プラザ"}
    url, params, headers = transport.calls[1]
    assert url == _OSM_URL
    assert params["countrycodes"] == "jp"
    assert params["limit"] == "3"
    assert headers == {"accept-language": "ja"}
    assert len(transport.calls) == 3


@pytest.mark.asyncio
async def test_fetch_candidates_stops_at_five() -> None:
    osm = [_osm_place(f"場所{i}", str(30 + i), "135.0") for i in range(3)]
    osm_second = [_osm_place(f"別{i}", str(40 + i), "135.0") for i in range(3)]

    class _GrowingTransport(_FakeTransport):
        async def get_json(self, url: str, **kwargs: Any) -> Any:
            await super().get_json(url, **kwargs)
            return osm if len(self.calls) == 1 else osm_second

    transport = _GrowingTransport()
    results = await geocode.fetch_candidates(transport, _config(gsi_enabled=False), "川場")

    assert len(results) == 5
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_fetch_candidates_waits_between_nominatim_requests(monkeypatch: pytest.MonkeyPatch) -> None:
    delays: list[float] = []

    async def _fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr(geocode.asyncio, "sleep", _fake_sleep)
    transport = _FakeTransport()

    results = await geocode.fetch_candidates(transport, _config(nominatim_delay=1.0), "川場")

    assert results == []
    assert len(transport.calls) == 7
    assert delays == [1.0] * 5


@pytest.mark.asyncio
async def test_partial_failure_still_returns_results() -> None:
    transport = _FakeTransport(
        gsi=KokudoTransportError("HTTP 503", status_code=503, url=_GSI_URL),
        osm=[_osm_place("沼田市役所, 沼田市", "36.64", "139.04")],
    )

    results = await geocode.fetch_candidates(transport, _config(), "沼田市役所")

    assert [c.label for c in results] == ["沼田市役所 沼田市"]


@pytest.mark.asyncio
async def test_total_failure_raises_transport_error() -> None:
    error = KokudoTransportError("offline", url=_OSM_URL)
    transport = _FakeTransport(gsi=error, osm=error)

    with pytest.raises(KokudoTransportError, match="every request errored"):
        await geocode.fetch_candidates(transport, _config(), "川場")


@pytest.mark.asyncio
async def test_client_geocode_normalizes_query() -> None:
    transport = _FakeTransport()

    async with KokudoClient(_config(gsi_enabled=False), transport=transport) as client:
        results = await client.geocode("  ファミマ沼田 ")

    assert results == []
    assert transport.calls[0][1]["q"] == "ファミリーマート沼田"


@pytest.mark.asyncio
async def test_client_rejects_empty_query_and_requires_context() -> None:
    async with KokudoClient(_config(), transport=_FakeTransport()) as client:
        with pytest.raises(ValueError):
            await client.geocode("   ")

    with pytest.raises(KokudoError, match="not initialized"):
        await KokudoClient(_config()).geocode("川場")
