"""Map pins for collected routes and visited stations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from urllib.parse import urlencode

from pykokudo._constants import (
    DEFAULT_MAP_CENTER,
    DEFAULT_MAP_ZOOM,
    MAPS_LINK_URL,
    MAX_FIT_ZOOM,
    SINGLE_PIN_ZOOM,
)
from pykokudo.models.map import MapPin, MapView
from pykokudo.models.record import CollectionRecord, photo_ref
from pykokudo.models.route import RouteEntity
from pykokudo.models.station import RoadsideStation


def route_pins(catalog: Iterable[RouteEntity], records: Mapping[str, CollectionRecord]) -> list[MapPin]:
    by_id = {route.key: route for route in catalog}
    pins: list[MapPin] = []
    for key, record in records.items():
        route = by_id.get(key)
        if route is None or not record.collected or not record.has_coordinates:
            continue
        lines: list[str] = []
        if record.location:
            lines.append(f"📍 {record.location}")
        if record.date:
            lines.append(f"📅 {record.date}")
        if record.memo:
            lines.append(f"📝 {record.memo}")
        pins.append(
            MapPin(
                lat=record.lat,  # type: ignore[arg-type]
                lng=record.lng,  # type: ignore[arg-type]
                label=route.label,
                popup_lines=lines,
                thumbnail=photo_ref(record.photos[0]) if record.photos else None,
            )
        )
    return pins


def station_pins(stations: Iterable[RoadsideStation]) -> list[MapPin]:
    return [
        MapPin(lat=s.lat, lng=s.lng, label=s.name, popup_lines=[s.pref] if s.pref else [])
        for s in stations
        if s.visited and s.lat and s.lng
    ]


def map_view(pins: Sequence[MapPin]) -> MapView:
    """Initial viewport: default overview, a single pin close up, or fitted bounds."""
    if not pins:
        return MapView(center=DEFAULT_MAP_CENTER, zoom=DEFAULT_MAP_ZOOM)
    if len(pins) == 1:
        return MapView(center=(pins[0].lat, pins[0].lng), zoom=SINGLE_PIN_ZOOM)
    lats = [p.lat for p in pins]
    lngs = [p.lng for p in pins]
    south_west = (min(lats), min(lngs))
    north_east = (max(lats), max(lngs))
    center = ((south_west[0] + north_east[0]) / 2, (south_west[1] + north_east[1]) / 2)
    return MapView(center=center, zoom=MAX_FIT_ZOOM, bounds=(south_west, north_east))


def map_link(lat: float | None, lng: float | None) -> str | None:
    if lat is None or lng is None:
        return None
    return f"{MAPS_LINK_URL}?{urlencode({'q': f'{lat},{lng}'})}"
