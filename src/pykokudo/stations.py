"""Roadside station (michi-no-eki) visit log.

A secondary, lighter dataset: a flat list of user-created entries kept in
its own slot, with a simpler import rule than the route store (id-keyed
union, incoming wins).
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from pykokudo._constants import MAX_STATION_PHOTOS
from pykokudo.exceptions import KokudoConfirmationRequiredError
from pykokudo.models.station import RoadsideStation
from pykokudo.state.storage import SlotStorage

_logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_station_id() -> str:
    """Epoch millis in base 36 followed by four random base-36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return _base36(int(time.time() * 1000)) + suffix


class VisitFilter(StrEnum):
    ALL = "all"
    VISITED = "visited"
    UNVISITED = "unvisited"


@dataclass(frozen=True, slots=True)
class StationSummary:
    visited: int
    stamped: int
    photos: int


class StationBook:
    """Station entries persisted in a single slot as a JSON array."""

    def __init__(self, storage: SlotStorage) -> None:
        self._storage = storage
        self._stations: list[RoadsideStation] = []

    def load(self) -> None:
        self._stations = []
        text = self._storage.read()
        if not text:
            return
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            _logger.debug("Stored stations are not JSON, starting empty: %s", exc)
            return
        if not isinstance(raw, list):
            _logger.debug("Stored stations are not a list, starting empty")
            return
        for item in raw:
            try:
                self._stations.append(RoadsideStation.model_validate(item))
            except ValidationError as exc:
                _logger.warning("Dropping invalid stored station: %s", exc.errors(include_url=False))

    def save(self) -> None:
        payload = [station.to_json_dict() for station in self._stations]
        self._storage.write(json.dumps(payload, ensure_ascii=False))

    @property
    def stations(self) -> list[RoadsideStation]:
        return list(self._stations)

    def __len__(self) -> int:
        return len(self._stations)

    def get(self, station_id: str) -> RoadsideStation | None:
        return next((s for s in self._stations if s.id == station_id), None)

    def _index(self, station_id: str) -> int | None:
        return next((i for i, s in enumerate(self._stations) if s.id == station_id), None)

    def upsert(self, station_id: str | None = None, **fields: Any) -> RoadsideStation:
        """Create a station (``station_id`` omitted) or update an existing one.

        Coordinates of an existing entry are kept unless passed explicitly.
        """
        name = str(fields.get("name") or "").strip()
        if not name:
            raise ValueError("station name is required")
        fields["name"] = name
        if isinstance(fields.get("memo"), str):
            fields["memo"] = fields["memo"].strip()

        index = self._index(station_id) if station_id else None
        if index is None:
            data = {"id": station_id or generate_station_id(), **fields}
            station = RoadsideStation.model_validate(data)
            self._stations.append(station)
        else:
            data = {**self._stations[index].to_json_dict(), **fields}
            station = RoadsideStation.model_validate(data)
            self._stations[index] = station
        self.save()
        return station

    def add_photos(self, station_id: str, photos: Iterable[str]) -> RoadsideStation:
        """Append photos up to the per-station cap; extras are ignored."""
        index = self._require(station_id)
        station = self._stations[index]
        room = MAX_STATION_PHOTOS - len(station.photos)
        added = list(photos)[: max(room, 0)]
        if not added:
            return station
        station = station.model_copy(update={"photos": [*station.photos, *added]})
        self._stations[index] = station
        self.save()
        return station

    def remove_photo(self, station_id: str, photo_index: int) -> RoadsideStation:
        index = self._require(station_id)
        station = self._stations[index]
        if not 0 <= photo_index < len(station.photos):
            raise IndexError(f"station {station_id} has no photo {photo_index}")
        photos = [p for i, p in enumerate(station.photos) if i != photo_index]
        station = station.model_copy(update={"photos": photos})
        self._stations[index] = station
        self.save()
        return station

    def _require(self, station_id: str) -> int:
        index = self._index(station_id)
        if index is None:
            raise KeyError(station_id)
        return index

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def visible(self, visit_filter: VisitFilter = VisitFilter.ALL, query: str = "") -> list[RoadsideStation]:
        """Filtered stations sorted by prefecture, then name.

        Ordering is by Unicode codepoint, not Japanese reading, so kana sort
        before kanji and a station without a prefecture comes first.
        """
        needle = query.strip().casefold()

        def keep(station: RoadsideStation) -> bool:
            if visit_filter == VisitFilter.VISITED and not station.visited:
                return False
            if visit_filter == VisitFilter.UNVISITED and station.visited:
                return False
            if needle and needle not in station.name.casefold() and needle not in station.pref.casefold():
                return False
            return True

        return sorted(filter(keep, self._stations), key=lambda s: (s.pref, s.name))

    def summary(self) -> StationSummary:
        return StationSummary(
            visited=sum(1 for s in self._stations if s.visited),
            stamped=sum(1 for s in self._stations if s.stamp),
            photos=sum(len(s.photos) for s in self._stations),
        )

    def recent(self, limit: int = 5) -> list[RoadsideStation]:
        dated = [s for s in self._stations if s.visited and s.date]
        dated.sort(key=lambda s: s.date, reverse=True)
        return dated[: max(limit, 0)]

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def import_stations(self, incoming: Iterable[RoadsideStation]) -> int:
        """Id-keyed union; incoming entries replace local ones with the same id."""
        merged = {station.id: station for station in self._stations}
        count = 0
        for station in incoming:
            merged[station.id] = station
            count += 1
        self._stations = list(merged.values())
        self.save()
        _logger.info("Imported %d stations (%d total)", count, len(self._stations))
        return count

    def reset(self, *, confirm: bool = False) -> None:
        if not confirm:
            raise KokudoConfirmationRequiredError("station reset")
        self._stations = []
        self.save()
