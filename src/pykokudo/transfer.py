"""Export and import of the user's data as JSON documents."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import ValidationError

from pykokudo._constants import EXPORT_FILENAME_PREFIX, STATION_EXPORT_FILENAME_PREFIX
from pykokudo.exceptions import KokudoImportError
from pykokudo.models.record import CollectionRecord
from pykokudo.models.route import RouteEntity
from pykokudo.models.station import RoadsideStation
from pykokudo.state.store import encode_records


@dataclass(frozen=True, slots=True)
class ExportDocument:
    filename: str
    text: str

    @property
    def media_type(self) -> str:
        return "application/json"


def _today(today: date | None) -> str:
    return (today or date.today()).isoformat()


def export_store(records: Mapping[str, CollectionRecord], today: date | None = None) -> ExportDocument:
    """Serialize the whole store, named after the export date."""
    return ExportDocument(
        filename=f"{EXPORT_FILENAME_PREFIX}{_today(today)}.json",
        text=encode_records(records, indent=2),
    )


def _decode(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise KokudoImportError(f"Import file is not valid JSON: {exc}") from exc


def parse_store_payload(text: str | bytes) -> dict[str, CollectionRecord]:
    """Validate an exported store.

    The document must be a JSON object whose values are records. Raises
    :class:`KokudoImportError` otherwise.
    """
    raw = _decode(text)
    if not isinstance(raw, dict):
        raise KokudoImportError(f"Import data must be a JSON object, got {type(raw).__name__}")

    records: dict[str, CollectionRecord] = {}
    for key, value in raw.items():
        if not isinstance(value, dict):
            raise KokudoImportError(f"Record {key!r} must be an object, got {type(value).__name__}")
        try:
            records[str(key)] = CollectionRecord.model_validate(value)
        except ValidationError as exc:
            raise KokudoImportError(f"Record {key!r} is invalid: {exc}") from exc
    return records


def export_stations(stations: Iterable[RoadsideStation], today: date | None = None) -> ExportDocument:
    payload = [station.to_json_dict() for station in stations]
    return ExportDocument(
        filename=f"{STATION_EXPORT_FILENAME_PREFIX}{_today(today)}.json",
        text=json.dumps(payload, ensure_ascii=False, indent=2),
    )


def parse_station_payload(text: str | bytes) -> list[RoadsideStation]:
    raw = _decode(text)
    if not isinstance(raw, list):
        raise KokudoImportError(f"Station import must be a JSON array, got {type(raw).__name__}")
    try:
        return [RoadsideStation.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise KokudoImportError(f"Station import is invalid: {exc}") from exc


def format_route_summary(route: RouteEntity, record: CollectionRecord, wiki_extract: str | None = None) -> str:
    """Plain-text summary of one route, for sharing or the clipboard."""
    lines = [
        route.label,
        f"地域: {route.region}",
        f"起点: {route.endpoint_from}",
        f"終点: {route.endpoint_to}",
        "",
        f"取得状況: {'取得済み' if record.collected else '未取得'}",
    ]
    if record.collected:
        if record.date:
            lines.append(f"取得日: {record.date}")
        if record.location:
            lines.append(f"取得場所: {record.location}")
        if record.memo:
            lines.append(f"メモ: {record.memo}")
    if wiki_extract and wiki_extract.strip():
        lines.extend(["", f"概要: {wiki_extract.strip()}"])
    return "\n".join(lines)
