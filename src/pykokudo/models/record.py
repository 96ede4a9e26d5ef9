"""Per-route collection record."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import ConfigDict, Field, field_validator

from pykokudo.models._base import KokudoBaseModel, normalize_iso_date, safe_float

Photo = str | dict[str, Any]
"""A photo is a bare reference (usually a data URL) or a mapping with ``url``."""


def photo_ref(photo: Any) -> str | None:
    """Return the identifying reference of a photo entry."""
    if isinstance(photo, str):
        return photo
    if isinstance(photo, Mapping):
        url = photo.get("url")
        return url if isinstance(url, str) else None
    return None


class CollectionRecord(KokudoBaseModel):
    """Collection state of a single route.

    Absence from the store is equivalent to ``CollectionRecord()``.
    Unknown keys are kept so that imported data survives a round-trip.

    Parameters
    ----------
    collected : bool
        Whether the sticker has been collected.
    memo : str
        Free-text note.
    date : str or None
        Collection date, ``YYYY-MM-DD``.
    location : str
        Free-text place where it was collected.
    lat : float or None
        Latitude of the place.
    lng : float or None
        Longitude of the place.
    photos : list
        Photo references in display order.
    """

    _NULL_AS_DEFAULT: ClassVar[frozenset[str]] = frozenset({"collected", "memo", "location", "photos"})

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    collected: bool = False
    memo: str = ""
    date: str | None = None
    location: str = ""
    lat: float | None = None
    lng: float | None = None
    photos: list[Photo] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value: Any) -> str | None:
        return normalize_iso_date(value)

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coord(cls, value: Any) -> float | None:
        return safe_float(value)

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    def photo_refs(self) -> list[str]:
        return [ref for ref in (photo_ref(p) for p in self.photos) if ref is not None]

    def to_json_dict(self) -> dict[str, Any]:
        """Serialized form used by the persistent slot and exports."""
        return self.model_dump(mode="json")


DEFAULT_RECORD = CollectionRecord()


def apply_patch(record: CollectionRecord, patch: Mapping[str, Any]) -> CollectionRecord:
    """Shallow-merge *patch* into *record*, returning a new record.

    The patched result is re-validated, so a patch can use the same loose
    inputs as imported JSON (e.g. string coordinates).
    """
    if not patch:
        return record
    merged = record.to_json_dict()
    merged.update(patch)
    return CollectionRecord.model_validate(merged)


def get_or_default(records: Mapping[str, CollectionRecord], route_id: int | str) -> CollectionRecord:
    """Look up a record without materializing a missing entry."""
    return records.get(str(route_id), DEFAULT_RECORD)
