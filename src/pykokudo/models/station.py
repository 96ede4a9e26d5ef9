"""Roadside station (michi-no-eki) visit model."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import ConfigDict, Field, field_validator

from pykokudo.models._base import KokudoBaseModel, safe_float


class RoadsideStation(KokudoBaseModel):
    """A user-entered roadside station visit.

    Unlike routes, stations are not backed by a catalog: the user
    creates each entry, and ``id`` is generated on creation.
    """

    _NULL_AS_DEFAULT: ClassVar[frozenset[str]] = frozenset(
        {"pref", "date", "visited", "stamp", "memo", "photos"}
    )

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    id: str
    name: str
    pref: str = ""
    date: str = ""
    visited: bool = False
    stamp: bool = False
    memo: str = ""
    photos: list[str] = Field(default_factory=list)
    lat: float | None = None
    lng: float | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("station id must be non-empty")
        return text

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coord(cls, value: Any) -> float | None:
        return safe_float(value)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
