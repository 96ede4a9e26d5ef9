"""Map pin and viewport models consumed by map renderers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MapPin(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    label: str
    popup_lines: list[str] = Field(default_factory=list)
    thumbnail: str | None = None


class MapView(BaseModel):
    """Initial viewport for a set of pins.

    Either ``center``/``zoom`` is used, or ``bounds`` (south-west and
    north-east corners) with ``zoom`` as the maximum fit zoom.
    """

    model_config = ConfigDict(frozen=True)

    center: tuple[float, float]
    zoom: int
    bounds: tuple[tuple[float, float], tuple[float, float]] | None = None
