"""Geocoding result model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GeocodeCandidate(BaseModel):
    """A place returned by one of the geocoding services.

    Parameters
    ----------
    label : str
        Display label of the place.
    lat : float
        Latitude, rounded to 6 decimal places.
    lng : float
        Longitude, rounded to 6 decimal places.
    source : str
        Service that produced the candidate (``"地理院"`` or ``"OSM"``).
    """

    model_config = ConfigDict(frozen=True)

    label: str
    lat: float
    lng: float
    source: str
