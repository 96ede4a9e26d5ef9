"""Data models for routes, collection records and collaborator results."""

from pykokudo.models._base import KokudoBaseModel, normalize_iso_date, safe_float
from pykokudo.models.geocode import GeocodeCandidate
from pykokudo.models.map import MapPin, MapView
from pykokudo.models.record import DEFAULT_RECORD, CollectionRecord, Photo, apply_patch, get_or_default, photo_ref
from pykokudo.models.route import RouteEntity
from pykokudo.models.station import RoadsideStation
from pykokudo.models.wiki import RouteWikiInfo

__all__ = [
    "CollectionRecord",
    "DEFAULT_RECORD",
    "GeocodeCandidate",
    "KokudoBaseModel",
    "MapPin",
    "MapView",
    "Photo",
    "RoadsideStation",
    "RouteEntity",
    "RouteWikiInfo",
    "apply_patch",
    "get_or_default",
    "normalize_iso_date",
    "photo_ref",
    "safe_float",
]
