"""pykokudo - Personal progress tracker for national route (kokudo) stickers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pykokudo")
except PackageNotFoundError:
    __version__ = "0+local"
from pykokudo.catalog import Catalog, load_catalog
from pykokudo.client import KokudoClient
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import (
    KokudoConfigError,
    KokudoConfirmationRequiredError,
    KokudoError,
    KokudoImportError,
    KokudoStorageError,
    KokudoTransportError,
)
from pykokudo.models import (
    CollectionRecord,
    GeocodeCandidate,
    MapPin,
    MapView,
    RoadsideStation,
    RouteEntity,
    RouteWikiInfo,
)
from pykokudo.query import CollectionFilter, FilterState, SortOrder
from pykokudo.state.policy import ImportPolicy, MergeStats
from pykokudo.stations import StationBook, VisitFilter
from pykokudo.tracker import GeocodeOutcome, GeocodeStatus, Tracker

__all__ = [
    "__version__",
    "Catalog",
    "CollectionFilter",
    "CollectionRecord",
    "FilterState",
    "GeocodeCandidate",
    "GeocodeOutcome",
    "GeocodeStatus",
    "ImportPolicy",
    "KokudoClient",
    "KokudoConfig",
    "KokudoConfigError",
    "KokudoConfirmationRequiredError",
    "KokudoError",
    "KokudoImportError",
    "KokudoStorageError",
    "KokudoTransportError",
    "MapPin",
    "MapView",
    "MergeStats",
    "RoadsideStation",
    "RouteEntity",
    "RouteWikiInfo",
    "SortOrder",
    "StationBook",
    "VisitFilter",
    "load_catalog",
]
