"""Query layer: filtering, ordering and aggregate views."""

from pykokudo.query.filters import (
    CollectionFilter,
    FilterState,
    SortOrder,
    gallery_entities,
    matches,
    region_order,
    sort_entities,
    visible_entities,
)
from pykokudo.query.pins import map_link, map_view, route_pins, station_pins
from pykokudo.query.stats import (
    ProgressSummary,
    RecentEntry,
    RegionProgress,
    collected_count,
    completion_percentage,
    recent_collected,
    region_breakdown,
    summarize,
)

__all__ = [
    "CollectionFilter",
    "FilterState",
    "ProgressSummary",
    "RecentEntry",
    "RegionProgress",
    "SortOrder",
    "collected_count",
    "completion_percentage",
    "gallery_entities",
    "map_link",
    "map_view",
    "matches",
    "recent_collected",
    "region_breakdown",
    "region_order",
    "route_pins",
    "sort_entities",
    "station_pins",
    "summarize",
    "visible_entities",
]
