"""Aggregate progress views over the catalog and the record store."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pykokudo._constants import REGIONS
from pykokudo.models.record import CollectionRecord, get_or_default
from pykokudo.models.route import RouteEntity


def completion_percentage(collected: int, total: int) -> int:
    """Percentage rounded half up; 0 for an empty catalog."""
    if total <= 0:
        return 0
    return math.floor(collected / total * 100 + 0.5)


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    total: int
    collected: int

    @property
    def percentage(self) -> int:
        return completion_percentage(self.collected, self.total)


@dataclass(frozen=True, slots=True)
class RegionProgress:
    region: str
    done: int
    total: int

    @property
    def percentage(self) -> int:
        return completion_percentage(self.done, self.total)


@dataclass(frozen=True, slots=True)
class RecentEntry:
    route: RouteEntity
    record: CollectionRecord


def collected_count(catalog: Sequence[RouteEntity], records: Mapping[str, CollectionRecord]) -> int:
    return sum(1 for route in catalog if get_or_default(records, route.id).collected)


def summarize(catalog: Sequence[RouteEntity], records: Mapping[str, CollectionRecord]) -> ProgressSummary:
    return ProgressSummary(total=len(catalog), collected=collected_count(catalog, records))


def region_breakdown(
    catalog: Sequence[RouteEntity],
    records: Mapping[str, CollectionRecord],
    regions: Sequence[str] = REGIONS,
) -> list[RegionProgress]:
    """Per-region completion, in the order of *regions*.

    A route spanning several regions counts toward each of them. Regions
    without any route are left out.
    """
    breakdown: list[RegionProgress] = []
    for region in regions:
        routes = [route for route in catalog if region in route.region]
        if not routes:
            continue
        done = sum(1 for route in routes if get_or_default(records, route.id).collected)
        breakdown.append(RegionProgress(region=region, done=done, total=len(routes)))
    return breakdown


def recent_collected(
    catalog: Sequence[RouteEntity],
    records: Mapping[str, CollectionRecord],
    limit: int = 2,
) -> list[RecentEntry]:
    """Most recently collected routes, newest date first.

    Only collected, dated records for routes in the catalog are listed.
    Equal dates keep store order.
    """
    by_id = {route.key: route for route in catalog}
    entries = [
        RecentEntry(route=by_id[key], record=record)
        for key, record in records.items()
        if record.collected and record.date and key in by_id
    ]
    entries.sort(key=lambda entry: entry.record.date or "", reverse=True)
    return entries[: max(limit, 0)]
