"""Filtering and ordering of catalog routes.

Everything here is a pure function of (catalog, records, filter state):
no side effects, deterministic, and stable under repeated calls.

Date ordering compares ``YYYY-MM-DD`` strings lexicographically, with a
missing date treated as ``""``. Records therefore never hold partial
dates (see :func:`pykokudo.models.normalize_iso_date`).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pykokudo._constants import PREFECTURE_ORDER
from pykokudo.models.record import CollectionRecord, get_or_default
from pykokudo.models.route import RouteEntity


class CollectionFilter(StrEnum):
    ALL = "all"
    COLLECTED = "collected"
    NOT_COLLECTED = "not-collected"


class SortOrder(StrEnum):
    NUMBER_ASC = "number-asc"
    NUMBER_DESC = "number-desc"
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    REGION_ASC = "region-asc"


class FilterState(BaseModel):
    """Immutable browse state.

    The owner builds a new value on every user input via :meth:`evolve`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    collection: CollectionFilter = CollectionFilter.ALL
    region: str = ""
    category: str = ""
    query: str = ""
    sort: SortOrder = SortOrder.NUMBER_ASC

    @field_validator("region", "category", "query", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    def evolve(self, **changes: Any) -> FilterState:
        return FilterState.model_validate({**self.model_dump(), **changes})


def region_order(route: RouteEntity, order: Sequence[str] = PREFECTURE_ORDER) -> int:
    """Position of the route's primary region in *order*.

    The primary region is the prefecture of the starting point; unmatched
    routes get ``len(order)`` so they sort after every real position.
    """
    start = route.endpoint_from
    for index, name in enumerate(order):
        if name in start:
            return index
    return len(order)


def _record_date(records: Mapping[str, CollectionRecord], route: RouteEntity) -> str:
    return get_or_default(records, route.id).date or ""


def sort_entities(
    routes: Iterable[RouteEntity],
    records: Mapping[str, CollectionRecord],
    order: SortOrder,
) -> list[RouteEntity]:
    """Return *routes* ordered by *order*, ties broken by ascending id."""
    by_id = sorted(routes, key=lambda r: r.id)
    if order == SortOrder.NUMBER_ASC:
        return by_id
    if order == SortOrder.NUMBER_DESC:
        return by_id[::-1]
    if order == SortOrder.DATE_ASC:
        return sorted(by_id, key=lambda r: _record_date(records, r))
    if order == SortOrder.DATE_DESC:
        # sorted() stays stable with reverse=True, keeping ascending ids on ties.
        return sorted(by_id, key=lambda r: _record_date(records, r), reverse=True)
    if order == SortOrder.REGION_ASC:
        return sorted(by_id, key=region_order)
    raise ValueError(f"Unsupported sort order: {order!r}")


def matches(route: RouteEntity, record: CollectionRecord, state: FilterState) -> bool:
    """Whether *route* passes every active predicate of *state*."""
    if state.collection == CollectionFilter.COLLECTED and not record.collected:
        return False
    if state.collection == CollectionFilter.NOT_COLLECTED and record.collected:
        return False
    if state.region and state.region not in route.region:
        return False
    if state.category and route.category != state.category:
        return False
    if state.query:
        needle = state.query.casefold()
        haystacks = (str(route.id), route.region, route.endpoint_from, route.endpoint_to)
        if not any(needle in text.casefold() for text in haystacks):
            return False
    return True


def visible_entities(
    catalog: Iterable[RouteEntity],
    records: Mapping[str, CollectionRecord],
    state: FilterState,
) -> list[RouteEntity]:
    """Routes that pass *state*'s filters, in *state*'s sort order."""
    filtered = [route for route in catalog if matches(route, get_or_default(records, route.id), state)]
    return sort_entities(filtered, records, state.sort)


def gallery_entities(
    catalog: Iterable[RouteEntity],
    records: Mapping[str, CollectionRecord],
    order: SortOrder = SortOrder.DATE_DESC,
    number_query: str = "",
) -> list[RouteEntity]:
    """Collected routes for the photo gallery, optionally narrowed by route number."""
    collected = [route for route in catalog if get_or_default(records, route.id).collected]
    ordered = sort_entities(collected, records, order)
    needle = number_query.strip()
    if needle:
        ordered = [route for route in ordered if needle in str(route.id)]
    return ordered
