from __future__ import annotations

import random

import pytest
from pydantic import ValidationError

from pykokudo._constants import PREFECTURE_ORDER
from pykokudo.catalog import Catalog
from pykokudo.models import CollectionRecord, RouteEntity
from pykokudo.query import (
    CollectionFilter,
    FilterState,
    SortOrder,
    gallery_entities,
    region_order,
    sort_entities,
    visible_entities,
)


def _route(route_id: int, region: str = "関東", category: str = "一級", start: str = "東京都", end: str = "") -> RouteEntity:
    return RouteEntity.model_validate({"id": route_id, "region": region, "type": category, "from": start, "to": end})


def _ids(routes: list[RouteEntity]) -> list[int]:
    return [route.id for route in routes]


def test_collected_only_filter() -> None:
    catalog = Catalog([_route(1), _route(2), _route(3)])
    records = {"2": CollectionRecord(collected=True, date="2024-05-01")}

    result = visible_entities(catalog, records, FilterState(collection=CollectionFilter.COLLECTED))

    assert _ids(result) == [2]


def test_not_collected_filter_includes_routes_without_records() -> None:
    catalog = Catalog([_route(1), _route(2), _route(3)])
    records = {"2": CollectionRecord(collected=True)}

    result = visible_entities(catalog, records, FilterState(collection=CollectionFilter.NOT_COLLECTED))

    assert _ids(result) == [1, 3]


def test_date_desc_puts_undated_last() -> None:
    catalog = [_route(1), _route(2), _route(3)]
    records = {
        "1": CollectionRecord(date=""),
        "2": CollectionRecord(date="2024-01-01"),
        "3": CollectionRecord(date="2023-12-31"),
    }

    assert _ids(sort_entities(catalog, records, SortOrder.DATE_DESC)) == [2, 3, 1]
    assert _ids(sort_entities(catalog, records, SortOrder.DATE_ASC)) == [1, 3, 2]


def test_date_ties_break_by_ascending_id() -> None:
    catalog = [_route(5), _route(2), _route(9)]
    records = {key: CollectionRecord(date="2024-01-01") for key in ("2", "5", "9")}

    assert _ids(sort_entities(catalog, records, SortOrder.DATE_DESC)) == [2, 5, 9]
    assert _ids(sort_entities(catalog, records, SortOrder.DATE_ASC)) == [2, 5, 9]


def test_number_orders() -> None:
    catalog = [_route(30), _route(4), _route(17)]

    assert _ids(sort_entities(catalog, {}, SortOrder.NUMBER_ASC)) == [4, 17, 30]
    assert _ids(sort_entities(catalog, {}, SortOrder.NUMBER_DESC)) == [30, 17, 4]


def test_region_order_uses_starting_prefecture() -> None:
    tokyo = _route(1, start="東京都中央区")
    hokkaido = _route(5, start="北海道函館市")
    nowhere = _route(3, start="未定")

    assert region_order(hokkaido) == 0
    assert region_order(tokyo) == PREFECTURE_ORDER.index("東京")
    assert region_order(nowhere) == len(PREFECTURE_ORDER)
    assert _ids(sort_entities([nowhere, tokyo, hokkaido], {}, SortOrder.REGION_ASC)) == [5, 1, 3]


def test_region_and_category_filters() -> None:
    catalog = [
        _route(1, region="関東・中部", category="一級"),
        _route(2, region="九州", category="一級"),
        _route(3, region="関東", category="二級"),
    ]

    assert _ids(visible_entities(catalog, {}, FilterState(region="関東"))) == [1, 3]
    assert _ids(visible_entities(catalog, {}, FilterState(category="二級"))) == [3]
    assert _ids(visible_entities(catalog, {}, FilterState(region="関東", category="一級"))) == [1]


def test_search_matches_id_and_endpoints_case_insensitively() -> None:
    catalog = [
        _route(1, start="Tokyo", end="Osaka"),
        _route(12, start="札幌市", end="旭川市"),
        _route(21, start="岐阜県", end="滋賀県"),
    ]

    assert _ids(visible_entities(catalog, {}, FilterState(query="osaka"))) == [1]
    assert _ids(visible_entities(catalog, {}, FilterState(query="1"))) == [1, 12, 21]
    assert _ids(visible_entities(catalog, {}, FilterState(query=" 旭川 "))) == [12]
    assert visible_entities(catalog, {}, FilterState(query="那覇")) == []


def test_filter_state_evolve_and_validation() -> None:
    state = FilterState()
    refined = state.evolve(region=" 九州 ", sort="date-desc")

    assert refined.region == "九州"
    assert refined.sort is SortOrder.DATE_DESC
    assert state.region == ""
    with pytest.raises(ValidationError):
        state.evolve(sort="by-colour")
    with pytest.raises(ValidationError):
        FilterState(unknown="x")  # type: ignore[call-arg]


def test_gallery_lists_collected_routes_with_number_search() -> None:
    catalog = [_route(1), _route(10), _route(2), _route(3)]
    records = {
        "1": CollectionRecord(collected=True, date="2024-03-01"),
        "10": CollectionRecord(collected=True, date="2024-04-01"),
        "2": CollectionRecord(collected=True, date="2024-01-01"),
        "3": CollectionRecord(collected=False, date="2024-05-01"),
    }

    assert _ids(gallery_entities(catalog, records)) == [10, 1, 2]
    assert _ids(gallery_entities(catalog, records, SortOrder.NUMBER_ASC, number_query="1")) == [1, 10]


def _random_world(rng: random.Random) -> tuple[list[RouteEntity], dict[str, CollectionRecord]]:
    regions = ["関東", "東北・関東", "九州", "中部・近畿"]
    starts = ["東京都", "北海道", "福岡県", "大阪府", "不明"]
    ids = rng.sample(range(1, 200), rng.randint(0, 25))
    routes = [
        _route(i, region=rng.choice(regions), category=rng.choice(["一級", "二級"]), start=rng.choice(starts))
        for i in ids
    ]
    records: dict[str, CollectionRecord] = {}
    for route in routes:
        if rng.random() < 0.6:
            day = rng.choice([None, "2023-12-31", "2024-01-01", "2024-06-15"])
            records[route.key] = CollectionRecord(collected=rng.random() < 0.5, date=day)
    return routes, records


def _naive_filter(routes: list[RouteEntity], records: dict[str, CollectionRecord], state: FilterState) -> set[int]:
    selected = set()
    for route in routes:
        record = records.get(str(route.id), CollectionRecord())
        if state.collection == CollectionFilter.COLLECTED and not record.collected:
            continue
        if state.collection == CollectionFilter.NOT_COLLECTED and record.collected:
            continue
        if state.region and state.region not in route.region:
            continue
        if state.category and state.category != route.category:
            continue
        if state.query:
            fields = [str(route.id), route.region, route.endpoint_from, route.endpoint_to]
            if not any(state.query.lower() in f.lower() for f in fields):
                continue
        selected.add(route.id)
    return selected


def test_visible_entities_agree_with_naive_filter() -> None:
    rng = random.Random(20240501)
    for _ in range(200):
        routes, records = _random_world(rng)
        state = FilterState(
            collection=rng.choice(list(CollectionFilter)),
            region=rng.choice(["", "関東", "九州"]),
            category=rng.choice(["", "一級"]),
            query=rng.choice(["", "1", "東京"]),
            sort=rng.choice(list(SortOrder)),
        )

        result = visible_entities(routes, records, state)

        assert set(_ids(result)) == _naive_filter(routes, records, state)
        assert len(result) == len(set(_ids(result)))


def test_sorting_is_idempotent_and_deterministic() -> None:
    rng = random.Random(7)
    for _ in range(100):
        routes, records = _random_world(rng)
        order = rng.choice(list(SortOrder))

        once = sort_entities(routes, records, order)
        shuffled = list(routes)
        rng.shuffle(shuffled)

        assert sort_entities(once, records, order) == once
        assert sort_entities(shuffled, records, order) == once
