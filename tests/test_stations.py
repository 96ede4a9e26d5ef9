from __future__ import annotations

import json

import pytest

from pykokudo.exceptions import KokudoConfirmationRequiredError
from pykokudo.models import RoadsideStation
from pykokudo.state.storage import MemoryStorage
from pykokudo.stations import StationBook, VisitFilter, generate_station_id


def _book(initial: str | None = None) -> tuple[StationBook, MemoryStorage]:
    storage = MemoryStorage("michinoeki_data", initial)
    book = StationBook(storage)
    book.load()
    return book, storage


def test_generated_ids_are_unique_base36() -> None:
    ids = {generate_station_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(i.isalnum() and i == i.lower() for i in ids)


def test_load_tolerates_corrupt_slot() -> None:
    assert len(_book("{broken")[0]) == 0
    assert len(_book('{"a": 1}')[0]) == 0

    book, _ = _book(json.dumps([{"id": "x", "name": "A"}, {"name": "missing id"}]))
    assert [s.id for s in book.stations] == ["x"]


def test_upsert_creates_and_updates() -> None:
    book, storage = _book()

    created = book.upsert(name=" 川場田園プラザ ", pref="群馬県", memo=" 朝 ", lat=36.69, lng=139.06)
    updated = book.upsert(created.id, name="川場田園プラザ", visited=True, date="2024-06-01")

    assert created.name == "川場田園プラザ"
    assert created.memo == "朝"
    assert updated.id == created.id
    assert updated.visited is True
    assert updated.lat == 36.69
    assert len(book) == 1
    assert storage.writes == 2
    assert json.loads(storage.read() or "")[0]["date"] == "2024-06-01"


def test_upsert_requires_name() -> None:
    book, _ = _book()

    with pytest.raises(ValueError):
        book.upsert(name="  ")


def test_photos_are_capped_and_removable() -> None:
    book, _ = _book()
    station = book.upsert(name="A")

    station = book.add_photos(station.id, [f"p{i}" for i in range(12)])
    assert len(station.photos) == 10

    station = book.remove_photo(station.id, 0)
    assert station.photos[0] == "p1"

    with pytest.raises(IndexError):
        book.remove_photo(station.id, 42)
    with pytest.raises(KeyError):
        book.add_photos("nope", ["x"])


def test_visible_filters_and_sorts() -> None:
    book, _ = _book()
    book.upsert(name="B駅", pref="長野県", visited=True)
    book.upsert(name="A駅", pref="長野県")
    book.upsert(name="C駅", pref="群馬県", visited=True, stamp=True)

    assert [s.name for s in book.visible()] == ["C駅", "A駅", "B駅"]
    assert [s.name for s in book.visible(VisitFilter.VISITED)] == ["C駅", "B駅"]
    assert [s.name for s in book.visible(VisitFilter.UNVISITED)] == ["A駅"]
    assert [s.name for s in book.visible(query="群馬")] == ["C駅"]


def test_visible_orders_by_codepoint() -> None:
    book, _ = _book()
    for name, pref in [("ア駅", "青森県"), ("亜駅", "北海道"), ("あ駅", "北海道"), ("ア駅", "北海道"), ("無所属", "")]:
        book.upsert(name=name, pref=pref)

    ordered = [(s.pref, s.name) for s in book.visible()]

    assert ordered == [
        ("", "無所属"),
        ("北海道", "あ駅"),
        ("北海道", "ア駅"),
        ("北海道", "亜駅"),
        ("青森県", "ア駅"),
    ]


def test_summary_and_recent() -> None:
    book, _ = _book()
    book.upsert(name="A", visited=True, stamp=True, date="2024-01-01", photos=["x", "y"])
    book.upsert(name="B", visited=True, date="2024-03-01")
    book.upsert(name="C", date="2024-09-01")

    summary = book.summary()

    assert (summary.visited, summary.stamped, summary.photos) == (2, 1, 2)
    assert [s.name for s in book.recent()] == ["B", "A"]


def test_import_is_id_keyed_union() -> None:
    book, _ = _book()
    local = book.upsert(station_id="s1", name="old")
    book.upsert(station_id="s2", name="kept")

    count = book.import_stations([
        RoadsideStation(id="s1", name="new"),
        RoadsideStation(id="s3", name="added"),
    ])

    assert count == 2
    assert local.id == "s1"
    assert {s.id: s.name for s in book.stations} == {"s1": "new", "s2": "kept", "s3": "added"}


def test_reset_requires_confirmation() -> None:
    book, _ = _book()
    book.upsert(name="A")

    with pytest.raises(KokudoConfirmationRequiredError):
        book.reset()
    assert len(book) == 1

    book.reset(confirm=True)
    assert len(book) == 0
