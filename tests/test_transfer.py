from __future__ import annotations

import json
from datetime import date

import pytest

from pykokudo.exceptions import KokudoImportError
from pykokudo.models import CollectionRecord, RoadsideStation, RouteEntity
from pykokudo.transfer import (
    export_stations,
    export_store,
    format_route_summary,
    parse_station_payload,
    parse_store_payload,
)


def test_export_store_is_named_after_date_and_indented() -> None:
    records = {"17": CollectionRecord(collected=True, date="2024-05-01", memo="高崎")}

    document = export_store(records, today=date(2024, 5, 3))

    assert document.filename == "kokudo-sticker-2024-05-03.json"
    assert document.media_type == "application/json"
    assert '\n  "17": {' in document.text
    assert parse_store_payload(document.text) == records


@pytest.mark.parametrize("payload", ["[]", '[{"collected": true}]', '"x"', "42", "not json"])
def test_store_payload_must_be_an_object(payload: str) -> None:
    with pytest.raises(KokudoImportError):
        parse_store_payload(payload)


@pytest.mark.parametrize("payload", ['{"1": "collected"}', '{"1": {"date": "2024/01/01"}}', '{"1": [true]}'])
def test_store_payload_rejects_bad_records(payload: str) -> None:
    with pytest.raises(KokudoImportError, match="'1'"):
        parse_store_payload(payload)


def test_store_payload_accepts_bytes_and_nulls() -> None:
    records = parse_store_payload('{"3": {"collected": true, "memo": null, "lat": "35.0"}}'.encode())

    assert records["3"].memo == ""
    assert records["3"].lat == 35.0


def test_station_export_and_parse() -> None:
    stations = [RoadsideStation(id="a1", name="川場田園プラザ", pref="群馬県", visited=True)]

    document = export_stations(stations, today=date(2024, 8, 1))

    assert document.filename == "michinoeki_2024-08-01.json"
    assert isinstance(json.loads(document.text), list)
    assert parse_station_payload(document.text) == stations


@pytest.mark.parametrize("payload", ['{"a": 1}', '[{"name": "no id"}]', "oops"])
def test_station_payload_rejections(payload: str) -> None:
    with pytest.raises(KokudoImportError):
        parse_station_payload(payload)


def test_route_summary_text() -> None:
    route = RouteEntity.model_validate(
        {"id": 17, "region": "関東・中部", "type": "一級", "from": "東京都中央区", "to": "新潟県新潟市"}
    )
    record = CollectionRecord(collected=True, date="2024-05-01", location="道の駅 川場", memo="")

    text = format_route_summary(route, record, wiki_extract=" 日本の一般国道。 ")

    assert text.splitlines()[0] == "国道17号"
    assert "取得状況: 取得済み" in text
    assert "取得日: 2024-05-01" in text
    assert "取得場所: 道の駅 川場" in text
    assert "メモ" not in text
    assert text.endswith("概要: 日本の一般国道。")


def test_route_summary_for_uncollected_route() -> None:
    route = RouteEntity.model_validate({"id": 1})

    text = format_route_summary(route, CollectionRecord(date="2024-01-01"))

    assert "取得状況: 未取得" in text
    assert "取得日" not in text
