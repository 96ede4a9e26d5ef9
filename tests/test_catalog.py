from __future__ import annotations

import json
from pathlib import Path

import pytest

from pykokudo.catalog import Catalog, load_catalog
from pykokudo.exceptions import KokudoConfigError


def test_bundled_catalog_loads() -> None:
    catalog = load_catalog()

    assert len(catalog) > 0
    ids = [route.id for route in catalog]
    assert len(ids) == len(set(ids))
    assert catalog.find(1) is not None
    assert catalog.find("1") is catalog.find(1)
    assert set(catalog.categories) <= {"一級", "二級"}


def test_find_unknown_or_malformed_id() -> None:
    catalog = Catalog.from_json('[{"id": 1, "region": "関東", "type": "一級", "from": "a", "to": "b"}]')

    assert catalog.find(2) is None
    assert catalog.find("abc") is None


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(KokudoConfigError, match="Duplicate"):
        Catalog.from_json('[{"id": 1}, {"id": 1}]')


@pytest.mark.parametrize("text", ["{}", "not json", '[{"id": -3}]'])
def test_invalid_catalog_documents(text: str) -> None:
    with pytest.raises(KokudoConfigError):
        Catalog.from_json(text)


def test_load_catalog_from_path(tmp_path: Path) -> None:
    path = tmp_path / "routes.json"
    path.write_text(json.dumps([{"id": 7, "region": "東北", "type": "一級", "from": "新潟県", "to": "青森県"}]))

    catalog = load_catalog(path)

    assert [route.id for route in catalog] == [7]
    assert catalog[0].endpoint_to == "青森県"


def test_load_catalog_missing_path(tmp_path: Path) -> None:
    with pytest.raises(KokudoConfigError, match="not found"):
        load_catalog(tmp_path / "missing.json")
