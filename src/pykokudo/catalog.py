"""Static route catalog.

The catalog is bundled as ``data/routes.json`` and loaded once. It is
read-only at runtime: nothing in the library writes to it.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from pydantic import ValidationError

from pykokudo.exceptions import KokudoConfigError
from pykokudo.models.route import RouteEntity

_logger = logging.getLogger(__name__)


class Catalog(Sequence[RouteEntity]):
    """Ordered, immutable collection of routes with id lookup."""

    def __init__(self, routes: Iterable[RouteEntity]) -> None:
        self._routes: tuple[RouteEntity, ...] = tuple(routes)
        self._by_id: dict[int, RouteEntity] = {}
        for route in self._routes:
            if route.id in self._by_id:
                raise KokudoConfigError(f"Duplicate route id {route.id} in catalog")
            self._by_id[route.id] = route

    def __getitem__(self, index):  # type: ignore[override]
        return self._routes[index]

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteEntity]:
        return iter(self._routes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, RouteEntity):
            return self._by_id.get(item.id) == item
        return False

    def find(self, route_id: int | str) -> RouteEntity | None:
        try:
            return self._by_id.get(int(route_id))
        except (TypeError, ValueError):
            return None

    @property
    def categories(self) -> list[str]:
        """Distinct categories in catalog order."""
        return list(dict.fromkeys(r.category for r in self._routes if r.category))

    @classmethod
    def from_json(cls, text: str | bytes) -> Catalog:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise KokudoConfigError(f"Route catalog is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise KokudoConfigError("Route catalog must be a JSON array")
        try:
            return cls(RouteEntity.model_validate(item) for item in raw)
        except ValidationError as exc:
            raise KokudoConfigError(f"Invalid route in catalog: {exc}") from exc


def load_catalog(path: Path | None = None) -> Catalog:
    """Load the route catalog.

    Parameters
    ----------
    path : Path or None
        Catalog JSON file. If ``None``, the catalog bundled with the
        package is used.
    """
    if path is not None:
        _logger.debug("Loading route catalog from %s", path)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise KokudoConfigError(f"Route catalog not found: {path}") from exc
    else:
        _logger.debug("Loading route catalog from package data")
        raw = importlib.resources.files("pykokudo").joinpath("data/routes.json").read_bytes()

    catalog = Catalog.from_json(raw)
    _logger.debug("Route catalog loaded: %d routes", len(catalog))
    return catalog
