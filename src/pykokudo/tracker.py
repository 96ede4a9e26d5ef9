"""Application facade tying the catalog, record store and queries together.

A presentation layer (CLI, web view, notebook) holds one :class:`Tracker`
and forwards user actions to it. The tracker owns the current
:class:`FilterState` and the active detail context; everything it
returns is a plain value.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from pykokudo._constants import STORAGE_KEY
from pykokudo.catalog import Catalog, load_catalog
from pykokudo.client import KokudoClient
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoConfirmationRequiredError
from pykokudo.models.geocode import GeocodeCandidate
from pykokudo.models.map import MapPin
from pykokudo.models.record import CollectionRecord, Photo
from pykokudo.models.route import RouteEntity
from pykokudo.models.wiki import RouteWikiInfo
from pykokudo.query.filters import FilterState, SortOrder, gallery_entities, visible_entities
from pykokudo.query.pins import route_pins
from pykokudo.query.stats import (
    ProgressSummary,
    RecentEntry,
    RegionProgress,
    recent_collected,
    region_breakdown,
    summarize,
)
from pykokudo.state.context import ActiveContext, ContextToken
from pykokudo.state.policy import ImportPolicy, MergeStats, merge_stores
from pykokudo.state.storage import JsonSlotStorage, SlotStorage
from pykokudo.state.store import RecordStore
from pykokudo.transfer import ExportDocument, export_store, format_route_summary, parse_store_payload

_logger = logging.getLogger(__name__)


class GeocodeStatus(StrEnum):
    NOT_FOUND = "not-found"
    APPLIED = "applied"
    CHOOSE = "choose"
    STALE = "stale"


@dataclass(frozen=True, slots=True)
class GeocodeOutcome:
    status: GeocodeStatus
    query: str
    candidates: list[GeocodeCandidate] = field(default_factory=list)
    record: CollectionRecord | None = None


class Tracker:
    """Route sticker tracker for one user session."""

    def __init__(self, catalog: Catalog, store: RecordStore) -> None:
        self._catalog = catalog
        self._store = store
        self._filter = FilterState()
        self._context = ActiveContext()

    @classmethod
    def open(cls, config: KokudoConfig, *, storage: SlotStorage | None = None) -> Tracker:
        """Load the catalog and the persisted store for *config*."""
        store = RecordStore(storage or JsonSlotStorage(config.data_dir, STORAGE_KEY))
        store.load()
        return cls(load_catalog(config.catalog_path), store)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def filter_state(self) -> FilterState:
        return self._filter

    @filter_state.setter
    def filter_state(self, state: FilterState) -> None:
        self._filter = state

    def refine(self, **changes: Any) -> FilterState:
        """Derive a new filter state from the current one and make it current."""
        self._filter = self._filter.evolve(**changes)
        return self._filter

    def require_route(self, route_id: int) -> RouteEntity:
        route = self._catalog.find(route_id)
        if route is None:
            raise KeyError(f"Unknown route {route_id}")
        return route

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def visible(self) -> list[RouteEntity]:
        return visible_entities(self._catalog, self._store.snapshot(), self._filter)

    def gallery(self, order: SortOrder = SortOrder.DATE_DESC, number_query: str = "") -> list[RouteEntity]:
        return gallery_entities(self._catalog, self._store.snapshot(), order, number_query)

    def summary(self) -> ProgressSummary:
        return summarize(self._catalog, self._store.snapshot())

    def regions(self) -> list[RegionProgress]:
        return region_breakdown(self._catalog, self._store.snapshot())

    def recent(self, limit: int = 2) -> list[RecentEntry]:
        return recent_collected(self._catalog, self._store.snapshot(), limit)

    def pins(self) -> list[MapPin]:
        return route_pins(self._catalog, self._store.snapshot())

    def record(self, route_id: int) -> CollectionRecord:
        return self._store.get(route_id)

    def share_text(self, route_id: int, wiki_extract: str | None = None) -> str:
        return format_route_summary(self.require_route(route_id), self._store.get(route_id), wiki_extract)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def quick_toggle(self, route_id: int, today: date | None = None) -> CollectionRecord:
        """Flip collected status; collecting stamps today's date, uncollecting clears it."""
        self.require_route(route_id)
        collected = not self._store.get(route_id).collected
        stamp = (today or date.today()).isoformat() if collected else None
        return self._store.update(route_id, collected=collected, date=stamp)

    def save_details(
        self,
        route_id: int,
        *,
        memo: str,
        location: str,
        lat: float | None,
        lng: float | None,
        photos: Sequence[Photo],
        date: str | None = None,
    ) -> CollectionRecord:
        """Save the edit form. The date is only written for collected routes."""
        self.require_route(route_id)
        patch: dict[str, Any] = {
            "memo": memo,
            "location": location.strip(),
            "lat": lat,
            "lng": lng,
            "photos": list(photos),
        }
        if self._store.get(route_id).collected:
            patch["date"] = date or None
        return self._store.update(route_id, **patch)

    def apply_candidate(self, route_id: int, candidate: GeocodeCandidate) -> CollectionRecord:
        return self._store.update(route_id, lat=candidate.lat, lng=candidate.lng)

    # ------------------------------------------------------------------
    # Export / import / reset
    # ------------------------------------------------------------------

    def export(self, today: date | None = None) -> ExportDocument:
        """Export valid records; unreadable stored entries stay in the slot only."""
        skipped = len(self._store.unreadable)
        if skipped:
            _logger.warning("Export leaves out %d unreadable stored records", skipped)
        return export_store(self._store.snapshot(), today)

    def import_payload(
        self,
        text: str | bytes,
        policy: ImportPolicy = ImportPolicy.MERGE,
        *,
        confirm: bool = False,
    ) -> MergeStats:
        """Import an exported store.

        The payload is validated before anything else; an overwrite also
        needs ``confirm=True``. Either failure leaves the store untouched.
        """
        incoming = parse_store_payload(text)
        if policy == ImportPolicy.OVERWRITE and not confirm:
            raise KokudoConfirmationRequiredError("overwrite import")
        result = merge_stores(self._store.snapshot(), incoming, policy)
        self._store.replace(result.records, keep_unreadable=policy == ImportPolicy.MERGE)
        _logger.info(
            "Imported %d records (%s): %d added, %d updated",
            result.stats.processed,
            policy.value,
            result.stats.added,
            result.stats.updated,
        )
        return result.stats

    def reset(self, *, confirm: bool = False) -> None:
        if not confirm:
            raise KokudoConfirmationRequiredError("reset")
        self._store.reset()

    # ------------------------------------------------------------------
    # Detail view and late async results
    # ------------------------------------------------------------------

    def open_detail(self, route_id: int) -> ContextToken:
        self.require_route(route_id)
        return self._context.open(route_id)

    def close_detail(self) -> None:
        self._context.close()

    def is_current(self, token: ContextToken) -> bool:
        return self._context.is_current(token)

    async def refresh_wiki_info(self, client: KokudoClient, token: ContextToken) -> RouteWikiInfo | None:
        """Fetch the route description; ``None`` if missing or the view moved on."""
        info = await client.fetch_route_wiki_info(token.route_id)
        if not self._context.is_current(token):
            _logger.debug("Discarding stale description for route %s", token.route_id)
            return None
        return info

    async def geocode_location(self, client: KokudoClient, token: ContextToken, query: str) -> GeocodeOutcome:
        """Geocode *query* for the open route.

        A single candidate is applied to the record straight away; several
        are returned for the user to choose from.
        """
        candidates = await client.geocode(query)
        if not self._context.is_current(token):
            _logger.debug("Discarding stale geocoding result for route %s", token.route_id)
            return GeocodeOutcome(status=GeocodeStatus.STALE, query=query)
        if not candidates:
            return GeocodeOutcome(status=GeocodeStatus.NOT_FOUND, query=query)
        if len(candidates) == 1:
            record = self.apply_candidate(token.route_id, candidates[0])
            return GeocodeOutcome(status=GeocodeStatus.APPLIED, query=query, candidates=candidates, record=record)
        return GeocodeOutcome(status=GeocodeStatus.CHOOSE, query=query, candidates=candidates)
