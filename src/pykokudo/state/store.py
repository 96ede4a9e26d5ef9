"""Local record store.

The store maps route ids (as strings) to :class:`CollectionRecord`.
It is loaded once from its slot and is authoritative in memory after
that; every mutation rewrites the whole slot.

Stored entries that no longer validate are held as raw JSON and written
back unchanged, so a record is only ever lost by overwriting that id or
by a reset.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from pykokudo._redact import redact_for_log
from pykokudo.models.record import CollectionRecord, apply_patch, get_or_default
from pykokudo.state.storage import SlotStorage

_logger = logging.getLogger(__name__)


def split_records(text: str | None) -> tuple[dict[str, CollectionRecord], dict[str, Any]]:
    """Decode persisted store text into valid records and raw leftovers.

    Absent or malformed text yields two empty mappings. Entries that fail
    validation are returned untouched in the second mapping. Nothing here
    raises, since a damaged slot must not prevent the application from
    starting.
    """
    if not text:
        return {}, {}
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        _logger.debug("Stored data is not JSON, starting empty: %s", exc)
        return {}, {}
    if not isinstance(raw, dict):
        _logger.debug("Stored data is a %s, not an object; starting empty", type(raw).__name__)
        return {}, {}

    records: dict[str, CollectionRecord] = {}
    unreadable: dict[str, Any] = {}
    for key, value in raw.items():
        try:
            records[str(key)] = CollectionRecord.model_validate(value)
        except ValidationError as exc:
            _logger.warning("Keeping unreadable stored record %s as-is: %s", key, exc.errors(include_url=False))
            unreadable[str(key)] = value
    return records, unreadable


def decode_records(text: str | None) -> dict[str, CollectionRecord]:
    """Valid records from persisted store text; see :func:`split_records`."""
    return split_records(text)[0]


def encode_records(
    records: Mapping[str, CollectionRecord],
    *,
    indent: int | None = None,
    unreadable: Mapping[str, Any] | None = None,
) -> str:
    """Serialize records, writing *unreadable* raw entries back verbatim.

    A valid record wins over a raw entry with the same id.
    """
    payload: dict[str, Any] = dict(unreadable or {})
    payload.update((key, record.to_json_dict()) for key, record in records.items())
    return json.dumps(payload, ensure_ascii=False, indent=indent)


class RecordStore:
    """Mutable store of collection records backed by a slot."""

    def __init__(self, storage: SlotStorage) -> None:
        self._storage = storage
        self._records: dict[str, CollectionRecord] = {}
        self._unreadable: dict[str, Any] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def unreadable(self) -> Mapping[str, Any]:
        """Raw stored entries that failed validation, keyed by route id."""
        return MappingProxyType(dict(self._unreadable))

    def load(self) -> None:
        """Read the slot into memory, replacing anything already held."""
        self._records, self._unreadable = split_records(self._storage.read())
        self._loaded = True
        _logger.debug(
            "Loaded %d records (%d unreadable) from slot %s",
            len(self._records),
            len(self._unreadable),
            self._storage.key,
        )

    def _save(self) -> None:
        self._storage.write(encode_records(self._records, unreadable=self._unreadable))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, route_id: int | str) -> CollectionRecord:
        return get_or_default(self._records, route_id)

    def snapshot(self) -> Mapping[str, CollectionRecord]:
        """Read-only view of the current records.

        Records are frozen, so the copy is only one level deep.
        """
        return MappingProxyType(dict(self._records))

    def __contains__(self, route_id: object) -> bool:
        return str(route_id) in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._records))

    def to_json(self, *, indent: int | None = 2) -> str:
        return encode_records(self._records, indent=indent, unreadable=self._unreadable)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update(self, route_id: int | str, **patch: Any) -> CollectionRecord:
        """Upsert the merged record for *route_id* and persist.

        Editing an id whose stored entry was unreadable replaces that entry.
        """
        key = str(route_id)
        record = apply_patch(self.get(key), patch)
        self._records[key] = record
        self._unreadable.pop(key, None)
        _logger.debug("Updated record %s: %s", key, redact_for_log(patch))
        self._save()
        return record

    def replace(self, records: Mapping[str, CollectionRecord], *, keep_unreadable: bool = True) -> None:
        """Swap in *records*.

        Unreadable entries survive unless *keep_unreadable* is false or
        *records* holds the same id.
        """
        self._records = {str(key): value for key, value in records.items()}
        if keep_unreadable:
            self._unreadable = {k: v for k, v in self._unreadable.items() if k not in self._records}
        else:
            self._unreadable = {}
        _logger.debug("Replaced store with %d records", len(self._records))
        self._save()

    def reset(self) -> None:
        self._records = {}
        self._unreadable = {}
        _logger.info("Store reset")
        self._save()
