"""Import merge policy.

Reconciles an incoming snapshot of the store with the local one. The
functions here are pure: they never touch a :class:`RecordStore` and
return new mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pykokudo.models.record import CollectionRecord, photo_ref


class ImportPolicy(StrEnum):
    MERGE = "merge"
    OVERWRITE = "overwrite"


@dataclass(frozen=True, slots=True)
class MergeStats:
    """Counts reported back to the user after an import.

    ``added``: ids absent locally whose incoming record is collected.
    ``updated``: local records that were not collected and became so.
    ``processed``: number of incoming ids.
    """

    added: int = 0
    updated: int = 0
    processed: int = 0


@dataclass(frozen=True, slots=True)
class MergeResult:
    records: dict[str, CollectionRecord]
    stats: MergeStats


def merge_record(local: CollectionRecord, incoming: CollectionRecord) -> tuple[CollectionRecord, bool]:
    """Field-level, non-destructive merge of one record.

    Returns the merged record and whether it became collected.

    Policy:
    - ``collected`` is OR-ed; merging can only gain collected status.
    - ``memo``/``date``/``location`` take the incoming value only when
      the local one is empty.
    - ``lat``/``lng`` are adopted together, only when local ``lat`` is
      missing. Local ``lng`` is not consulted.
    - incoming photos are appended unless their reference is already
      present locally.
    """
    changes: dict[str, Any] = {}

    became_collected = incoming.collected and not local.collected
    if became_collected:
        changes["collected"] = True

    for name in ("memo", "date", "location"):
        if not getattr(local, name) and getattr(incoming, name):
            changes[name] = getattr(incoming, name)

    if local.lat is None and incoming.lat is not None:
        changes["lat"] = incoming.lat
        changes["lng"] = incoming.lng

    if incoming.photos:
        existing = {photo_ref(p) for p in local.photos}
        new_photos = [p for p in incoming.photos if photo_ref(p) not in existing]
        if new_photos:
            changes["photos"] = [*local.photos, *new_photos]

    if not changes:
        return local, False
    return local.model_copy(update=changes), became_collected


def merge_stores(
    local: Mapping[str, CollectionRecord],
    incoming: Mapping[str, CollectionRecord],
    policy: ImportPolicy = ImportPolicy.MERGE,
) -> MergeResult:
    """Combine *incoming* into *local* under *policy*.

    ``OVERWRITE`` returns *incoming* verbatim; guarding that behind a user
    confirmation is the caller's job.
    """
    if policy == ImportPolicy.OVERWRITE:
        return MergeResult(
            records=dict(incoming),
            stats=MergeStats(
                added=sum(1 for r in incoming.values() if r.collected),
                processed=len(incoming),
            ),
        )

    merged = dict(local)
    added = 0
    updated = 0
    for key, record in incoming.items():
        current = merged.get(key)
        if current is None:
            merged[key] = record
            if record.collected:
                added += 1
            continue
        merged[key], became_collected = merge_record(current, record)
        if became_collected:
            updated += 1

    return MergeResult(records=merged, stats=MergeStats(added=added, updated=updated, processed=len(incoming)))
