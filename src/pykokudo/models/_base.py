"""Base model and coercion helpers shared by the pykokudo models.

Every persisted model inherits from :class:`KokudoBaseModel` which
provides:

* frozen instances, so records are replaced rather than mutated;
* ``populate_by_name`` so aliased JSON keys (``from``/``to``/``type``)
  and Python field names are both accepted;
* a ``model_validator(mode="before")`` that drops ``None`` values for
  the fields listed in ``_NULL_AS_DEFAULT`` so the field default is used.
  Older exports wrote ``null`` for empty memos and locations.
"""

from __future__ import annotations

import math
import re
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator

_ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def safe_float(value: Any) -> float | None:
    """Lenient float parsing; blanks, garbage and NaN become ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def normalize_iso_date(value: Any) -> str | None:
    """Validate an ISO ``YYYY-MM-DD`` date string.

    Empty values become ``None``. Anything else that is not a full,
    zero-padded ISO date raises :class:`ValueError`: date ordering is a
    plain string comparison and only holds for that exact format.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"date must be a string, got {type(value).__name__}")
    text = value.strip()
    if not text:
        return None
    if not _ISO_DATE_RE.match(text):
        raise ValueError(f"date must be formatted YYYY-MM-DD, got {value!r}")
    return text


class KokudoBaseModel(BaseModel):
    """Base for pykokudo data models."""

    _NULL_AS_DEFAULT: ClassVar[frozenset[str]] = frozenset()
    """Fields whose explicit ``None`` falls back to the field default."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_null_defaults(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        nullable: frozenset[str] = getattr(cls, "_NULL_AS_DEFAULT", frozenset())
        if not nullable:
            return values
        return {key: value for key, value in values.items() if not (value is None and key in nullable)}
