"""Helpers for safe debug logging.

Records carry photos as inline ``data:`` URLs that easily run to hundreds
of kilobytes. This module shrinks them (and any other long strings)
before payloads are emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_DATA_URL_PREFIX = "data:"


def _summarize_data_url(value: str) -> str:
    header, _, body = value.partition(",")
    return f"<{header[len(_DATA_URL_PREFIX):] or 'data'}:{len(body)}b>"


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a log-friendly copy of *value*."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if value.startswith(_DATA_URL_PREFIX):
            return _summarize_data_url(value)
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {str(k): redact_for_log(v, max_string=max_string, _depth=_depth + 1) for k, v in value.items()}

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
