"""Persistent named slots.

A slot holds one whole JSON document. It is read once when a store
loads and rewritten in full after every mutation; there is no partial
or transactional write.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pykokudo.exceptions import KokudoStorageError

_logger = logging.getLogger(__name__)


class SlotStorage(Protocol):
    """Structural interface for a single named slot."""

    @property
    def key(self) -> str: ...

    def read(self) -> str | None: ...

    def write(self, text: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    """In-memory slot, for tests and throwaway sessions."""

    def __init__(self, key: str, initial: str | None = None) -> None:
        self._key = key
        self._text = initial
        self.writes = 0

    @property
    def key(self) -> str:
        return self._key

    def read(self) -> str | None:
        return self._text

    def write(self, text: str) -> None:
        self._text = text
        self.writes += 1

    def clear(self) -> None:
        self._text = None


class JsonSlotStorage:
    """Slot persisted as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path, key: str) -> None:
        self._directory = Path(directory)
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @property
    def path(self) -> Path:
        return self._directory / f"{self._key}.json"

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            _logger.warning("Could not read slot %s: %s", self.path, exc)
            return None

    def write(self, text: str) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._key}.", suffix=".tmp", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise KokudoStorageError(f"Could not write slot {self.path}: {exc}") from exc
        _logger.debug("Wrote slot %s (%d chars)", self.path, len(text))

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise KokudoStorageError(f"Could not remove slot {self.path}: {exc}") from exc
