"""Active-context tracking for late asynchronous results.

Lookups (geocoding, encyclopedia text) complete after an arbitrary
delay. By then the user may have closed the detail view or switched to
another route, so results are committed only while the token taken when
the lookup started is still current.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ContextToken:
    route_id: int
    generation: int


class ActiveContext:
    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._current: ContextToken | None = None

    @property
    def current(self) -> ContextToken | None:
        return self._current

    def open(self, route_id: int) -> ContextToken:
        """Make *route_id* the active context.

        Reopening the same route still yields a fresh token, so results
        started before the reopen are discarded.
        """
        self._current = ContextToken(route_id=route_id, generation=next(self._counter))
        return self._current

    def close(self) -> None:
        self._current = None

    def is_current(self, token: ContextToken) -> bool:
        return self._current == token
