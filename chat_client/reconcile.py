"""
Latest-wins reconciliation of polled snapshots.

Every fetch takes a ticket for its scope before it goes out. A snapshot is
applied only if its ticket is newer than the last one applied for the same
scope and was not issued before the scope was last invalidated, so a slow
response can never roll the view back to older state.
"""

import logging
from typing import Any, Callable, Dict, Hashable

logger = logging.getLogger(__name__)


class LatestWins:
    def __init__(self):
        self._issued: Dict[Hashable, int] = {}
        self._applied: Dict[Hashable, int] = {}
        self._floor: Dict[Hashable, int] = {}

    def issue(self, scope: Hashable) -> int:
        ticket = self._issued.get(scope, 0) + 1
        self._issued[scope] = ticket
        return ticket

    def is_current(self, scope: Hashable, ticket: int) -> bool:
        return ticket > self._applied.get(scope, 0) and ticket > self._floor.get(scope, 0)

    def apply(self, scope: Hashable, ticket: int, snapshot: Any, setter: Callable[[Any], None]) -> bool:
        """Hand ``snapshot`` to ``setter`` unless a newer ticket already won"""
        if not self.is_current(scope, ticket):
            logger.debug(f"Discarded stale response for {scope} (ticket {ticket})")
            return False

        self._applied[scope] = ticket
        setter(snapshot)
        return True

    def invalidate(self, scope: Hashable):
        """Make every ticket issued so far for ``scope`` stale"""
        self._floor[scope] = self._issued.get(scope, 0)
