"""
Live recommendation snapshots.

Subscribed to the activity hub: each delivered batch re-runs the
recommender for the customers in the batch and for the anonymous feed.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, List, Optional

log = logging.getLogger("telco.realtime.recommendations")

Compute = Callable[[Optional[str]], Awaitable[Dict[str, Any]]]

MAX_SNAPSHOTS = 1000


class RecommendationFeed:
    def __init__(self, compute: Compute, max_snapshots: int = MAX_SNAPSHOTS) -> None:
        self.compute = compute
        self.max_snapshots = max(1, max_snapshots)
        # least recently used first
        self.snapshots: "OrderedDict[Optional[str], Dict[str, Any]]" = OrderedDict()
        self.version = 0

    def get(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        key = user_id or None
        snapshot = self.snapshots.get(key)
        if snapshot is not None:
            self.snapshots.move_to_end(key)
        return snapshot

    def store(self, user_id: Optional[str], snapshot: Dict[str, Any]) -> None:
        key = user_id or None
        self.snapshots[key] = snapshot
        self.snapshots.move_to_end(key)
        while len(self.snapshots) > self.max_snapshots:
            evicted, _ = self.snapshots.popitem(last=False)
            log.debug("Recommendation snapshot evicted user=%s", evicted)

    async def on_activity(self, batch: List[Dict[str, Any]]) -> None:
        keys = {e.get("user_id") or None for e in batch}
        keys.add(None)
        self.version += 1
        for key in keys:
            try:
                self.store(key, await self.compute(key))
            except Exception as e:
                self.snapshots.pop(key, None)
                log.warning("Recommendation refresh failed user=%s: %s", key, e)
