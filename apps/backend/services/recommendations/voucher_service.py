"""
Voucher Service
===============

Read side of the rewards screen:
- smart bundle recommendations from click history
- the combined voucher catalog
- accessory vouchers matched to recent accessory clicks
- personalized product discounts
- accessory voucher search (RPC backed) and vouchers for the latest search
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from apps.backend import flags
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.recommendations.accessory_matcher import recommended_voucher_ids
from apps.backend.services.recommendations.behavior import InteractionEvent, analyze_behavior
from apps.backend.services.recommendations.discounts import personalized_discounts
from apps.backend.services.recommendations.smart_vouchers import DEFAULT_LIMIT, recommend
from apps.backend.services.recommendations.voucher_catalog import (
    DEMO_VOUCHERS,
    can_afford,
    combine_catalog,
    filter_by_category,
    is_high_value,
)
from apps.backend.services.tracking.tracking_repository import TrackingRepository

log = logging.getLogger("telco.vouchers")

HISTORY_LIMIT = 100
RECENT_SEARCHES = 5
SEARCH_CATEGORY = "accessories"


class VoucherService:
    def __init__(self, vouchers: LoyaltyRepository, interactions: TrackingRepository) -> None:
        self.vouchers = vouchers
        self.interactions = interactions

    async def _events(self, user_id: Optional[str]) -> List[InteractionEvent]:
        rows = await self.interactions.recent_views(limit=HISTORY_LIMIT, user_id=user_id)
        return [InteractionEvent.from_row(r) for r in rows]

    async def smart(self, user_id: Optional[str] = None, limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
        profile = analyze_behavior(await self._events(user_id))
        recs = recommend(profile, limit=limit)
        return {
            "recommendations": [r.to_dict() for r in recs],
            "behavior": profile.to_dict(),
        }

    async def catalog(self, category: str = "All", points_balance: Optional[int] = None) -> Dict[str, Any]:
        demo = False
        try:
            vouchers = combine_catalog(
                await self.vouchers.list_loyalty_vouchers(),
                await self.vouchers.list_accessory_vouchers(),
                await self.vouchers.list_exclusive_vouchers(),
            )
        except Exception as e:
            if not flags.demo_fallbacks():
                raise
            log.warning("Voucher tables unavailable, serving demo vouchers: %s", e)
            vouchers = [dict(v) for v in DEMO_VOUCHERS]
            demo = True

        out = []
        for v in filter_by_category(vouchers, category):
            item = dict(v)
            item["is_high_value"] = is_high_value(int(item.get("points_cost") or 0))
            if points_balance is not None:
                item["can_afford"] = can_afford(points_balance, item)
            out.append(item)
        return {"vouchers": out, "demo": demo}

    async def accessory_recommended(self) -> List[Dict[str, Any]]:
        clicks = await self.interactions.accessory_clicks()
        if not clicks:
            return []
        vouchers = await self.vouchers.list_accessory_vouchers()
        by_id = {str(v.get("id")): v for v in vouchers}
        return [by_id[i] for i in recommended_voucher_ids(clicks, vouchers) if i in by_id]

    async def discounts(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        events = await self._events(user_id)
        return [d.to_dict() for d in personalized_discounts(events)]

    async def search(self, query: str, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (query or "").strip()
        if not query:
            return []
        result = await self.vouchers.log_search_and_get_vouchers(user_id, query, SEARCH_CATEGORY)
        vouchers = result.get("vouchers") or []
        log.info("Accessory search query=%r matched=%d", query, len(vouchers))
        return vouchers

    async def recent_searches(self) -> List[str]:
        seen: Dict[str, None] = {}
        for q in await self.vouchers.recent_searches("accessory", limit=10):
            seen.setdefault(q, None)
        return list(seen)[:RECENT_SEARCHES]

    async def track_view(self, voucher_id: str, user_id: Optional[str], search_query: Optional[str]) -> None:
        await self.vouchers.track_voucher_view(user_id, voucher_id, search_query)

    async def vouchers_for_latest_search(self) -> Dict[str, Any]:
        """
        Vouchers for the most recent accessory search. Reads only; the
        search itself is not logged again.
        """
        searches = await self.recent_searches()
        if not searches:
            return {"query": None, "vouchers": []}
        vouchers = await self.vouchers.find_matching_vouchers(searches[0])
        return {"query": searches[0], "vouchers": vouchers}
