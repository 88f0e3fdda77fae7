"""
Interaction tracking.

Records what customers tap on, awards engagement points to signed-in
customers, and pushes each new event onto the activity hub so live views
and recommendations refresh.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.services.realtime.activity_hub import ActivityHub
from apps.backend.services.tracking.tracking_repository import TrackingRepository

log = logging.getLogger("telco.tracking")

ACTIONS = ("view", "click", "search", "chat")
TOP_CATEGORIES = 5
RECENT_ACTIVITY = 10
RECENT_VIEWS = 20
MERGED_VIEWS = 8

IPHONE_MARKER = "apple iphone"
SIM_PLAN_MARKERS = ("lite", "core", "priority plus", "priority ultra")
IPHONE_DEALS_TABLE = ("trigger_condition_recommendation_iphone", "price_sgd")
SIM_DEALS_TABLE = ("trigger_condition_recommendations_sim", "Price (S$)")


def build_interaction(
    *,
    action: str,
    user_id: Optional[str] = None,
    category: Optional[str] = None,
    category_name: Optional[str] = None,
    item_id: Optional[str] = None,
    item_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    device: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Row for user_interactions. category_id is the lowercased category;
    device_info is stored as a JSON string.
    """
    now = now or datetime.now(timezone.utc)
    device_info = dict(device or {})
    device_info.update({
        "timestamp": now.isoformat(),
        "action_type": action,
        "metadata": metadata or None,
    })
    return {
        "user_id": user_id or None,
        "category_id": category.lower() if category else None,
        "category_name": category_name or category or None,
        "clicked_item_id": str(item_id) if item_id is not None else None,
        "clicked_item_name": item_name or None,
        "device_info": json.dumps(device_info),
        "clicked_at": now.isoformat(),
    }


def top_categories(names: Iterable[str], limit: int = TOP_CATEGORIES) -> List[Dict[str, Any]]:
    counts = Counter(n for n in names if n)
    return [{"category": name, "count": count} for name, count in counts.most_common(limit)]


def merge_views(primary: List[Dict[str, Any]], extra: List[Dict[str, Any]], limit: int = MERGED_VIEWS) -> List[Dict[str, Any]]:
    """
    Deduplicate on (item name, category id), keeping the most recent click.
    """
    merged: Dict[tuple, Dict[str, Any]] = {}
    order: List[tuple] = []
    for view in list(primary) + list(extra):
        key = (view.get("clicked_item_name"), view.get("category_id"))
        if key not in merged:
            merged[key] = view
            order.append(key)
        elif str(view.get("clicked_at") or "") > str(merged[key].get("clicked_at") or ""):
            merged[key] = view
    return [merged[k] for k in order][:limit]


def triggered_deal_kinds(item_names: Iterable[str]) -> List[str]:
    names = [n.lower() for n in item_names if n]
    kinds = []
    if any(IPHONE_MARKER in n for n in names):
        kinds.append("iphone")
    if any(any(m in n for m in SIM_PLAN_MARKERS) for n in names):
        kinds.append("sim")
    return kinds


class TrackingService:
    def __init__(
        self,
        repo: TrackingRepository,
        *,
        loyalty: Optional[LoyaltyService] = None,
        hub: Optional[ActivityHub] = None,
    ) -> None:
        self.repo = repo
        self.loyalty = loyalty
        self.hub = hub

    async def record_interaction(self, **fields: Any) -> Dict[str, Any]:
        row = build_interaction(**fields)
        saved = await self.repo.insert(row)

        award = None
        user_id = row["user_id"]
        if user_id and fields.get("action") == "click" and self.loyalty is not None:
            try:
                award = await self.loyalty.award_engagement(user_id, "click", row["category_name"])
            except Exception as e:
                # click stays recorded without points
                log.warning("Engagement points not awarded user=%s: %s", user_id, e)

        if self.hub is not None:
            self.hub.publish(saved)

        return {"interaction": saved, "points": award}

    async def activity_summary(self) -> Dict[str, Any]:
        total = await self.repo.count()
        users = {u for u in await self.repo.user_ids() if u}
        categories = top_categories(await self.repo.category_names())
        recent = await self.repo.recent_views(limit=RECENT_ACTIVITY)
        return {
            "total_views": total,
            "unique_users": len(users),
            "top_categories": categories,
            "recent_activity": recent,
        }

    async def recent_views(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        total = await self.repo.count()
        views = await self.repo.recent_views(limit=RECENT_VIEWS, user_id=user_id)
        return {"total_views": total, "recent_views": views}

    async def personalized_views(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Signed-in customers see their own views first, topped up with
        general recent activity.
        """
        general = await self.repo.recent_views(limit=RECENT_VIEWS if not user_id else RECENT_ACTIVITY)
        if not user_id:
            return merge_views(general, [])
        own = await self.repo.recent_views(limit=RECENT_VIEWS, user_id=user_id)
        return merge_views(own, general)

    async def triggered_deals(self) -> Dict[str, List[Dict[str, Any]]]:
        kinds = triggered_deal_kinds(await self.repo.item_names())
        deals: Dict[str, List[Dict[str, Any]]] = {"iphone": [], "sim": []}
        if "iphone" in kinds:
            deals["iphone"] = await self.repo.trigger_deals(*IPHONE_DEALS_TABLE)
        if "sim" in kinds:
            deals["sim"] = await self.repo.trigger_deals(*SIM_DEALS_TABLE)
        return deals
