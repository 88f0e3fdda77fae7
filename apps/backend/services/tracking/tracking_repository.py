"""
Interaction Repository (Supabase Adapter)
=========================================

Table: public.user_interactions
- id uuid
- user_id uuid null (anonymous browsing is tracked too)
- category_id text
- category_name text
- clicked_item_id text null
- clicked_item_name text null
- device_info text (JSON string)
- clicked_at timestamptz
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

VIEW_COLUMNS = "id, user_id, category_id, category_name, clicked_item_id, clicked_item_name, clicked_at"


class TrackingRepository:
    def __init__(self, supabase_client: Any, *, table: str = "user_interactions") -> None:
        self.sb = supabase_client
        self.table = table

    async def insert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        r = self.sb.table(self.table).insert(payload).execute()
        data = getattr(r, "data", None) or []
        return data[0] if data else payload

    async def count(self) -> int:
        r = self.sb.table(self.table).select("*", count="exact", head=True).execute()
        return int(getattr(r, "count", None) or 0)

    async def user_ids(self) -> List[Optional[str]]:
        r = self.sb.table(self.table).select("user_id").execute()
        return [row.get("user_id") for row in (getattr(r, "data", None) or [])]

    async def category_names(self) -> List[str]:
        r = self.sb.table(self.table).select("category_name").not_.is_("category_name", "null").execute()
        return [row["category_name"] for row in (getattr(r, "data", None) or []) if row.get("category_name")]

    async def item_names(self) -> List[str]:
        r = self.sb.table(self.table).select("clicked_item_name").not_.is_("clicked_item_name", "null").execute()
        return [row["clicked_item_name"] for row in (getattr(r, "data", None) or []) if row.get("clicked_item_name")]

    async def recent_views(self, limit: int = 20, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        q = self.sb.table(self.table).select(VIEW_COLUMNS).not_.is_("clicked_item_name", "null")
        if user_id:
            q = q.eq("user_id", user_id)
        r = q.order("clicked_at", desc=True).limit(limit).execute()
        return getattr(r, "data", None) or []

    async def accessory_clicks(self, limit: int = 10) -> List[Dict[str, Any]]:
        r = (
            self.sb.table(self.table)
            .select("clicked_item_id, clicked_item_name, clicked_at, device_info")
            .eq("category_id", "accessories")
            .not_.is_("clicked_item_id", "null")
            .order("clicked_at", desc=True)
            .limit(limit)
            .execute()
        )
        return getattr(r, "data", None) or []

    async def trigger_deals(self, table: str, price_column: str) -> List[Dict[str, Any]]:
        r = self.sb.table(table).select("*").eq("boolean", True).order(price_column).execute()
        return getattr(r, "data", None) or []
