"""
Loyalty Repository (Supabase Adapter)
=====================================

Purpose:
- DB-facing adapter for point balances, point transactions, daily reward
  streaks, and the voucher tables.
- Works against the supabase-py query builder.

Tables:
1) public.user_loyalty_points
   - user_id uuid primary key
   - total_points int default 0
   - current_tier text default 'Bronze'
   - points_earned_this_month int default 0
   - is_premium_member bool default false

2) public.loyalty_transactions
   - user_id uuid
   - transaction_type text ('earned' | 'redeemed')
   - points int (negative for redemptions)
   - description text
   - reference_id text
   - created_at timestamptz default now()

3) public.user_daily_rewards
   - user_id uuid primary key
   - last_claim_date date
   - current_streak int
   - total_claims int

4) public.loyalty_vouchers / accessory_vouchers / exclusive_vouchers
   - id, title, description, points_cost, value, category, subcategory,
     keywords text[], expiry_date, is_active, created_at
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


def _first(data: Any) -> Optional[Dict[str, Any]]:
    if not data:
        return None
    if isinstance(data, dict):
        return data
    if isinstance(data, list) and isinstance(data[0], dict):
        return data[0]
    return None


class LoyaltyRepository:
    def __init__(
        self,
        supabase_client: Any,
        *,
        table_points: str = "user_loyalty_points",
        table_transactions: str = "loyalty_transactions",
        table_daily: str = "user_daily_rewards",
        table_loyalty_vouchers: str = "loyalty_vouchers",
        table_accessory_vouchers: str = "accessory_vouchers",
        table_exclusive_vouchers: str = "exclusive_vouchers",
    ) -> None:
        self.sb = supabase_client
        self.table_points = table_points
        self.table_transactions = table_transactions
        self.table_daily = table_daily
        self.table_loyalty_vouchers = table_loyalty_vouchers
        self.table_accessory_vouchers = table_accessory_vouchers
        self.table_exclusive_vouchers = table_exclusive_vouchers

    # -----------------------------
    # Balance
    # -----------------------------
    async def get_points(self, user_id: str) -> Optional[Dict[str, Any]]:
        r = self.sb.table(self.table_points).select("*").eq("user_id", user_id).limit(1).execute()
        return _first(getattr(r, "data", None))

    async def create_points(self, user_id: str) -> Dict[str, Any]:
        payload = {
            "user_id": user_id,
            "total_points": 0,
            "current_tier": "Bronze",
            "points_earned_this_month": 0,
        }
        r = self.sb.table(self.table_points).insert(payload).execute()
        return _first(getattr(r, "data", None)) or payload

    async def update_points(self, user_id: str, patch: Dict[str, Any]) -> None:
        self.sb.table(self.table_points).update(patch).eq("user_id", user_id).execute()

    # -----------------------------
    # Transactions
    # -----------------------------
    async def add_transaction(
        self,
        user_id: str,
        *,
        transaction_type: str,
        points: int,
        description: str,
        reference_id: Optional[str] = None,
    ) -> None:
        self.sb.table(self.table_transactions).insert(
            {
                "user_id": user_id,
                "transaction_type": transaction_type,
                "points": int(points),
                "description": description,
                "reference_id": reference_id,
            }
        ).execute()

    async def list_transactions(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        r = (
            self.sb.table(self.table_transactions)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return getattr(r, "data", None) or []

    # -----------------------------
    # Daily rewards
    # -----------------------------
    async def get_daily(self, user_id: str) -> Optional[Dict[str, Any]]:
        r = self.sb.table(self.table_daily).select("*").eq("user_id", user_id).limit(1).execute()
        return _first(getattr(r, "data", None))

    async def upsert_daily(self, user_id: str, *, last_claim_date: str, current_streak: int, total_claims: int) -> None:
        self.sb.table(self.table_daily).upsert(
            {
                "user_id": user_id,
                "last_claim_date": last_claim_date,
                "current_streak": int(current_streak),
                "total_claims": int(total_claims),
            },
            on_conflict="user_id",
        ).execute()

    # -----------------------------
    # Vouchers
    # -----------------------------
    async def list_active_vouchers(self, table: str) -> List[Dict[str, Any]]:
        r = (
            self.sb.table(table)
            .select("*")
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
        return getattr(r, "data", None) or []

    async def list_loyalty_vouchers(self) -> List[Dict[str, Any]]:
        return await self.list_active_vouchers(self.table_loyalty_vouchers)

    async def list_accessory_vouchers(self) -> List[Dict[str, Any]]:
        return await self.list_active_vouchers(self.table_accessory_vouchers)

    async def list_exclusive_vouchers(self) -> List[Dict[str, Any]]:
        return await self.list_active_vouchers(self.table_exclusive_vouchers)

    async def find_voucher(self, voucher_id: str) -> Optional[Dict[str, Any]]:
        for table in (self.table_loyalty_vouchers, self.table_accessory_vouchers, self.table_exclusive_vouchers):
            r = self.sb.table(table).select("*").eq("id", voucher_id).limit(1).execute()
            row = _first(getattr(r, "data", None))
            if row:
                return row
        return None

    # -----------------------------
    # Search RPCs
    # -----------------------------
    async def log_search_and_get_vouchers(self, user_id: Optional[str], query: str, category: str) -> Dict[str, Any]:
        r = self.sb.rpc(
            "log_search_and_get_vouchers",
            {
                "searching_user_id": user_id,
                "search_query_input": query,
                "search_category_input": category,
            },
        ).execute()
        data = getattr(r, "data", None)
        return data if isinstance(data, dict) else {"vouchers": data or []}

    async def find_matching_vouchers(self, text: str) -> List[Dict[str, Any]]:
        r = self.sb.rpc("find_matching_vouchers", {"search_text": text}).execute()
        return getattr(r, "data", None) or []

    async def recent_searches(self, search_type: str = "accessory", limit: int = 10) -> List[str]:
        r = (
            self.sb.table("user_searches")
            .select("search_query")
            .eq("search_type", search_type)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        rows = getattr(r, "data", None) or []
        return [str(x.get("search_query")) for x in rows if x.get("search_query")]

    async def track_voucher_view(self, user_id: Optional[str], voucher_id: str, search_query: Optional[str]) -> None:
        self.sb.table("user_voucher_views").insert(
            {"user_id": user_id, "voucher_id": voucher_id, "search_query": search_query}
        ).execute()
