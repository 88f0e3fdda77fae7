"""
Plan Repository (Supabase Adapter)
==================================

Read-only access to the operator's plan tables and the customer usage
record.

Tables:
- "user-1": the customer's usage record ('Current Plan', 'Countries Visited',
  'Jan (GB)' .. 'Jun (GB)')
- Singtel_Sim_Plans / Starhub_Sim_Plans / Simba_Sim_Plans
- "roaming-offers-singtel": roaming packs ('Plan Name', 'Destinations',
  'Price and Data', 'Data', 'Price')
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

USER_TABLE = "user-1"
SINGTEL_TABLE = "Singtel_Sim_Plans"
STARHUB_TABLE = "Starhub_Sim_Plans"
SIMBA_TABLE = "Simba_Sim_Plans"
ROAMING_TABLE = "roaming-offers-singtel"


class PlanRepository:
    def __init__(self, supabase_client: Any) -> None:
        self.sb = supabase_client

    async def usage_record(self) -> Optional[Dict[str, Any]]:
        r = self.sb.table(USER_TABLE).select("*").limit(1).execute()
        data = getattr(r, "data", None) or []
        return data[0] if data else None

    async def singtel_plans(self) -> List[Dict[str, Any]]:
        r = self.sb.table(SINGTEL_TABLE).select("*").order("Position").execute()
        return getattr(r, "data", None) or []

    async def competitor_plans(self, table: str, limit: int = 5) -> List[Dict[str, Any]]:
        r = self.sb.table(table).select("*").limit(limit).execute()
        return getattr(r, "data", None) or []

    async def roaming_plans(self) -> List[Dict[str, Any]]:
        r = self.sb.table(ROAMING_TABLE).select("*").execute()
        return getattr(r, "data", None) or []
