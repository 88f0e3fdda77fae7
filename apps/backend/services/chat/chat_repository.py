"""
Chat Repository (Supabase Adapter)
==================================

Tables:
- public.chat_messages (content, role, session_id, emotion, created_at)
- plan tables read for replies: Singtel_Sim_Plans, Starhub_Sim_Plans,
  Simba_Sim_Plans, CirclesLife_Sim_Plans, Mobile_with_SIM, Broadband, CAST.SG
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from apps.backend.services.chat.plan_responder import PLAN_TABLES, PlanData

log = logging.getLogger("telco.chat.repository")


class ChatRepository:
    def __init__(self, supabase_client: Any, *, table_messages: str = "chat_messages") -> None:
        self.sb = supabase_client
        self.table_messages = table_messages

    async def rows(self, table: str, limit: int = 10) -> List[Dict[str, Any]]:
        r = self.sb.table(table).select("*").limit(limit).execute()
        return getattr(r, "data", None) or []

    async def plan_data(self) -> PlanData:
        """
        A table that fails to load is left empty; replies degrade to
        their generic wording.
        """
        plans = PlanData()
        for attr, table, limit in PLAN_TABLES:
            try:
                setattr(plans, attr, await self.rows(table, limit))
            except Exception as e:
                log.warning("Plan table %s unavailable: %s", table, e)
        return plans

    async def log_message(
        self,
        *,
        content: str,
        role: str,
        session_id: str,
        emotion: Optional[str] = None,
    ) -> None:
        """
        Best effort: a reply is still returned when the message log is down.
        """
        try:
            self.sb.table(self.table_messages).insert(
                {
                    "content": content,
                    "role": role,
                    "session_id": session_id,
                    "emotion": emotion,
                    "created_at": datetime.now(timezone.utc).isoformat(),
                }
            ).execute()
        except Exception as e:
            log.warning("Chat message not logged session=%s role=%s: %s", session_id, role, e)

    async def session_messages(self, session_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        try:
            r = (
                self.sb.table(self.table_messages)
                .select("content, role")
                .eq("session_id", session_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            log.warning("Chat history unavailable session=%s: %s", session_id, e)
            return []
        return getattr(r, "data", None) or []

    async def last_assistant_message(self, session_id: str) -> Optional[str]:
        for m in await self.session_messages(session_id, limit=20):
            if m.get("role") == "assistant":
                return m.get("content")
        return None
