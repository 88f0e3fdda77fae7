"""
Remote chat endpoint client.

POST {CHAT_ENDPOINT_URL}/chat with {message, emotion, session_id};
the endpoint answers {"response": "..."}.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from apps.backend.services.core_service import CoreError

log = logging.getLogger("telco.chat.client")

CONNECT_ERROR_REPLY = (
    "I apologize, but I'm having trouble connecting right now. Please try again in a "
    "moment or contact our support hotline at +65 6221 1606."
)


class ChatClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def send(self, message: str, *, emotion: Optional[str] = None, session_id: Optional[str] = None) -> str:
        payload: Dict[str, Any] = {"message": message, "emotion": emotion, "session_id": session_id}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                r = await client.post(f"{self.base_url}/chat", json=payload)
            except httpx.HTTPError as e:
                log.warning("Chat endpoint unreachable: %s", e)
                raise CoreError(CONNECT_ERROR_REPLY, 502, "chat_unavailable")

        if r.status_code >= 400:
            log.warning("Chat endpoint failed: %s %s", r.status_code, r.text[:200])
            raise CoreError(CONNECT_ERROR_REPLY, 502, "chat_unavailable")

        data = r.json() if r.content else {}
        response = data.get("response") if isinstance(data, dict) else None
        if not isinstance(response, str):
            raise CoreError(CONNECT_ERROR_REPLY, 502, "chat_unavailable")
        return response
