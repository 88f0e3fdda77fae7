"""
Support chatbot: plan-aware replies with a purchase follow-up.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from apps.backend.services.chat.chat_repository import ChatRepository
from apps.backend.services.chat.emotion import detect_emotion, emotion_color
from apps.backend.services.chat.plan_responder import respond
from apps.backend.services.core_service import CoreError

log = logging.getLogger("telco.chat.support")


class SupportChat:
    def __init__(self, repo: ChatRepository) -> None:
        self.repo = repo

    async def reply(
        self,
        message: str,
        *,
        session_id: Optional[str] = None,
        last_bot_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        message = (message or "").strip()
        if not message:
            raise CoreError("No message provided", 400, "no_message")

        if last_bot_message is None and session_id:
            last_bot_message = await self.repo.last_assistant_message(session_id)

        emotion = detect_emotion(message)
        plans = await self.repo.plan_data()
        branch, text = respond(message, emotion, plans, last_bot_message)

        if session_id:
            await self.repo.log_message(content=message, role="user", session_id=session_id, emotion=emotion)
            await self.repo.log_message(content=text, role="assistant", session_id=session_id, emotion=emotion)

        log.info("Support reply branch=%s emotion=%s", branch, emotion)
        return {
            "response": text,
            "emotion": emotion,
            "emotion_color": emotion_color(emotion),
            "branch": branch,
            "session_id": session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
