from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from apps.backend import flags
from apps.backend.db import get_supabase
from apps.backend.services.chat.assistant import ChatAssistant, new_session_id
from apps.backend.services.chat.chat_repository import ChatRepository
from apps.backend.services.chat.client import ChatClient
from apps.backend.services.chat.emotion import detect_emotion, emotion_color
from apps.backend.services.chat.plan_responder import GREETING
from apps.backend.services.chat.support import SupportChat
from apps.backend.services.settings import settings
from apps.backend.utils.envelope import error, ok

router = APIRouter(prefix="/chat", tags=["Chat"])


class SupportIn(BaseModel):
    message: str
    session_id: Optional[str] = None
    last_bot_message: Optional[str] = None


class AssistantIn(BaseModel):
    message: Optional[str] = None
    session_id: Optional[str] = None
    emotion: Optional[str] = None


@router.get("/support/greeting")
async def chat_greeting():
    return ok({"response": GREETING, "emotion": "neutral", "emotion_color": emotion_color("neutral")})


@router.post("/support")
async def chat_support(inb: SupportIn, supabase: Any = Depends(get_supabase)):
    if not flags.chat_enabled():
        return error("Chat is disabled", "feature_disabled", 404)
    res = await SupportChat(ChatRepository(supabase)).reply(
        inb.message,
        session_id=inb.session_id,
        last_bot_message=inb.last_bot_message,
    )
    return ok(res)


@router.post("/assistant")
async def chat_assistant(inb: AssistantIn, supabase: Any = Depends(get_supabase)):
    if not flags.chat_enabled():
        return error("Chat is disabled", "feature_disabled", 404)

    if not settings.CHAT_ENDPOINT_URL:
        res = await ChatAssistant(ChatRepository(supabase)).reply(inb.message, inb.session_id, inb.emotion)
        return ok(res, meta={"mode": "local"})

    if not inb.message:
        return error("No message provided", "no_message", 400)

    repo = ChatRepository(supabase)
    session_id = inb.session_id or new_session_id()
    emotion = inb.emotion or detect_emotion(inb.message)

    await repo.log_message(content=inb.message, role="user", session_id=session_id, emotion=emotion)
    client = ChatClient(settings.CHAT_ENDPOINT_URL, timeout=settings.CHAT_TIMEOUT_SECONDS)
    response = await client.send(inb.message, emotion=emotion, session_id=session_id)
    await repo.log_message(content=response, role="assistant", session_id=session_id)

    return ok(
        {"response": response, "emotion": emotion, "session_id": session_id},
        meta={"mode": "remote"},
    )
