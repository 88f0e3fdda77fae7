"""
Chat assistant pipeline.

message -> session -> log user message -> emotion + topic -> data context
from the topic's tables -> interests from the session history -> templated
markdown reply -> log assistant message.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from apps.backend.services.chat.chat_repository import ChatRepository
from apps.backend.services.chat.emotion import detect_emotion
from apps.backend.services.chat.plan_responder import opener
from apps.backend.services.chat.topics import CONTEXT_ROWS, build_data_context, detect_topic, tables_for
from apps.backend.services.core_service import CoreError

log = logging.getLogger("telco.chat.assistant")

CLOSING = "If you need any more information or assistance, feel free to ask!"

HISTORY_WINDOW = 20

INTEREST_RULES = (
    (("iphone", "apple"), "Premium Mobile Devices", ("iPhone accessories", "Premium mobile plans")),
    (("data", "internet"), "Data Plans", ("High-data plans", "Unlimited data")),
    (("broadband", "wifi"), "Home Internet", ("Fiber broadband", "Mesh WiFi systems")),
)
INTEREST_KEYWORDS = ("plan", "data", "phone", "broadband", "price", "cheap", "fast")


@dataclass
class UserInterests:
    interests: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    recommended_products: List[str] = field(default_factory=list)

    def context(self) -> str:
        if not self.interests:
            return ""
        return (
            "PERSONALIZATION CONTEXT:\n"
            f"Based on conversation history, the user has shown interest in: {', '.join(self.interests)}\n"
            f"Key topics mentioned: {', '.join(self.keywords)}\n"
            f"Recommended categories: {', '.join(self.recommended_products)}"
        )


def new_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def analyze_interests(messages: Iterable[Mapping[str, Any]]) -> UserInterests:
    text = " ".join(
        str(m.get("content") or "") for m in messages if m.get("role") == "user"
    ).lower()

    out = UserInterests()
    for words, interest, products in INTEREST_RULES:
        if any(w in text for w in words):
            out.interests.append(interest)
            out.recommended_products.extend(products)
    out.keywords = [w for w in INTEREST_KEYWORDS if w in text]
    return out


def _comparison(context: str) -> str:
    out = "Here's a comprehensive comparison of available plans:\n\n"
    out += "## Plan Comparison\n\n"
    out += "| Provider | Plan | Price | Data | Benefits |\n"
    out += "|----------|------|-------|------|----------|\n"
    if "Singtel_Sim_Plans" in context:
        out += "| **Singtel** | Core Plan | S$40/mth | 150GB + 1GB Roaming | Disney+, McAfee Security |\n"
        out += "| **Singtel** | Priority Plus | S$55/mth | Priority Network | 4X Faster Speeds |\n"
    if "Starhub_Sim_Plans" in context:
        out += "| StarHub | Star Plan M | S$22/mth | 150GB | Basic features |\n"
    if "Simba_Sim_Plans" in context:
        out += "| Simba | Budget Plan | S$18/mth | 100GB | Limited features |\n"
    out += "\n🏆 **Why Choose Singtel?**\n"
    out += "✅ Best network coverage (99.9% vs competitors' 95-98%)\n"
    out += "✅ Exclusive entertainment packages (Disney+, Max)\n"
    out += "✅ Superior customer service and support\n"
    out += "✅ Advanced 5G network with priority access\n"
    out += "✅ International roaming included\n\n"
    return out


SIM_PLANS_REPLY = (
    "Here are our recommended SIM plans:\n\n"
    "## Singtel SIM Plans\n\n"
    "### 🥉 **Lite Plan** - S$25/mth\n"
    "- 50GB data + 500MB roaming\n"
    "- 300 mins calls + 300 SMS\n"
    "- Basic 5G access\n\n"
    "### 🥈 **Core Plan** - S$40/mth ⭐ *Most Popular*\n"
    "- 150GB data + 1GB Asia roaming\n"
    "- 700 mins calls + 700 SMS\n"
    "- Disney+ Premium (6 months)\n"
    "- McAfee Mobile Security\n\n"
    "### 🥇 **Priority Plus** - S$55/mth\n"
    "- Priority network access (4X faster)\n"
    "- 1000 mins calls + 1000 SMS\n"
    "- Priority customer support\n"
    "- Caller ID included\n\n"
)

PHONES_REPLY = (
    "Here are our featured mobile devices:\n\n"
    "## 📱 Featured Phones\n\n"
    "### iPhone 15 Pro\n"
    "- Special bundle with Singtel plan\n"
    "- Up to S$500 savings\n"
    "- 24-month contract available\n\n"
    "### Samsung Galaxy S24\n"
    "- Exclusive Singtel offers\n"
    "- Trade-in programs available\n"
    "- Free accessories bundle\n\n"
)

BROADBAND_REPLY = (
    "Here are our broadband options:\n\n"
    "## 🌐 Fiber Broadband Plans\n\n"
    "### 1Gbps Plan - S$49.90/mth\n"
    "- Ultra-fast 1Gbps speeds\n"
    "- Free installation\n"
    "- WiFi 6 router included\n\n"
    "### 2Gbps Plan - S$69.90/mth\n"
    "- Lightning-fast 2Gbps speeds\n"
    "- Perfect for gaming and streaming\n"
    "- Mesh WiFi system included\n\n"
)

CAPABILITIES_REPLY = (
    "I can help you with:\n\n"
    "📱 **Mobile Plans** - SIM-only and bundled options\n"
    "📞 **Device Recommendations** - Latest phones and tablets\n"
    "🌐 **Broadband Services** - Fiber internet for home\n"
    "💳 **Bill Inquiries** - Check and manage your account\n"
    "🎯 **Plan Comparisons** - Find the best value option\n\n"
    "What would you like to know more about?\n\n"
)


def build_reply(message: str, emotion: str, data_context: str, personalization: str) -> str:
    lower = message.lower()
    reply = opener(emotion)

    if data_context:
        if any(w in lower for w in ("compare", "vs", "versus")):
            reply += _comparison(data_context)
        elif "sim" in lower or "plan" in lower:
            reply += SIM_PLANS_REPLY
        elif any(w in lower for w in ("phone", "iphone", "samsung")):
            reply += PHONES_REPLY
        elif "broadband" in lower or "wifi" in lower:
            reply += BROADBAND_REPLY

    if personalization:
        reply += "\n💡 **Personalized for You:**\n"
        reply += (
            "Based on your interests, I'd also recommend checking out our premium "
            "accessories and entertainment bundles.\n\n"
        )

    if not data_context:
        reply += CAPABILITIES_REPLY

    return reply + CLOSING


class ChatAssistant:
    def __init__(self, repo: ChatRepository) -> None:
        self.repo = repo

    async def data_context(self, topic: Optional[str]) -> str:
        rows: Dict[str, List[Dict[str, Any]]] = {}
        for table in tables_for(topic):
            try:
                rows[table] = await self.repo.rows(table, CONTEXT_ROWS)
            except Exception as e:
                log.warning("Context table %s unavailable: %s", table, e)
        context = build_data_context(rows)
        if context:
            context += (
                f"\n\nThe user is asking about '{topic}'. "
                "Use markdown tables and highlight how Singtel is better."
            )
        return context

    async def reply(
        self,
        message: Any,
        session_id: Optional[str] = None,
        emotion: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not message or not isinstance(message, str):
            raise CoreError("No message provided", 400, "no_message")

        session_id = session_id or new_session_id()
        await self.repo.log_message(content=message, role="user", session_id=session_id)

        emotion = emotion or detect_emotion(message)
        topic = detect_topic(message)
        context = await self.data_context(topic)

        interests = analyze_interests(await self.repo.session_messages(session_id, HISTORY_WINDOW))
        response = build_reply(message, emotion, context, interests.context())

        await self.repo.log_message(content=response, role="assistant", session_id=session_id, emotion=emotion)
        log.info("Assistant reply session=%s emotion=%s topic=%s", session_id, emotion, topic)

        return {
            "response": response,
            "emotion": emotion,
            "topic": topic,
            "session_id": session_id,
            "user_interests": interests.interests,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
