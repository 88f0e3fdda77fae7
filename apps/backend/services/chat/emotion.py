"""
Keyword emotion detection for chat messages.

Rules are checked in order; the first rule with a keyword contained in the
lowercased message wins. Messages matching no rule fall back to counting
positive against negative words.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

NEUTRAL = "neutral"


@dataclass(frozen=True)
class EmotionRule:
    emotion: str
    keywords: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


EMOTION_RULES: Sequence[EmotionRule] = (
    EmotionRule("urgent", (
        "urgently", "urgent", "hurry", "quick", "faster", "as soon as possible",
        "soon", "short time", "asap", "immediately", "deadline", "no time", "rush",
    )),
    EmotionRule("price-sensitive", (
        "cheap", "affordable", "inexpensive", "not expensive", "budget friendly",
        "cheaper", "cheapest", "save", "budget", "too expensive", "cost", "money",
    )),
    EmotionRule("confused", (
        "confused", "confusing", "confuse", "unsure", "don't understand", "help",
        "help me", "lost", "complicated", "difficult", "challenging", "don't know",
        "unclear", "puzzled",
    )),
    EmotionRule("angry", ("angry", "frustrated", "terrible", "awful", "hate", "annoyed")),
    EmotionRule("happy", ("happy", "great", "excellent", "amazing", "wonderful", "fantastic", "love")),
    EmotionRule("sad", ("sad", "disappointed", "upset", "depressed")),
)

POSITIVE_WORDS = (
    "good", "great", "excellent", "amazing", "wonderful", "fantastic",
    "love", "like", "happy", "satisfied",
)
NEGATIVE_WORDS = (
    "bad", "terrible", "awful", "hate", "dislike", "angry",
    "frustrated", "annoyed", "upset", "disappointed",
)

EMOTION_COLORS: Dict[str, str] = {
    "urgent": "#E60012",
    "happy": "#4CAF50",
    "frustrated": "#FF6B35",
    "angry": "#FF6B35",
    "confused": "#FFA500",
    "price-sensitive": "#9C27B0",
}
DEFAULT_COLOR = "#666"


def sentiment(text: str) -> str:
    lower = (text or "").lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in lower)
    negative = sum(1 for w in NEGATIVE_WORDS if w in lower)
    if positive > negative:
        return "happy"
    if negative > positive:
        return "frustrated"
    return NEUTRAL


def detect_emotion(text: str, rules: Sequence[EmotionRule] = EMOTION_RULES) -> str:
    lower = (text or "").lower()
    for rule in rules:
        if rule.matches(lower):
            return rule.emotion
    return sentiment(lower)


def emotion_color(emotion: str) -> str:
    return EMOTION_COLORS.get(emotion, DEFAULT_COLOR)
