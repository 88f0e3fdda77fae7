"""
Behavior Profile (Canonical)
============================

Purpose:
- Turn a customer's click history (user_interactions rows) into a compact
  profile the voucher recommender can score against.
- Pure domain logic: no DB, no HTTP.

Rules are declarative: each PatternRule maps a set of keywords found in the
clicked item label to a tag. Adding a new interest is a one-line change to
RULES, not a new branch.

Weighting:
- Events arrive newest-first.
- Event i is weighted max(1, 5 - i // 20): the 20 most recent clicks count
  5x, the next 20 count 4x, and so on down to 1x.
- Hour-of-day buckets count events, unweighted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple


EngagementLevel = Literal["high", "medium", "low"]

RECENT_WINDOW = 20
MAX_WEIGHT = 5


@dataclass(frozen=True)
class PatternRule:
    """
    tag: interest label accumulated in BehaviorProfile.item_patterns
    keywords: substrings matched against the lowercased item label
    weight: multiplier applied on top of the recency weight
    """
    tag: str
    keywords: Tuple[str, ...]
    weight: int = 1

    def matches(self, label: str) -> bool:
        return any(k in label for k in self.keywords)


@dataclass(frozen=True)
class TimeBucket:
    tag: str
    start_hour: int
    end_hour: int  # inclusive

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour <= self.end_hour


RULES: Tuple[PatternRule, ...] = (
    PatternRule("premium_mobile", ("iphone", "apple")),
    PatternRule("android_premium", ("samsung", "galaxy")),
    PatternRule("audio_enthusiast", ("headphone", "audio", "earphone", "speaker")),
    PatternRule("entertainment_lover", ("netflix", "disney", "streaming", "entertainment")),
    PatternRule("security_conscious", ("security", "protection", "antivirus", "mcafee")),
    PatternRule("connectivity_focused", ("broadband", "wifi", "internet", "fibre")),
    PatternRule("gaming_enthusiast", ("gaming", "game", "console")),
)

TIME_BUCKETS: Tuple[TimeBucket, ...] = (
    TimeBucket("evening_user", 18, 23),
    TimeBucket("business_hours", 9, 17),
)


@dataclass(frozen=True)
class InteractionEvent:
    """
    One row of user_interactions, reduced to what the recommender reads.
    """
    category_id: Optional[str]
    category_name: Optional[str]
    clicked_item_name: Optional[str]
    clicked_at: Optional[datetime]
    user_id: Optional[str] = None
    clicked_item_id: Optional[str] = None

    @property
    def category(self) -> Optional[str]:
        if self.category_id:
            return self.category_id
        if self.category_name:
            return self.category_name.lower()
        return None

    @property
    def label(self) -> str:
        return (self.clicked_item_name or "").lower()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "InteractionEvent":
        return cls(
            category_id=row.get("category_id"),
            category_name=row.get("category_name"),
            clicked_item_name=row.get("clicked_item_name"),
            clicked_at=parse_timestamp(row.get("clicked_at")),
            user_id=row.get("user_id"),
            clicked_item_id=(str(row["clicked_item_id"]) if row.get("clicked_item_id") is not None else None),
        )


@dataclass(frozen=True)
class BehaviorProfile:
    category_frequency: Dict[str, int] = field(default_factory=dict)
    item_patterns: Dict[str, int] = field(default_factory=dict)
    time_patterns: Dict[str, int] = field(default_factory=dict)
    total_interactions: int = 0
    engagement_level: EngagementLevel = "low"
    recent: List[InteractionEvent] = field(default_factory=list)

    def pattern(self, tag: str) -> int:
        return self.item_patterns.get(tag, 0)

    def category(self, key: str) -> int:
        return self.category_frequency.get(key, 0)

    def time(self, tag: str) -> int:
        return self.time_patterns.get(tag, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_frequency": dict(self.category_frequency),
            "item_patterns": dict(self.item_patterns),
            "time_patterns": dict(self.time_patterns),
            "total_interactions": self.total_interactions,
            "engagement_level": self.engagement_level,
        }


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def recency_weight(index: int) -> int:
    return max(1, MAX_WEIGHT - index // RECENT_WINDOW)


def engagement_for(total: int) -> EngagementLevel:
    if total > 50:
        return "high"
    if total > 20:
        return "medium"
    return "low"


def analyze_behavior(
    events: Iterable[InteractionEvent],
    *,
    rules: Iterable[PatternRule] = RULES,
    buckets: Iterable[TimeBucket] = TIME_BUCKETS,
) -> BehaviorProfile:
    """
    events must be ordered newest-first (as fetched with clicked_at desc).
    """
    events = list(events)
    rules = tuple(rules)
    buckets = tuple(buckets)

    category_frequency: Dict[str, int] = {}
    item_patterns: Dict[str, int] = {}
    time_patterns: Dict[str, int] = {}

    for index, event in enumerate(events):
        weight = recency_weight(index)

        category = event.category
        if category:
            category_frequency[category] = category_frequency.get(category, 0) + weight

        label = event.label
        for rule in rules:
            if rule.matches(label):
                item_patterns[rule.tag] = item_patterns.get(rule.tag, 0) + weight * rule.weight

        if event.clicked_at is not None:
            hour = event.clicked_at.hour
            for bucket in buckets:
                if bucket.contains(hour):
                    time_patterns[bucket.tag] = time_patterns.get(bucket.tag, 0) + 1

    return BehaviorProfile(
        category_frequency=category_frequency,
        item_patterns=item_patterns,
        time_patterns=time_patterns,
        total_interactions=len(events),
        engagement_level=engagement_for(len(events)),
        recent=events[:RECENT_WINDOW],
    )
