"""
Smart Voucher Recommender
=========================

Scores a fixed list of reward bundles against a BehaviorProfile.

Each Candidate carries:
- eligible(profile) -> bool      threshold check on the profile counters
- score(profile) -> number       heuristic match score
- confidence(profile)            high | medium | low
- reason(profile) -> str         customer-facing explanation

Ranking: confidence first (high > medium > low), then score descending.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Sequence, Union

from .behavior import BehaviorProfile


Confidence = Literal["high", "medium", "low"]

CONFIDENCE_ORDER: Dict[str, int] = {"high": 3, "medium": 2, "low": 1}

DEFAULT_LIMIT = 6


@dataclass(frozen=True)
class Recommendation:
    id: str
    title: str
    description: str
    points_cost: int
    value: str
    category: str
    recommendation_score: float
    recommendation_reason: str
    confidence_level: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "points_cost": self.points_cost,
            "value": self.value,
            "category": self.category,
            "recommendation_score": self.recommendation_score,
            "recommendation_reason": self.recommendation_reason,
            "confidence_level": self.confidence_level,
        }


ProfileFn = Callable[[BehaviorProfile], Any]


@dataclass(frozen=True)
class Candidate:
    id: str
    title: str
    description: str
    points_cost: int
    value: str
    category: str
    eligible: Callable[[BehaviorProfile], bool]
    score: Callable[[BehaviorProfile], float]
    reason: Union[str, Callable[[BehaviorProfile], str]]
    confidence: Union[Confidence, Callable[[BehaviorProfile], Confidence]] = "medium"

    def evaluate(self, profile: BehaviorProfile) -> Recommendation:
        reason = self.reason(profile) if callable(self.reason) else self.reason
        confidence = self.confidence(profile) if callable(self.confidence) else self.confidence
        return Recommendation(
            id=self.id,
            title=self.title,
            description=self.description,
            points_cost=self.points_cost,
            value=self.value,
            category=self.category,
            recommendation_score=float(self.score(profile)),
            recommendation_reason=reason,
            confidence_level=confidence,
        )


CANDIDATES: Sequence[Candidate] = (
    Candidate(
        id="audio-premium-1",
        title="40% Off Premium Audio Bundle",
        description="Sony WH-1000XM5 + Portable Speaker combo based on your audio interests",
        points_cost=1200,
        value="$200 Value",
        category="Accessories",
        eligible=lambda p: p.pattern("audio_enthusiast") > 3,
        score=lambda p: p.pattern("audio_enthusiast") * 25,
        reason=lambda p: (
            f"You've shown strong interest in audio products ({p.pattern('audio_enthusiast')} interactions)"
        ),
        confidence="high",
    ),
    Candidate(
        id="entertainment-bundle-1",
        title="Ultimate Streaming Bundle",
        description="Netflix Premium + Disney+ + HBO Max for 6 months",
        points_cost=1800,
        value="$150 Value",
        category="Entertainment",
        eligible=lambda p: p.pattern("entertainment_lover") > 2 or p.category("tv") > 2,
        score=lambda p: p.pattern("entertainment_lover") * 20 + p.category("tv") * 15,
        reason="Perfect match for your entertainment browsing patterns",
        confidence="high",
    ),
    Candidate(
        id="security-suite-1",
        title="Complete Digital Security Package",
        description="McAfee Total Protection + VPN + Identity Theft Protection",
        points_cost=1000,
        value="$120 Value",
        category="Security",
        eligible=lambda p: p.pattern("security_conscious") > 1 or p.pattern("premium_mobile") > 2,
        score=lambda p: p.pattern("security_conscious") * 30 + p.pattern("premium_mobile") * 10,
        reason="Essential protection for your digital lifestyle",
        confidence=lambda p: "high" if p.pattern("security_conscious") > 2 else "medium",
    ),
    Candidate(
        id="mobile-premium-1",
        title="Premium iPhone Accessories Kit",
        description="MagSafe charger + Premium case + Screen protector + AirPods case",
        points_cost=1500,
        value="$180 Value",
        category="Accessories",
        eligible=lambda p: p.pattern("premium_mobile") > 3,
        score=lambda p: p.pattern("premium_mobile") * 20,
        reason=lambda p: (
            f"Curated for your premium mobile preferences ({p.pattern('premium_mobile')} iPhone clicks)"
        ),
        confidence="high",
    ),
    Candidate(
        id="connectivity-upgrade-1",
        title="Home Network Upgrade Package",
        description="Mesh WiFi 6 system + 6 months speed boost + Priority support",
        points_cost=2000,
        value="$250 Value",
        category="Broadband",
        eligible=lambda p: p.pattern("connectivity_focused") > 2 or p.category("broadband") > 1,
        score=lambda p: p.pattern("connectivity_focused") * 25 + p.category("broadband") * 20,
        reason="Optimize your home network based on your connectivity interests",
        confidence="medium",
    ),
    Candidate(
        id="gaming-bundle-1",
        title="Gaming Performance Package",
        description="Gaming router + Low-latency plan + Gaming headset",
        points_cost=1600,
        value="$200 Value",
        category="Gaming",
        eligible=lambda p: p.pattern("gaming_enthusiast") > 1,
        score=lambda p: p.pattern("gaming_enthusiast") * 35,
        reason="Enhance your gaming experience with pro-level gear",
        confidence="high",
    ),
    Candidate(
        id="smart-home-1",
        title="Smart Home Starter Kit",
        description="Smart speakers + Smart plugs + Home security camera + Setup service",
        points_cost=2200,
        value="$300 Value",
        category="Smart Home",
        eligible=lambda p: p.engagement_level == "high" and p.total_interactions > 30,
        score=lambda p: p.total_interactions * 2,
        reason="Perfect for tech enthusiasts like you",
        confidence="medium",
    ),
    Candidate(
        id="business-bundle-1",
        title="Business Productivity Package",
        description="Mobile hotspot + Business plan upgrade + Priority support",
        points_cost=1400,
        value="$170 Value",
        category="Business",
        eligible=lambda p: p.time("business_hours") > p.time("evening_user"),
        score=lambda p: p.time("business_hours") * 5,
        reason="Tailored for your business usage patterns",
        confidence="medium",
    ),
)


def rank(recommendations: List[Recommendation]) -> List[Recommendation]:
    return sorted(
        recommendations,
        key=lambda r: (-CONFIDENCE_ORDER.get(r.confidence_level, 0), -r.recommendation_score),
    )


def recommend(
    profile: BehaviorProfile,
    *,
    limit: int = DEFAULT_LIMIT,
    candidates: Sequence[Candidate] = CANDIDATES,
) -> List[Recommendation]:
    eligible = [c.evaluate(profile) for c in candidates if c.eligible(profile)]
    return rank(eligible)[: max(0, int(limit))]
