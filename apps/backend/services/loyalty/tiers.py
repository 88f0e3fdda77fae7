"""
Tier Engine
===========

Purpose:
- Deterministic tier placement from a points balance.
- No side effects, no DB access, no HTTP.

Tiers:
- Bronze, Silver, Gold and Platinum are earned by points thresholds.
- Gold+ is a paid subscription tier. It is never reached by points alone;
  a premium member sits on Gold+ regardless of balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class Tier:
    name: str
    min_points: int
    multiplier: float
    color: str
    benefits: List[str] = field(default_factory=list)
    is_premium: bool = False
    monthly_fee: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "min_points": self.min_points,
            "multiplier": self.multiplier,
            "color": self.color,
            "benefits": list(self.benefits),
            "is_premium": self.is_premium,
            "monthly_fee": self.monthly_fee,
        }


TIERS: Sequence[Tier] = (
    Tier("Bronze", 0, 1.0, "#CD7F32",
         ["1x points on purchases", "Basic customer support", "Monthly newsletter"]),
    Tier("Silver", 1000, 1.2, "#C0C0C0",
         ["1.2x points on purchases", "Priority customer support", "Exclusive offers",
          "Free shipping on orders >$50"]),
    Tier("Gold", 2500, 1.5, "#FFD700",
         ["1.5x points on purchases", "VIP customer support", "Early access to sales",
          "Free shipping on all orders", "Birthday bonus points"]),
    Tier("Gold+", 2500, 2.0, "#FF6B35",
         ["2x points on purchases", "Exclusive premium vouchers", "Concierge services",
          "Priority everything", "Monthly bonus points", "VIP events access"],
         is_premium=True, monthly_fee=9.99),
    Tier("Platinum", 5000, 2.5, "#E5E4E2",
         ["2.5x points on purchases", "Dedicated account manager", "Exclusive events access",
          "Free premium shipping", "Quarterly bonus rewards"]),
)


@dataclass(frozen=True)
class TierStatus:
    current_tier: Tier
    next_tier: Optional[Tier]
    points: int
    progress: float
    points_to_next: int

    @property
    def is_top_tier(self) -> bool:
        return self.next_tier is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_tier": self.current_tier.to_dict(),
            "next_tier": None if self.next_tier is None else self.next_tier.to_dict(),
            "points": self.points,
            "progress": round(self.progress, 2),
            "points_to_next": self.points_to_next,
            "is_top_tier": self.is_top_tier,
        }


def _earned(tiers: Sequence[Tier]) -> List[Tier]:
    return sorted((t for t in tiers if not t.is_premium), key=lambda t: t.min_points)


def current_tier(points: int, *, is_premium: bool = False, tiers: Sequence[Tier] = TIERS) -> Tier:
    if is_premium:
        premium = next((t for t in tiers if t.is_premium), None)
        if premium is not None:
            return premium

    earned = _earned(tiers)
    placed = earned[0]
    for t in earned:
        if points >= t.min_points:
            placed = t
    return placed


def next_tier(points: int, *, is_premium: bool = False, tiers: Sequence[Tier] = TIERS) -> Optional[Tier]:
    """
    Next tier reachable by earning points. Premium members progress along
    the earned ladder from their points position.
    """
    for t in _earned(tiers):
        if t.min_points > points:
            return t
    return None


def tier_status(points: int, *, is_premium: bool = False, tiers: Sequence[Tier] = TIERS) -> TierStatus:
    points = max(0, int(points or 0))
    cur = current_tier(points, is_premium=is_premium, tiers=tiers)
    nxt = next_tier(points, is_premium=is_premium, tiers=tiers)

    if nxt is None:
        return TierStatus(current_tier=cur, next_tier=None, points=points, progress=100.0, points_to_next=0)

    floor = current_tier(points, tiers=tiers).min_points
    span = nxt.min_points - floor
    progress = 0.0
    if span > 0:
        progress = min(max((points - floor) / span * 100.0, 0.0), 100.0)

    return TierStatus(
        current_tier=cur,
        next_tier=nxt,
        points=points,
        progress=progress,
        points_to_next=max(nxt.min_points - points, 0),
    )
