"""
Points earning and spending rules.

Pure functions; the service layer persists the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

ENGAGEMENT_POINTS: Dict[str, Tuple[int, str]] = {
    "click": (10, "Product click: {category}"),
    "view": (5, "Page view: {category}"),
    "search": (15, "Search activity"),
    "chat": (20, "Chat interaction"),
}
DEFAULT_ENGAGEMENT = (5, "General engagement")

DAILY_BASE = 50
WEEKLY_STREAK_DAYS = 7
WEEKLY_BONUS = 50
MONTHLY_STREAK_DAYS = 30
MONTHLY_BONUS = 100
PREMIUM_MULTIPLIER = 2


@dataclass(frozen=True)
class PointsBooster:
    id: str
    points: int
    price: float
    bonus: int
    popular: bool = False

    @property
    def total_points(self) -> int:
        return self.points + self.bonus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "points": self.points,
            "price": self.price,
            "bonus": self.bonus,
            "popular": self.popular,
            "total_points": self.total_points,
        }


POINTS_BOOSTERS: List[PointsBooster] = [
    PointsBooster("starter", 500, 5, 0),
    PointsBooster("popular", 1200, 10, 200, popular=True),
    PointsBooster("premium", 2500, 20, 500),
    PointsBooster("mega", 5500, 40, 1500),
]


def engagement_award(action: str, category: Optional[str] = None) -> Tuple[int, str]:
    points, template = ENGAGEMENT_POINTS.get(action, DEFAULT_ENGAGEMENT)
    return points, template.format(category=category or "General")


@dataclass(frozen=True)
class DailyClaim:
    claim_date: date
    streak: int
    points: int
    total_claims: int

    @property
    def description(self) -> str:
        return f"Daily reward ({self.streak} day streak)"

    @property
    def reference_id(self) -> str:
        return f"daily_{self.claim_date.isoformat()}"


class AlreadyClaimed(Exception):
    pass


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def daily_reward_points(streak: int, *, is_premium: bool = False) -> int:
    points = DAILY_BASE
    if streak >= WEEKLY_STREAK_DAYS:
        points += WEEKLY_BONUS
    if streak >= MONTHLY_STREAK_DAYS:
        points += MONTHLY_BONUS
    if is_premium:
        points *= PREMIUM_MULTIPLIER
    return points


def claim_daily_reward(
    previous: Optional[Dict[str, Any]],
    today: date,
    *,
    is_premium: bool = False,
) -> DailyClaim:
    """
    previous: the user_daily_rewards row (last_claim_date, current_streak,
    total_claims) or None for a first claim.
    The streak only continues from a claim made yesterday.
    """
    previous = previous or {}
    last = _as_date(previous.get("last_claim_date"))

    if last == today:
        raise AlreadyClaimed("You have already claimed your daily reward today!")

    streak = 1
    if last == today - timedelta(days=1):
        streak = int(previous.get("current_streak") or 0) + 1

    return DailyClaim(
        claim_date=today,
        streak=streak,
        points=daily_reward_points(streak, is_premium=is_premium),
        total_claims=int(previous.get("total_claims") or 0) + 1,
    )

