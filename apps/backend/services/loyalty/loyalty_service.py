"""
Loyalty Service (Integration Layer)
===================================

Purpose:
- Orchestrate tier placement + earning/spending rules with a repository
  (DB adapter).
- Keep routes thin. Keep domain logic in the pure modules (tiers, rewards).

This service:
- Fetches (or creates) a customer's points balance and computes tier status
- Awards engagement points for app activity
- Claims the daily reward and keeps the streak
- Redeems vouchers against the balance

No HTTP here. Routes should call this.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from apps.backend import flags
from apps.backend.services.core_service import CoreError, InsufficientPointsError, NotFoundError
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.rewards import (
    AlreadyClaimed,
    DailyClaim,
    claim_daily_reward,
    engagement_award,
)
from apps.backend.services.loyalty.tiers import tier_status
from apps.backend.services.recommendations.voucher_catalog import PLATINUM_VOUCHERS

log = logging.getLogger("telco.loyalty")

DEMO_BALANCE = {
    "total_points": 2400,
    "current_tier": "Silver",
    "points_earned_this_month": 450,
    "is_premium_member": False,
}


@dataclass(frozen=True)
class LoyaltyStatus:
    user_id: Optional[str]
    total_points: int
    points_earned_this_month: int
    is_premium_member: bool
    tier: Dict[str, Any]
    demo: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "total_points": self.total_points,
            "points_earned_this_month": self.points_earned_this_month,
            "is_premium_member": self.is_premium_member,
            "current_tier": self.tier["current_tier"]["name"],
            "tier": self.tier,
            "demo": self.demo,
        }


def _status_from_row(user_id: Optional[str], row: Dict[str, Any], *, demo: bool = False) -> LoyaltyStatus:
    points = int(row.get("total_points") or 0)
    premium = bool(row.get("is_premium_member") or False)
    return LoyaltyStatus(
        user_id=user_id,
        total_points=points,
        points_earned_this_month=int(row.get("points_earned_this_month") or 0),
        is_premium_member=premium,
        tier=tier_status(points, is_premium=premium).to_dict(),
        demo=demo,
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LoyaltyService:
    """
    Repo contract: see LoyaltyRepository.
    """

    def __init__(self, repo: LoyaltyRepository) -> None:
        self.repo = repo

    # -----------------------------
    # Balance
    # -----------------------------
    async def _balance_row(self, user_id: str) -> Dict[str, Any]:
        row = await self.repo.get_points(user_id)
        if row is None:
            log.info("Creating loyalty balance for user=%s", user_id)
            row = await self.repo.create_points(user_id)
        return row

    async def get_status(self, user_id: Optional[str]) -> LoyaltyStatus:
        if not user_id:
            if flags.demo_fallbacks():
                return _status_from_row(None, DEMO_BALANCE, demo=True)
            raise CoreError("Please sign in to continue", 401, "sign_in_required")

        try:
            row = await self._balance_row(user_id)
        except Exception as e:
            if not flags.demo_fallbacks():
                raise
            log.warning("Loyalty balance unavailable for user=%s, serving demo balance: %s", user_id, e)
            return _status_from_row(user_id, DEMO_BALANCE, demo=True)

        return _status_from_row(user_id, row)

    async def _credit(self, user_id: str, points: int) -> Dict[str, Any]:
        row = await self._balance_row(user_id)
        total = int(row.get("total_points") or 0) + int(points)
        monthly = int(row.get("points_earned_this_month") or 0) + int(points)
        premium = bool(row.get("is_premium_member") or False)
        tier_name = tier_status(total, is_premium=premium).current_tier.name

        patch = {
            "total_points": total,
            "points_earned_this_month": monthly,
            "current_tier": tier_name,
        }
        await self.repo.update_points(user_id, patch)
        return {**row, **patch}

    # -----------------------------
    # Earning
    # -----------------------------
    async def award_engagement(self, user_id: str, action: str, category: Optional[str] = None) -> Dict[str, Any]:
        points, description = engagement_award(action, category)
        row = await self._credit(user_id, points)
        await self.repo.add_transaction(
            user_id,
            transaction_type="earned",
            points=points,
            description=description,
            reference_id=f"{action}_{int(_now().timestamp() * 1000)}",
        )
        return {"points_awarded": points, "description": description, "total_points": row["total_points"]}

    async def claim_daily(self, user_id: str, today: Optional[date] = None) -> DailyClaim:
        today = today or _now().date()
        balance = await self._balance_row(user_id)
        previous = await self.repo.get_daily(user_id)

        try:
            claim = claim_daily_reward(
                previous,
                today,
                is_premium=bool(balance.get("is_premium_member") or False),
            )
        except AlreadyClaimed as e:
            raise CoreError(str(e), 409, "already_claimed")

        await self.repo.upsert_daily(
            user_id,
            last_claim_date=claim.claim_date.isoformat(),
            current_streak=claim.streak,
            total_claims=claim.total_claims,
        )
        await self._credit(user_id, claim.points)
        await self.repo.add_transaction(
            user_id,
            transaction_type="earned",
            points=claim.points,
            description=claim.description,
            reference_id=claim.reference_id,
        )
        log.info("Daily reward claimed user=%s streak=%s points=%s", user_id, claim.streak, claim.points)
        return claim

    # -----------------------------
    # Spending
    # -----------------------------
    async def _find_voucher(self, voucher_id: str) -> Dict[str, Any]:
        for v in PLATINUM_VOUCHERS:
            if v["id"] == voucher_id:
                return dict(v)
        voucher = await self.repo.find_voucher(voucher_id)
        if not voucher:
            raise NotFoundError(f"Voucher not found: {voucher_id}")
        if voucher.get("is_active") is False:
            raise CoreError("This voucher is no longer available", 410, "voucher_inactive")
        return voucher

    async def redeem(self, user_id: str, voucher_id: str) -> Dict[str, Any]:
        voucher = await self._find_voucher(voucher_id)
        cost = int(voucher.get("points_cost") or 0)

        row = await self._balance_row(user_id)
        balance = int(row.get("total_points") or 0)
        if balance < cost:
            raise InsufficientPointsError(cost, balance)

        remaining = balance - cost
        premium = bool(row.get("is_premium_member") or False)
        tier_name = tier_status(remaining, is_premium=premium).current_tier.name
        await self.repo.update_points(user_id, {"total_points": remaining, "current_tier": tier_name})
        await self.repo.add_transaction(
            user_id,
            transaction_type="redeemed",
            points=-cost,
            description=f"Redeemed: {voucher.get('title')}",
            reference_id=str(voucher.get("id")),
        )
        log.info("Voucher redeemed user=%s voucher=%s cost=%s", user_id, voucher_id, cost)
        return {"voucher": voucher, "points_spent": cost, "total_points": remaining, "current_tier": tier_name}

    # -----------------------------
    # History
    # -----------------------------
    async def transactions(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        return await self.repo.list_transactions(user_id, limit=limit)
