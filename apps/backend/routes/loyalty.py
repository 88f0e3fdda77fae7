from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from apps.backend.db import get_optional_supabase, get_supabase
from apps.backend.services.core_service import get_optional_user, require_user
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.services.loyalty.rewards import POINTS_BOOSTERS
from apps.backend.services.loyalty.tiers import TIERS
from apps.backend.services.recommendations.voucher_service import VoucherService
from apps.backend.services.tracking.tracking_repository import TrackingRepository
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/loyalty", tags=["Loyalty"])


class RedeemIn(BaseModel):
    voucher_id: str


def _service(supabase: Any) -> LoyaltyService:
    return LoyaltyService(LoyaltyRepository(supabase))


@router.get("/status")
async def loyalty_status(request: Request, supabase: Optional[Any] = Depends(get_optional_supabase)):
    user = get_optional_user(request, supabase)
    status = await _service(supabase).get_status(user["id"] if user else None)
    return ok(status.to_dict(), meta={"demo": status.demo})


@router.get("/tiers")
async def loyalty_tiers():
    return ok([t.to_dict() for t in TIERS])


@router.post("/daily-reward")
async def loyalty_daily_reward(request: Request, supabase: Any = Depends(get_supabase)):
    user = require_user(request, supabase)
    claim = await _service(supabase).claim_daily(user["id"])
    return ok(
        {
            "points": claim.points,
            "streak": claim.streak,
            "total_claims": claim.total_claims,
            "claim_date": claim.claim_date,
            "message": f"You earned {claim.points} points! Streak: {claim.streak} days",
        }
    )


@router.post("/redeem")
async def loyalty_redeem(inb: RedeemIn, request: Request, supabase: Any = Depends(get_supabase)):
    user = require_user(request, supabase)
    result = await _service(supabase).redeem(user["id"], inb.voucher_id)
    return ok(result)


@router.get("/boosters")
async def loyalty_boosters():
    return ok([b.to_dict() for b in POINTS_BOOSTERS])


@router.get("/transactions")
async def loyalty_transactions(request: Request, limit: int = 20, supabase: Any = Depends(get_supabase)):
    user = require_user(request, supabase)
    return ok(await _service(supabase).transactions(user["id"], limit=limit))


@router.get("/discounts")
async def loyalty_discounts(request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    svc = VoucherService(LoyaltyRepository(supabase), TrackingRepository(supabase))
    return ok(await svc.discounts(user["id"] if user else None))
