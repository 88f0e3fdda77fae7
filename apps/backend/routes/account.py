from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from apps.backend.db import get_optional_supabase
from apps.backend.services.account import account_service
from apps.backend.services.core_service import get_optional_user
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/account", tags=["Account"])


@router.get("/profile")
async def account_profile(request: Request, supabase: Optional[Any] = Depends(get_optional_supabase)):
    user = get_optional_user(request, supabase)
    loyalty = None
    if user:
        status = await LoyaltyService(LoyaltyRepository(supabase)).get_status(user["id"])
        loyalty = status.to_dict()
    return ok(account_service.profile(user, loyalty), meta={"demo": user is None})


@router.get("/bills")
async def account_bills():
    return ok(account_service.bills(), meta={"demo": True})
