from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from apps.backend.db import get_supabase
from apps.backend.services.catalog.shop_service import SHOP_CATEGORIES, ShopService
from apps.backend.services.core_service import get_optional_user
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.services.tracking.tracking_repository import TrackingRepository
from apps.backend.services.tracking.tracking_service import TrackingService
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/shop", tags=["Shop"])


class ItemClickIn(BaseModel):
    item: Dict[str, Any]


def _service(request: Request, supabase: Any) -> ShopService:
    tracking = TrackingService(
        TrackingRepository(supabase),
        loyalty=LoyaltyService(LoyaltyRepository(supabase)),
        hub=getattr(request.app.state, "activity_hub", None),
    )
    return ShopService(supabase, tracking)


@router.get("/categories")
async def shop_categories():
    return ok([c.to_dict() for c in SHOP_CATEGORIES])


@router.get("/categories/{category_id}")
async def shop_category_items(category_id: str, request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    return ok(await _service(request, supabase).items(category_id, user["id"] if user else None))


@router.post("/categories/{category_id}/click")
async def shop_item_click(category_id: str, inb: ItemClickIn, request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    return ok(await _service(request, supabase).click_item(category_id, inb.item, user["id"] if user else None))
