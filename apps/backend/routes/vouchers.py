from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from apps.backend import flags
from apps.backend.db import get_optional_supabase, get_supabase
from apps.backend.services.core_service import get_optional_user
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.recommendations.voucher_catalog import CATEGORIES
from apps.backend.services.recommendations.voucher_service import VoucherService
from apps.backend.services.settings import settings
from apps.backend.services.tracking.tracking_repository import TrackingRepository
from apps.backend.services.tracking.tracking_service import TrackingService
from apps.backend.utils.envelope import error, ok

router = APIRouter(prefix="/vouchers", tags=["Vouchers"])


class SearchIn(BaseModel):
    query: str = Field(..., min_length=1)


class VoucherViewIn(BaseModel):
    voucher_id: str
    search_query: Optional[str] = None


def _service(supabase: Any) -> VoucherService:
    return VoucherService(LoyaltyRepository(supabase), TrackingRepository(supabase))


@router.get("/smart")
async def vouchers_smart(request: Request, supabase: Any = Depends(get_supabase)):
    if not flags.recommendations_enabled():
        return error("Recommendations are disabled", "feature_disabled", 404)

    user = get_optional_user(request, supabase)
    user_id = user["id"] if user else None

    feed = getattr(request.app.state, "recommendation_feed", None)
    snapshot = feed.get(user_id) if feed is not None else None
    if snapshot is not None:
        return ok(snapshot, meta={"source": "live", "version": feed.version})

    result = await _service(supabase).smart(user_id, limit=settings.RECOMMENDATION_LIMIT)
    if feed is not None:
        feed.store(user_id, result)
    return ok(result, meta={"source": "computed"})


@router.get("/catalog")
async def vouchers_catalog(
    request: Request,
    category: str = "All",
    points: Optional[int] = None,
    supabase: Optional[Any] = Depends(get_optional_supabase),
):
    result = await _service(supabase).catalog(category, points_balance=points)
    return ok(result["vouchers"], meta={"demo": result["demo"], "categories": CATEGORIES})


@router.get("/accessory-recommended")
async def vouchers_accessory_recommended(supabase: Any = Depends(get_supabase)):
    return ok(await _service(supabase).accessory_recommended())


@router.get("/deals")
async def vouchers_triggered_deals(supabase: Any = Depends(get_supabase)):
    svc = TrackingService(TrackingRepository(supabase))
    return ok(await svc.triggered_deals())


@router.post("/search")
async def vouchers_search(inb: SearchIn, request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    vouchers = await _service(supabase).search(inb.query, user["id"] if user else None)
    return ok(vouchers, meta={"query": inb.query.strip()})


@router.get("/search/recent")
async def vouchers_recent_searches(supabase: Any = Depends(get_supabase)):
    return ok(await _service(supabase).recent_searches())


@router.get("/search/latest")
async def vouchers_latest_search(supabase: Any = Depends(get_supabase)):
    res = await _service(supabase).vouchers_for_latest_search()
    return ok(res["vouchers"], meta={"query": res["query"]})


@router.post("/views")
async def vouchers_track_view(inb: VoucherViewIn, request: Request, supabase: Any = Depends(get_supabase)):
    user = get_optional_user(request, supabase)
    await _service(supabase).track_view(inb.voucher_id, user["id"] if user else None, inb.search_query)
    return ok({"tracked": True}, status=201)
