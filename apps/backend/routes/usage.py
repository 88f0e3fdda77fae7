from typing import Any

from fastapi import APIRouter, Depends

from apps.backend.db import get_supabase
from apps.backend.services.account.account_service import usage_summary
from apps.backend.services.plans.plan_repository import PlanRepository
from apps.backend.services.usage.usage_service import UsageService
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/usage", tags=["Usage"])


@router.get("/recommendations")
async def usage_recommendations(supabase: Any = Depends(get_supabase)):
    return ok(await UsageService(PlanRepository(supabase)).recommendations())


@router.get("/summary")
async def usage_weekly_summary():
    return ok(usage_summary(), meta={"demo": True})
