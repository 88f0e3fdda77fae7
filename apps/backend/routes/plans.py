from typing import Any, Optional

from fastapi import APIRouter, Depends

from apps.backend.db import get_supabase
from apps.backend.services.plans.comparison import ComparisonService
from apps.backend.services.plans.plan_repository import PlanRepository
from apps.backend.utils.envelope import ok

router = APIRouter(prefix="/plans", tags=["Plans"])


@router.get("/comparison")
async def plans_comparison(plan: Optional[str] = None, supabase: Any = Depends(get_supabase)):
    return ok(await ComparisonService(PlanRepository(supabase)).compare_for_user(plan))
