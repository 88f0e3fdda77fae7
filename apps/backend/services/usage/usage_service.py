from __future__ import annotations

import logging
from typing import Any, Dict, List

from apps.backend.services.core_service import NotFoundError
from apps.backend.services.plans.plan_repository import PlanRepository
from apps.backend.services.usage.advisor import UsageRecommendation, analyze_usage, data_upgrade, roaming_pack

log = logging.getLogger("telco.usage")


class UsageService:
    def __init__(self, repo: PlanRepository) -> None:
        self.repo = repo

    async def recommendations(self) -> Dict[str, Any]:
        record = await self.repo.usage_record()
        if not record:
            raise NotFoundError("No user data found")

        recs: List[UsageRecommendation] = []

        upgrade = data_upgrade(record, await self.repo.singtel_plans())
        if upgrade:
            recs.append(upgrade)

        roaming = roaming_pack(record, await self.repo.roaming_plans())
        if roaming:
            recs.append(roaming)

        analysis = analyze_usage(record)
        log.info("Usage recommendations current_plan=%s count=%d", record.get("Current Plan"), len(recs))
        return {
            "current_plan": record.get("Current Plan"),
            "usage": {
                "monthly_gb": analysis.usage,
                "average_gb": round(analysis.average, 2),
                "is_increasing": analysis.is_increasing,
                "percent_change": round(analysis.percent_change, 1),
            },
            "recommendations": [r.to_dict() for r in recs],
        }
