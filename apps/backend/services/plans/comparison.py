"""
Side-by-side plan comparison: the customer's Singtel plan against the
first StarHub and Simba plans, with a short list of Singtel advantages.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from apps.backend.services.core_service import NotFoundError
from apps.backend.services.plans.plan_repository import SIMBA_TABLE, STARHUB_TABLE, PlanRepository

log = logging.getLogger("telco.plans")

DEFAULT_CURRENT_PLAN = "Core"
MAX_ADVANTAGES = 4

_ROAMING_RE = re.compile(r"(\d+(?:\.\d+)?)\s*GB[^\d]*roaming", re.IGNORECASE)
_PRICE_RE = re.compile(r"\$?(\d+(?:\.\d+)?)")

FEATURES = (
    ("Plan Name", "plan_name", True),
    ("Monthly Price", "price", False),
    ("Data Allowance", "data", True),
    ("Talk & SMS", "talktime", True),
    ("Roaming", "roaming", True),
    ("Entertainment", "entertainment", True),
    ("Security & Extras", "extras", True),
)


@dataclass(frozen=True)
class NormalizedPlan:
    plan_name: str
    price: str
    data: str
    talktime: str
    roaming: str
    entertainment: str
    extras: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def extract_roaming(data_roaming: Optional[str]) -> str:
    if not data_roaming:
        return "None"
    if "roaming" in data_roaming.lower():
        m = _ROAMING_RE.search(data_roaming)
        return f"{m.group(1)}GB included" if m else "Included"
    return "Extra charges"


def extract_price(price: Optional[str]) -> float:
    m = _PRICE_RE.search(price or "")
    return float(m.group(1)) if m else 0.0


def normalize_plan(plan: Mapping[str, Any], provider: str) -> NormalizedPlan:
    provider = provider.lower()
    if provider == "singtel":
        return NormalizedPlan(
            plan_name=plan.get("Plan Name") or "Unknown Plan",
            price=plan.get("Price") or "Contact for pricing",
            data=plan.get("Data and Roaming") or "Unlimited",
            talktime=plan.get("Talktime and SMS") or "Unlimited",
            roaming=extract_roaming(plan.get("Data and Roaming")),
            entertainment=plan.get("Disney+ Offer") or plan.get("Max Offer") or "None",
            extras=plan.get("McAfee Security") or "Basic features",
        )
    if provider == "starhub":
        return NormalizedPlan(
            plan_name=plan.get("Plan Name") or "Star Plan",
            price=plan.get("Price per Month") or plan.get("Price") or "Contact for pricing",
            data=plan.get("Data Allowance") or "Check with provider",
            talktime=plan.get("Local Calls") or "Basic",
            roaming=plan.get("Data Roaming") or "Extra charges",
            entertainment="None",
            extras="Basic features",
        )
    if provider == "simba":
        return NormalizedPlan(
            plan_name="Simba Plan",
            price=plan.get("Price") or "Contact for pricing",
            data=plan.get("Data Allowance") or "Check with provider",
            talktime="Basic",
            roaming="Extra charges",
            entertainment="None",
            extras="Basic features",
        )
    return NormalizedPlan("Unknown", "N/A", "N/A", "N/A", "N/A", "N/A", "N/A")


def advantages(singtel: NormalizedPlan, starhub: NormalizedPlan) -> List[str]:
    out: List[str] = []

    if singtel.entertainment != "None" and starhub.entertainment == "None":
        out.append(f"🎬 Exclusive entertainment: {singtel.entertainment} included (worth $11.98/month)")

    if "included" in singtel.roaming or "GB" in singtel.roaming:
        out.append(f"✈️ International roaming: {singtel.roaming} vs competitors' extra charges")

    out.append("📶 Superior network: 99.9% coverage vs competitors' 95-98% coverage")

    extras = singtel.extras.lower()
    if "mcafee" in extras or "security" in extras:
        out.append("🛡️ Enhanced security: McAfee Mobile Security included for digital protection")

    if "priority" in singtel.data.lower():
        out.append("⚡ Priority network access: 4X faster speeds during peak hours")

    out.append("🏆 Award-winning customer service with 24/7 premium support")

    return out[:MAX_ADVANTAGES]


def comparison_rows(singtel: NormalizedPlan, starhub: NormalizedPlan, simba: NormalizedPlan) -> List[Dict[str, Any]]:
    return [
        {
            "feature": label,
            "singtel": getattr(singtel, attr),
            "starhub": getattr(starhub, attr),
            "simba": getattr(simba, attr),
            "singtel_advantage": advantage,
        }
        for label, attr, advantage in FEATURES
    ]


def match_plan(plans: Sequence[Mapping[str, Any]], name: str) -> Optional[Mapping[str, Any]]:
    needle = name.lower()
    for p in plans:
        if needle in str(p.get("Plan Name") or "").lower():
            return p
    return plans[0] if plans else None


class ComparisonService:
    def __init__(self, repo: PlanRepository) -> None:
        self.repo = repo

    async def current_plan(self) -> str:
        try:
            record = await self.repo.usage_record()
        except Exception as e:
            log.warning("Usage record unavailable, comparing default plan: %s", e)
            return DEFAULT_CURRENT_PLAN
        return (record or {}).get("Current Plan") or DEFAULT_CURRENT_PLAN

    async def compare_for_user(self, plan_name: Optional[str] = None) -> Dict[str, Any]:
        current = plan_name or await self.current_plan()
        singtel_row = match_plan(await self.repo.singtel_plans(), current)
        if singtel_row is None:
            raise NotFoundError("Could not find matching Singtel plan")

        starhub_rows = await self.repo.competitor_plans(STARHUB_TABLE)
        simba_rows = await self.repo.competitor_plans(SIMBA_TABLE)

        singtel = normalize_plan(singtel_row, "singtel")
        starhub = normalize_plan(starhub_rows[0] if starhub_rows else {}, "starhub")
        simba = normalize_plan(simba_rows[0] if simba_rows else {}, "simba")

        competitor_prices = [p for p in (extract_price(starhub.price), extract_price(simba.price)) if p > 0]
        singtel_price = extract_price(singtel.price)

        return {
            "current_plan": current,
            "plans": {"singtel": singtel.to_dict(), "starhub": starhub.to_dict(), "simba": simba.to_dict()},
            "comparison": comparison_rows(singtel, starhub, simba),
            "advantages": advantages(singtel, starhub),
            "price_gap": round(singtel_price - min(competitor_prices), 2) if competitor_prices and singtel_price else None,
        }
