"""
Usage advisor.

Reads six months of data usage and travel history and suggests a bigger
data plan and a roaming pack. Pure functions over table rows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

MONTHS = ("Jan (GB)", "Feb (GB)", "Mar (GB)", "Apr (GB)", "May (GB)", "Jun (GB)")
UPGRADE_THRESHOLD = 0.8

_SAVINGS_RE = re.compile(r"\$(\d+(?:\.\d{2})?)")
_NON_LETTERS_RE = re.compile(r"[^a-zA-Z,\s]")


@dataclass(frozen=True)
class UsageAnalysis:
    usage: List[float]
    average: float
    is_increasing: bool
    percent_change: float


@dataclass(frozen=True)
class UsageRecommendation:
    type: str
    title: str
    description: str
    action: str
    current_plan: Optional[str] = None
    recommended_plan: Optional[str] = None
    savings: Optional[str] = None
    urgency: Optional[str] = None

    @property
    def monthly_savings(self) -> Optional[float]:
        return extract_savings(self.savings or "")

    def to_dict(self) -> Dict[str, Any]:
        monthly = self.monthly_savings
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "action": self.action,
            "current_plan": self.current_plan,
            "recommended_plan": self.recommended_plan,
            "savings": self.savings,
            "urgency": self.urgency,
            "monthly_savings": monthly,
            "yearly_savings": None if monthly is None else round(monthly * 12, 2),
        }


def extract_data_gb(text: Any) -> float:
    """
    "150GB + 1GB Roaming" -> 150.0. Unparseable text gives 0.
    """
    try:
        head = str(text or "").split("GB")[0].strip().split("+")[0]
        return float(head)
    except ValueError:
        return 0.0


def extract_savings(text: str) -> Optional[float]:
    m = _SAVINGS_RE.search(text or "")
    return float(m.group(1)) if m else None


def normalize_destinations(text: str) -> str:
    return _NON_LETTERS_RE.sub("", (text or "").replace(" and ", ", ")).lower()


def _gb(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def analyze_usage(record: Mapping[str, Any], months: Sequence[str] = MONTHS) -> UsageAnalysis:
    usage = [_gb(record.get(m)) for m in months]
    average = sum(usage) / len(usage) if usage else 0.0
    increasing = all(b >= a for a, b in zip(usage, usage[1:]))
    change = ((usage[-1] - usage[0]) / usage[0]) * 100 if usage and usage[0] != 0 else 0.0
    return UsageAnalysis(usage=usage, average=average, is_increasing=increasing, percent_change=change)


def data_upgrade(record: Mapping[str, Any], plans: Sequence[Mapping[str, Any]]) -> Optional[UsageRecommendation]:
    current_name = record.get("Current Plan")
    current = next((p for p in plans if p.get("Plan Name") == current_name), None)
    if current is None:
        return None

    limit = extract_data_gb(current.get("Data and Roaming"))
    analysis = analyze_usage(record)

    if not (analysis.average > limit * UPGRADE_THRESHOLD or analysis.is_increasing):
        return None

    ladder = sorted(plans, key=lambda p: extract_data_gb(p.get("Data and Roaming")))
    index = next((i for i, p in enumerate(ladder) if p.get("Plan Name") == current_name), -1)
    if index < 0 or index >= len(ladder) - 1:
        return None

    nxt = ladder[index + 1]
    exceeding = analysis.average > limit
    if exceeding:
        urgency = "high"
    elif analysis.is_increasing:
        urgency = "medium"
    else:
        urgency = "low"

    description = (
        f"Your average usage of {analysis.average:.1f}GB is "
        f"{'exceeding' if exceeding else 'approaching'} your current {limit:g}GB limit."
    )
    if analysis.is_increasing:
        description += f" Usage trending up {analysis.percent_change:.1f}%."

    return UsageRecommendation(
        type="upgrade",
        title=f"Upgrade to {nxt.get('Plan Name')}",
        description=description,
        action="Upgrade Plan",
        current_plan=current_name,
        recommended_plan=nxt.get("Plan Name"),
        savings=f"Get {nxt.get('Data and Roaming')} for just {nxt.get('Price')}",
        urgency=urgency,
    )


def roaming_pack(record: Mapping[str, Any], roaming_plans: Sequence[Mapping[str, Any]]) -> Optional[UsageRecommendation]:
    visited = str(record.get("Countries Visited") or "")
    if not visited:
        return None

    countries = {c.strip().lower() for c in visited.split(",") if c.strip()}

    best: Optional[Mapping[str, Any]] = None
    best_matches = 0
    for plan in roaming_plans:
        destinations = normalize_destinations(str(plan.get("Destinations") or ""))
        matches = sum(1 for c in countries if c in destinations)
        if matches > best_matches:
            best, best_matches = plan, matches

    if best is None:
        return None

    return UsageRecommendation(
        type="roaming",
        title="Perfect Roaming Plan Found",
        description=(
            f"Based on your travel to {visited}, we found the ideal roaming plan "
            f"that covers {best_matches} of your destinations."
        ),
        action="Get Roaming Plan",
        recommended_plan=best.get("Plan Name"),
        savings=(
            f"{best.get('Price and Data') or best.get('Data') or 'Great value'} - "
            f"{best.get('Price') or 'Contact for pricing'}"
        ),
        urgency="medium",
    )
