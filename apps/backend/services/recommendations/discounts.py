"""
Personalized product discounts shown on the loyalty screen.

Preferences are plain (unweighted) counts of category names and item labels
over the most recent clicks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from .behavior import InteractionEvent


@dataclass(frozen=True)
class PersonalizedDiscount:
    id: str
    product_name: str
    original_price: float
    discounted_price: float
    discount_percentage: int
    points_required: int
    category: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "original_price": self.original_price,
            "discounted_price": self.discounted_price,
            "discount_percentage": self.discount_percentage,
            "points_required": self.points_required,
            "category": self.category,
            "reason": self.reason,
        }


MOBILE_DISCOUNTS = (
    PersonalizedDiscount("mobile-1", "Wireless Charging Pad", 89.90, 67.43, 25, 300,
                         "Mobile Accessories", "Based on your mobile device interests"),
    PersonalizedDiscount("mobile-2", "Premium Phone Case", 49.90, 34.93, 30, 200,
                         "Mobile Accessories", "Perfect for your device protection needs"),
)

AUDIO_DISCOUNTS = (
    PersonalizedDiscount("audio-1", "Noise-Cancelling Headphones", 299.90, 209.93, 30, 800,
                         "Audio", "Based on your audio accessory browsing"),
    PersonalizedDiscount("audio-2", "Wireless Earbuds", 149.90, 104.93, 30, 400,
                         "Audio", "Great for your audio needs"),
)

GAMING_DISCOUNTS = (
    PersonalizedDiscount("gaming-1", "Gaming Mouse Pad", 39.90, 27.93, 30, 180,
                         "Gaming", "Perfect for your tech setup"),
)

DEFAULT_DISCOUNTS = (
    PersonalizedDiscount("default-1", "Phone Car Mount", 49.90, 34.93, 30, 200,
                         "Accessories", "Essential mobile accessory"),
    PersonalizedDiscount("default-2", "Portable Power Bank", 59.90, 41.93, 30, 250,
                         "Mobile Accessories", "Essential for mobile users"),
)


def _any_item(items: Iterable[str], *keywords: str) -> bool:
    return any(k in item for item in items for k in keywords)


def personalized_discounts(events: Iterable[InteractionEvent]) -> List[PersonalizedDiscount]:
    categories: Dict[str, int] = {}
    items: Dict[str, int] = {}
    for e in events:
        category = (e.category_name or "").lower()
        categories[category] = categories.get(category, 0) + 1
        items[e.label] = items.get(e.label, 0) + 1

    out: List[PersonalizedDiscount] = []

    if (
        categories.get("mobile", 0) > 0
        or categories.get("accessories", 0) > 0
        or _any_item(items, "iphone", "samsung", "headphone", "case")
    ):
        out.extend(MOBILE_DISCOUNTS)

    if (
        categories.get("accessories", 0) > 0
        or categories.get("devices & gadgets", 0) > 0
        or _any_item(items, "headphone", "speaker", "audio")
    ):
        out.extend(AUDIO_DISCOUNTS)

    if categories.get("accessories", 0) > 0 or _any_item(items, "gaming", "tech"):
        out.extend(GAMING_DISCOUNTS)

    if not out:
        out.extend(DEFAULT_DISCOUNTS)

    return out
