"""
Shop catalog.

Each shop category is backed by one product table; rows are listed in
their 'Position' order. Opening a category and tapping an item are both
tracked as interactions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from apps.backend.services.core_service import NotFoundError
from apps.backend.services.tracking.tracking_service import TrackingService

log = logging.getLogger("telco.shop")

ITEM_NAME_FIELDS = ("Phone Name", "Plan Name", "Product_Name", "App Name")


@dataclass(frozen=True)
class ShopCategory:
    id: str
    title: str
    subtitle: str
    table: str

    @property
    def display_name(self) -> str:
        return f"{self.title} {self.subtitle}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "subtitle": self.subtitle, "name": self.display_name}


SHOP_CATEGORIES: List[ShopCategory] = [
    ShopCategory("mobile", "Mobile", "", "Mobile_with_SIM"),
    ShopCategory("sim", "SIM Only", "plan", "Singtel_Sim_Plans"),
    ShopCategory("broadband", "Fibre", "Broadband", "Broadband"),
    ShopCategory("accessories", "Devices &", "Gadgets", "accessories"),
    ShopCategory("tv", "TV", "", "CAST.SG"),
    ShopCategory("addons", "Add-ons", "", "roaming-offers-singtel"),
    ShopCategory("insurance", "Insura", "nce", "insurance_plans"),
]


def category_by_id(category_id: str) -> ShopCategory:
    for c in SHOP_CATEGORIES:
        if c.id == category_id:
            return c
    raise NotFoundError(f"Unknown shop category: {category_id}")


def item_name(item: Mapping[str, Any]) -> str:
    for f in ITEM_NAME_FIELDS:
        if item.get(f):
            return str(item[f])
    return "Unknown Item"


def item_id(item: Mapping[str, Any]) -> str:
    if item.get("Position") is not None:
        return str(item["Position"])
    return str(item.get("id") or "unknown")


class ShopService:
    def __init__(self, supabase_client: Any, tracking: TrackingService) -> None:
        self.sb = supabase_client
        self.tracking = tracking

    async def _track(self, **fields: Any) -> Dict[str, Any]:
        """
        Tracking never blocks the shop; a failed insert is logged and the
        caller gets an empty result.
        """
        try:
            return await self.tracking.record_interaction(**fields)
        except Exception as e:
            log.warning("Shop interaction not tracked action=%s category=%s: %s", fields.get("action"), fields.get("category"), e)
            return {"interaction": None, "points": None}

    async def items(self, category_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        category = category_by_id(category_id)
        await self._track(
            action="view",
            user_id=user_id,
            category=category.id,
            category_name=category.display_name,
        )
        r = self.sb.table(category.table).select("*").order("Position").execute()
        return {"category": category.to_dict(), "items": getattr(r, "data", None) or []}

    async def click_item(self, category_id: str, item: Mapping[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
        category = category_by_id(category_id)
        result = await self._track(
            action="click",
            user_id=user_id,
            category=category.id,
            category_name=category.display_name,
            item_id=item_id(item),
            item_name=item_name(item),
        )

        # accessory positions drive the voucher matcher
        if category.id == "accessories" and item.get("Position") is not None:
            await self._track(
                action="accessory_click",
                user_id=user_id,
                category="accessories",
                category_name="Accessories",
                item_id=str(item["Position"]),
                item_name=str(item.get("Product_Name") or "Unknown Product"),
                metadata={
                    "position": item.get("Position"),
                    "product_name": item.get("Product_Name"),
                    "price": item.get("Price"),
                    "offer": item.get("Offer"),
                },
            )
            log.info("Accessory click position=%s", item.get("Position"))

        return result
