"""
Voucher catalog ordering and classification.

Display order: platinum showcase vouchers, then headphone/audio vouchers,
then everything else; points cost ascending inside each group.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

HIGH_VALUE_POINTS = 2700

CATEGORIES = [
    "All", "Audio", "Entertainment", "Mobile", "Security", "Broadband",
    "Accessories", "Gaming", "Computer", "Smart Home",
]

PLATINUM_CATEGORY_MARKERS = ("Platinum", "VIP", "Premium Tech", "Audio Pro")

HEADPHONE_TITLE_WORDS = ("headphone", "headset", "earphone", "earbuds", "airpods", "audio")


def _platinum(id_: str, title: str, description: str, value: str, category: str) -> Dict[str, Any]:
    return {
        "id": id_,
        "title": title,
        "description": description,
        "points_cost": 0,
        "value": value,
        "category": category,
        "expiry_date": "2025-12-31",
        "is_active": True,
    }


PLATINUM_VOUCHERS: List[Dict[str, Any]] = [
    _platinum("platinum-audio-master", "Premium Audio Master Collection",
              "Sony WH-1000XM5 + AirPods Pro 2 + Bose QuietComfort + Premium audio cables",
              "$800 Value", "Platinum Audio"),
    _platinum("platinum-iphone-pro", "Ultimate iPhone Pro Package",
              "iPhone 15 Pro Max + MagSafe accessories + Premium case + AppleCare+",
              "$1,200 Value", "Platinum Mobile"),
    _platinum("platinum-gaming-elite", "Gaming Elite Setup",
              "Gaming chair + Mechanical keyboard + Gaming mouse + 4K monitor + Headset",
              "$2,500 Value", "Platinum Gaming"),
    _platinum("platinum-smart-home", "Smart Home Premium Suite",
              "Smart speakers + Security cameras + Smart lights + Home automation hub",
              "$1,500 Value", "Platinum Smart Home"),
    _platinum("platinum-entertainment", "Entertainment Platinum Bundle",
              "Netflix Premium + Disney+ + HBO Max + Apple TV+ + Spotify Premium (24 months)",
              "$600 Value", "Platinum Entertainment"),
    _platinum("platinum-tech-pro", "Professional Tech Package",
              "MacBook Pro 16\" + iPad Pro + Apple Pencil + Magic Keyboard + AirPods Max",
              "$3,000 Value", "Platinum Tech"),
]

DEMO_VOUCHERS: List[Dict[str, Any]] = [
    {
        "id": "demo-1",
        "title": "$10 Off Mobile Accessories",
        "description": "Valid on any mobile accessory purchase above $30",
        "points_cost": 500,
        "value": "$10",
        "category": "Mobile",
        "expiry_date": "2025-03-31",
        "is_active": True,
    },
    {
        "id": "demo-2",
        "title": "20% Off SIM Plan Upgrade",
        "description": "Upgrade to any higher tier SIM plan",
        "points_cost": 800,
        "value": "20%",
        "category": "SIM",
        "expiry_date": "2025-02-28",
        "is_active": True,
    },
]


def _cost(v: Mapping[str, Any]) -> int:
    try:
        return int(v.get("points_cost") or 0)
    except (TypeError, ValueError):
        return 0


def is_platinum(voucher: Mapping[str, Any]) -> bool:
    category = str(voucher.get("category") or "")
    if any(m in category for m in PLATINUM_CATEGORY_MARKERS):
        return True
    return str(voucher.get("id") or "").startswith("platinum-")


def is_headphone(voucher: Mapping[str, Any]) -> bool:
    title = str(voucher.get("title") or "").lower()
    description = str(voucher.get("description") or "").lower()
    category = str(voucher.get("category") or "").lower()
    subcategory = str(voucher.get("subcategory") or "").lower()

    return (
        any(w in title for w in HEADPHONE_TITLE_WORDS)
        or "headphone" in description
        or "audio" in description
        or "audio" in category
        or "audio" in subcategory
        or "headphone" in category
    )


def is_high_value(points_cost: int) -> bool:
    return points_cost >= HIGH_VALUE_POINTS


def sort_key(voucher: Mapping[str, Any]):
    platinum = is_platinum(voucher)
    headphone = (not platinum) and is_headphone(voucher)
    return (0 if platinum else 1, 0 if headphone else 1, _cost(voucher))


def combine_catalog(*sources: Optional[Iterable[Mapping[str, Any]]], include_platinum: bool = True) -> List[Dict[str, Any]]:
    combined: List[Dict[str, Any]] = []
    if include_platinum:
        combined.extend(dict(v) for v in PLATINUM_VOUCHERS)
    for source in sources:
        combined.extend(dict(v) for v in (source or []))
    return sorted(combined, key=sort_key)


def filter_by_category(vouchers: Iterable[Mapping[str, Any]], category: str) -> List[Mapping[str, Any]]:
    if not category or category == "All":
        return list(vouchers)
    needle = category.lower()
    return [
        v for v in vouchers
        if v.get("category") == category or needle in str(v.get("category") or "").lower()
    ]


def can_afford(points_balance: int, voucher: Mapping[str, Any]) -> bool:
    return points_balance >= _cost(voucher)
