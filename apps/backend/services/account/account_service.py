"""
Account screens: profile card, bills and the weekly usage summary.

Billing and device usage have no backing tables yet; the demo statements
below are served as-is.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

BILL_STATUS_COLORS = {
    "paid": "#4CAF50",
    "due": "#FF6B35",
    "overdue": "#E60012",
}
DEFAULT_STATUS_COLOR = "#666"

DEMO_PROFILE = {
    "name": "John Doe",
    "phone": "+65 9123 4567",
    "email": "john.doe@email.com",
    "plan": "Lite",
    "member_since": "March 2020",
}

CURRENT_BILL = {
    "amount": 68.50,
    "due_date": "25 Jan 2025",
    "status": "due",
    "period": "Dec 2024",
    "breakdown": [
        {"item": "Mobile Plan", "amount": 45.00},
        {"item": "Extra Data", "amount": 15.00},
        {"item": "International Calls", "amount": 8.50},
    ],
}

BILL_HISTORY = [
    {"id": 1, "month": "Nov 2024", "amount": 62.30, "status": "paid", "due_date": "25 Nov 2024"},
    {"id": 2, "month": "Oct 2024", "amount": 58.75, "status": "paid", "due_date": "25 Oct 2024"},
    {"id": 3, "month": "Sep 2024", "amount": 71.20, "status": "paid", "due_date": "25 Sep 2024"},
    {"id": 4, "month": "Aug 2024", "amount": 55.90, "status": "paid", "due_date": "25 Aug 2024"},
    {"id": 5, "month": "Jul 2024", "amount": 63.40, "status": "paid", "due_date": "25 Jul 2024"},
]

PAYMENT_METHODS = [
    {"id": 1, "type": "Credit Card", "number": "•••• 4567", "is_default": True},
    {"id": 2, "type": "Bank Account", "number": "•••• 8901", "is_default": False},
]

WEEKLY_USAGE = [
    {"day": "Mon", "usage": 1.2, "max_usage": 3},
    {"day": "Tue", "usage": 2.8, "max_usage": 3},
    {"day": "Wed", "usage": 1.5, "max_usage": 3},
    {"day": "Thu", "usage": 3.2, "max_usage": 3.5},
    {"day": "Fri", "usage": 2.1, "max_usage": 3},
    {"day": "Sat", "usage": 1.8, "max_usage": 3},
    {"day": "Sun", "usage": 0.9, "max_usage": 3},
]

TOP_APPS = [
    {"name": "Instagram", "usage": 2.8, "percentage": 25},
    {"name": "YouTube", "usage": 2.1, "percentage": 19},
    {"name": "WhatsApp", "usage": 1.5, "percentage": 13},
    {"name": "Spotify", "usage": 1.2, "percentage": 11},
    {"name": "Netflix", "usage": 1.0, "percentage": 9},
]

HEAVY_DAY_GB = 2.5


def status_label(status: str) -> str:
    return (status or "").capitalize()


def status_color(status: str) -> str:
    return BILL_STATUS_COLORS.get(status, DEFAULT_STATUS_COLOR)


def _with_status(bill: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(bill)
    out["status_label"] = status_label(bill.get("status", ""))
    out["status_color"] = status_color(bill.get("status", ""))
    return out


def profile(user: Optional[Dict[str, str]] = None, loyalty: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    out = dict(DEMO_PROFILE)
    if user:
        out["user_id"] = user.get("id")
        if user.get("email"):
            out["email"] = user["email"]
    if loyalty:
        out["loyalty"] = {
            "total_points": loyalty.get("total_points"),
            "current_tier": loyalty.get("current_tier"),
        }
    return out


def bills() -> Dict[str, Any]:
    history = [_with_status(b) for b in BILL_HISTORY]
    amounts = [b["amount"] for b in BILL_HISTORY]
    breakdown_total = round(sum(i["amount"] for i in CURRENT_BILL["breakdown"]), 2)
    return {
        "current": {**_with_status(CURRENT_BILL), "breakdown_total": breakdown_total},
        "history": history,
        "average_amount": round(sum(amounts) / len(amounts), 2) if amounts else 0.0,
        "payment_methods": list(PAYMENT_METHODS),
    }


def usage_summary() -> Dict[str, Any]:
    days: List[Dict[str, Any]] = []
    for d in WEEKLY_USAGE:
        days.append({**d, "heavy": d["usage"] > HEAVY_DAY_GB, "fill": round(d["usage"] / d["max_usage"] * 100, 1)})
    return {
        "week_total_gb": round(sum(d["usage"] for d in WEEKLY_USAGE), 1),
        "days": days,
        "top_apps": list(TOP_APPS),
    }
