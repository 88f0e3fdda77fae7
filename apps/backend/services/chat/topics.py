"""
Topic detection and the plan tables each topic reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

SIM_TABLES = ("Singtel_Sim_Plans", "Starhub_Sim_Plans", "Simba_Sim_Plans", "CirclesLife_Sim_Plans")
BROADBAND_TABLES = ("Broadband", "CAST.SG")
PHONE_TABLES = ("Mobile_with_SIM",)
PROMOTION_TABLES = (
    "Singtel_Sim_Plans", "Starhub_Sim_Plans", "Simba_Sim_Plans", "Broadband",
    "CAST.SG", "Mobile_with_SIM", "CirclesLife_Sim_Plans",
)


@dataclass(frozen=True)
class TopicRule:
    topic: str
    keywords: Tuple[str, ...]
    tables: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


TOPIC_RULES: Sequence[TopicRule] = (
    TopicRule("sim", (
        "sim", "mobile plan", "data plan", "data plans", "mobile plans",
        "circles life", "simba", "starhub",
    ), SIM_TABLES),
    TopicRule("broadband", ("broadband", "wifi"), BROADBAND_TABLES),
    TopicRule("phones", (
        "iphone", "samsung", "phone", "iphones", "samsungs", "phones", "android",
        "huawei", "oppo", "ipad", "lenovo", "computer", "tablets", "tablet",
    ), PHONE_TABLES),
    TopicRule("promotions", ("promotion", "discount"), PROMOTION_TABLES),
)

TOPIC_TABLES: Dict[str, Tuple[str, ...]] = {r.topic: r.tables for r in TOPIC_RULES}

CONTEXT_ROWS = 10


def detect_topic(message: str, rules: Sequence[TopicRule] = TOPIC_RULES) -> Optional[str]:
    lower = (message or "").lower()
    for rule in rules:
        if rule.matches(lower):
            return rule.topic
    return None


def tables_for(topic: Optional[str]) -> Tuple[str, ...]:
    if not topic:
        return ()
    return TOPIC_TABLES.get(topic, ())


def _first(row: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for k in keys:
        if row.get(k):
            return row[k]
    return None


def describe_row(table: str, row: Mapping[str, Any]) -> str:
    """
    One context line per row. Tables without a known layout produce an
    empty description.
    """
    if "Sim_Plans" in table:
        text = (
            f"Plan: {row.get('Plan Name') or 'N/A'}, "
            f"Price: {_first(row, 'Price', 'Price per Month') or 'N/A'}, "
            f"Data: {_first(row, 'Data and Roaming', 'Data Allowance') or 'N/A'}"
        )
        link = _first(row, "Product Link", "Details_Link")
    elif table == "Mobile_with_SIM":
        text = f"Phone: {row.get('Phone Name') or 'N/A'}, Offer: {row.get('Discount Offer') or 'N/A'}"
        link = row.get("Product_Link")
    elif table == "Broadband":
        text = f"Type: {row.get('Type_Broadband') or 'N/A'}, Price: {row.get('Price') or 'N/A'}"
        link = row.get("Image_url")
    else:
        return ""

    if link:
        text += f", Link: {link}"
    return text


def build_data_context(rows_by_table: Mapping[str, List[Mapping[str, Any]]]) -> str:
    context = ""
    for table, rows in rows_by_table.items():
        if not rows:
            continue
        context += f"\n\n=== {table} Data ===\n"
        for i, row in enumerate(rows, start=1):
            context += f"{i}. {describe_row(table, row)}\n"
    return context
