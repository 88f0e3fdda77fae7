"""
Accessory click -> voucher matching.

A click on an accessory tile yields keywords from two sources:
- the clicked item name (brand / product-type words)
- the tile position in the accessories grid (1-5 audio, 6-10 charging,
  11-15 gaming)

Vouchers match when their keyword array contains every keyword, or when
their title or category contains the first keyword (case-insensitive).
Clicks that yield no keywords fall back to up to three audio vouchers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

log = logging.getLogger("telco.recommendations.accessories")

NAME_KEYWORDS: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (("airpods", "apple"), ("airpods", "apple", "audio")),
    (("headphone", "headset"), ("headphones", "audio")),
    (("speaker",), ("speakers", "audio")),
    (("jbl",), ("jbl", "audio")),
    (("gaming", "game"), ("gaming",)),
    (("charger", "cable"), ("charging", "mobile")),
    (("case", "cover"), ("cases", "mobile")),
)

POSITION_KEYWORDS: Tuple[Tuple[int, int, Tuple[str, ...]], ...] = (
    (1, 5, ("audio", "headphones")),
    (6, 10, ("mobile", "charging")),
    (11, 15, ("gaming", "accessories")),
)

RECENT_CLICKS = 10
FALLBACK_LIMIT = 3


def parse_position(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def keywords_for_click(item_name: Optional[str], position: Optional[int]) -> List[str]:
    name = (item_name or "").lower()
    keywords: List[str] = []

    for triggers, words in NAME_KEYWORDS:
        if any(t in name for t in triggers):
            keywords.extend(words)

    if position is not None:
        for start, end, words in POSITION_KEYWORDS:
            if start <= position <= end:
                keywords.extend(words)
                break

    return keywords


def _voucher_keywords(voucher: Mapping[str, Any]) -> Set[str]:
    raw = voucher.get("keywords") or []
    if isinstance(raw, str):
        raw = [x.strip() for x in raw.strip("{}").split(",")]
    return {str(x).lower() for x in raw if x}


def _active(vouchers: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [v for v in vouchers if v.get("is_active", True)]


def match_vouchers(vouchers: Iterable[Mapping[str, Any]], keywords: Sequence[str]) -> List[Mapping[str, Any]]:
    if not keywords:
        return []
    wanted = {k.lower() for k in keywords}
    first = keywords[0].lower()

    out = []
    for v in _active(vouchers):
        if wanted.issubset(_voucher_keywords(v)):
            out.append(v)
        elif first in str(v.get("title") or "").lower() or first in str(v.get("category") or "").lower():
            out.append(v)
    return out


def audio_fallback(vouchers: Iterable[Mapping[str, Any]], limit: int = FALLBACK_LIMIT) -> List[Mapping[str, Any]]:
    out = [
        v for v in _active(vouchers)
        if "audio" in str(v.get("category") or "").lower() or "audio" in _voucher_keywords(v)
    ]
    return out[:limit]


def recommended_voucher_ids(
    clicks: Iterable[Mapping[str, Any]],
    vouchers: Sequence[Mapping[str, Any]],
) -> List[str]:
    """
    clicks: accessory rows of user_interactions, newest-first.
    Returns voucher ids in first-matched order, without duplicates.
    """
    seen: Dict[str, None] = {}

    for click in list(clicks)[:RECENT_CLICKS]:
        position = parse_position(click.get("clicked_item_id"))
        name = click.get("clicked_item_name")
        if position is None and not name:
            continue

        keywords = keywords_for_click(name, position)
        matched = match_vouchers(vouchers, keywords) if keywords else audio_fallback(vouchers)
        log.debug("accessory click %r position=%s keywords=%s matched=%d", name, position, keywords, len(matched))

        for v in matched:
            if v.get("id") is not None:
                seen.setdefault(str(v["id"]), None)

    return list(seen)
