from datetime import datetime

from apps.backend.services.recommendations.accessory_matcher import (
    audio_fallback,
    keywords_for_click,
    match_vouchers,
    recommended_voucher_ids,
)
from apps.backend.services.recommendations.behavior import (
    BehaviorProfile,
    InteractionEvent,
    analyze_behavior,
    recency_weight,
)
from apps.backend.services.recommendations.discounts import personalized_discounts
from apps.backend.services.recommendations.smart_vouchers import recommend
from apps.backend.services.recommendations.voucher_catalog import (
    PLATINUM_VOUCHERS,
    can_afford,
    combine_catalog,
    filter_by_category,
    is_high_value,
)


def event(name=None, category_id=None, category_name=None, hour=None):
    return InteractionEvent(
        category_id=category_id,
        category_name=category_name,
        clicked_item_name=name,
        clicked_at=datetime(2024, 5, 1, hour) if hour is not None else None,
    )


# -----------------------------
# Behavior profile
# -----------------------------
def test_recency_weight_steps_down_every_twenty_events():
    assert recency_weight(0) == 5
    assert recency_weight(19) == 5
    assert recency_weight(20) == 4
    assert recency_weight(79) == 2
    assert recency_weight(80) == 1
    assert recency_weight(500) == 1


def test_analyze_behavior_weights_patterns_and_categories():
    events = [event("Apple iPhone 15 Pro", category_id="mobile", hour=19) for _ in range(3)]
    profile = analyze_behavior(events)

    assert profile.pattern("premium_mobile") == 15
    assert profile.category("mobile") == 15
    assert profile.time("evening_user") == 3
    assert profile.time("business_hours") == 0
    assert profile.total_interactions == 3
    assert profile.engagement_level == "low"


def test_one_label_can_feed_several_rules_once_each():
    profile = analyze_behavior([event("Apple AirPods headphone audio")])
    assert profile.pattern("premium_mobile") == 5
    assert profile.pattern("audio_enthusiast") == 5


def test_category_falls_back_to_lowercased_name():
    profile = analyze_behavior([event("Router", category_name="Broadband")])
    assert profile.category("broadband") == 5


def test_engagement_levels():
    assert analyze_behavior([event("x")] * 21).engagement_level == "medium"
    assert analyze_behavior([event("x")] * 51).engagement_level == "high"


def test_from_row_parses_iso_timestamps():
    e = InteractionEvent.from_row(
        {"category_id": "tv", "clicked_item_name": "Netflix", "clicked_at": "2024-05-01T10:30:00Z", "clicked_item_id": 7}
    )
    assert e.clicked_at.hour == 10
    assert e.clicked_item_id == "7"


# -----------------------------
# Smart vouchers
# -----------------------------
def test_recommend_picks_audio_bundle_for_audio_clicks():
    profile = analyze_behavior([event("Sony headphone") for _ in range(4)])
    recs = recommend(profile)

    assert [r.id for r in recs] == ["audio-premium-1"]
    assert recs[0].recommendation_score == 500
    assert "20 interactions" in recs[0].recommendation_reason


def test_recommend_ranks_confidence_before_score():
    profile = BehaviorProfile(item_patterns={"audio_enthusiast": 4, "connectivity_focused": 10})
    recs = recommend(profile)

    assert [r.id for r in recs] == ["audio-premium-1", "connectivity-upgrade-1"]
    assert recs[1].recommendation_score > recs[0].recommendation_score


def test_recommend_respects_limit():
    profile = BehaviorProfile(
        item_patterns={
            "audio_enthusiast": 10,
            "entertainment_lover": 10,
            "security_conscious": 10,
            "premium_mobile": 10,
            "gaming_enthusiast": 10,
        }
    )
    assert len(recommend(profile, limit=2)) == 2
    assert recommend(profile, limit=0) == []


def test_security_confidence_depends_on_security_interest():
    recs = recommend(BehaviorProfile(item_patterns={"premium_mobile": 3}))
    security = next(r for r in recs if r.id == "security-suite-1")
    assert security.confidence_level == "medium"


def test_business_bundle_when_daytime_dominates():
    profile = BehaviorProfile(time_patterns={"business_hours": 4, "evening_user": 1})
    recs = recommend(profile)
    assert [r.id for r in recs] == ["business-bundle-1"]
    assert recs[0].recommendation_score == 20


def test_business_bundle_without_evening_activity():
    recs = recommend(BehaviorProfile(time_patterns={"business_hours": 2}))
    assert [r.id for r in recs] == ["business-bundle-1"]


def test_empty_profile_gets_nothing():
    assert recommend(analyze_behavior([])) == []


# -----------------------------
# Discounts
# -----------------------------
def test_default_discounts_without_signals():
    ids = [d.id for d in personalized_discounts([])]
    assert ids == ["default-1", "default-2"]


def test_accessory_browsing_unlocks_all_groups():
    ids = [d.id for d in personalized_discounts([event("Case", category_name="Accessories")])]
    assert ids == ["mobile-1", "mobile-2", "audio-1", "audio-2", "gaming-1"]


def test_speaker_click_gives_audio_discounts_only():
    ids = [d.id for d in personalized_discounts([event("JBL speaker", category_name="Home")])]
    assert ids == ["audio-1", "audio-2"]


# -----------------------------
# Accessory matcher
# -----------------------------
VOUCHERS = [
    {"id": "a1", "title": "AirPods deal", "category": "Audio", "keywords": ["airpods", "apple", "audio"], "is_active": True},
    {"id": "a2", "title": "Speaker sale", "category": "Audio", "keywords": ["speakers", "audio"], "is_active": True},
    {"id": "c1", "title": "Fast charger", "category": "Mobile", "keywords": "{charging,mobile}", "is_active": True},
    {"id": "g1", "title": "Gaming headset", "category": "Gaming", "keywords": [], "is_active": True},
    {"id": "x1", "title": "Old audio", "category": "Audio", "keywords": ["audio"], "is_active": False},
]


def test_keywords_from_name_and_position():
    assert keywords_for_click("Apple AirPods Pro", 2) == ["airpods", "apple", "audio", "audio", "headphones"]
    assert keywords_for_click("Unknown", 12) == ["gaming", "accessories"]
    assert keywords_for_click(None, None) == []


def test_match_vouchers_by_keyword_set_or_title():
    assert [v["id"] for v in match_vouchers(VOUCHERS, ["charging", "mobile"])] == ["c1"]
    assert [v["id"] for v in match_vouchers(VOUCHERS, ["gaming"])] == ["g1"]
    assert match_vouchers(VOUCHERS, []) == []


def test_audio_fallback_skips_inactive():
    assert [v["id"] for v in audio_fallback(VOUCHERS)] == ["a1", "a2"]


def test_recommended_voucher_ids_unions_clicks_without_duplicates():
    clicks = [
        {"clicked_item_id": "8", "clicked_item_name": "USB-C charger"},
        {"clicked_item_id": "1", "clicked_item_name": "AirPods"},
        {"clicked_item_id": "9", "clicked_item_name": "Braided cable"},
        {"clicked_item_id": None, "clicked_item_name": None},
    ]
    assert recommended_voucher_ids(clicks, VOUCHERS) == ["c1", "a1"]


# -----------------------------
# Catalog
# -----------------------------
def test_combine_catalog_orders_platinum_then_audio_then_cost():
    rows = [
        {"id": "v1", "title": "Movie night", "category": "Entertainment", "points_cost": 300},
        {"id": "v2", "title": "Noise cancelling headphones", "category": "Accessories", "points_cost": 900},
        {"id": "v3", "title": "SIM upgrade", "category": "Mobile", "points_cost": 100},
    ]
    catalog = combine_catalog(rows)
    ids = [v["id"] for v in catalog]

    assert ids[: len(PLATINUM_VOUCHERS)] == [v["id"] for v in PLATINUM_VOUCHERS]
    assert ids[len(PLATINUM_VOUCHERS):] == ["v2", "v3", "v1"]


def test_filter_by_category_is_substring_match():
    catalog = combine_catalog([{"id": "v1", "category": "Audio", "points_cost": 1}])
    audio = filter_by_category(catalog, "Audio")
    assert {v["id"] for v in audio} == {"v1", "platinum-audio-master"}
    assert filter_by_category(catalog, "All") == catalog


def test_high_value_and_affordability():
    assert is_high_value(2700)
    assert not is_high_value(2699)
    assert can_afford(500, {"points_cost": 500})
    assert not can_afford(499, {"points_cost": "500"})
