from datetime import date

import pytest

from apps.backend.services.core_service import CoreError, InsufficientPointsError, NotFoundError
from apps.backend.services.loyalty.loyalty_repository import LoyaltyRepository
from apps.backend.services.loyalty.loyalty_service import LoyaltyService
from apps.backend.services.loyalty.rewards import AlreadyClaimed, claim_daily_reward, engagement_award
from apps.backend.services.loyalty.tiers import current_tier, tier_status
from tests.conftest import run
from tests.fakes import FakeSupabase


# -----------------------------
# Tiers
# -----------------------------
@pytest.mark.parametrize(
    "points,name",
    [(0, "Bronze"), (999, "Bronze"), (1000, "Silver"), (2500, "Gold"), (4999, "Gold"), (5000, "Platinum"), (90000, "Platinum")],
)
def test_current_tier_thresholds(points, name):
    assert current_tier(points).name == name


def test_premium_members_sit_on_gold_plus():
    assert current_tier(10, is_premium=True).name == "Gold+"


def test_tier_status_progress_between_thresholds():
    status = tier_status(1500)
    assert status.current_tier.name == "Silver"
    assert status.next_tier.name == "Gold"
    assert status.points_to_next == 1000
    assert round(status.progress, 2) == 33.33


def test_top_tier_has_no_next():
    d = tier_status(6000).to_dict()
    assert d["next_tier"] is None
    assert d["progress"] == 100.0
    assert d["is_top_tier"] is True


# -----------------------------
# Rewards
# -----------------------------
def test_engagement_award_by_action():
    assert engagement_award("click", "Mobile") == (10, "Product click: Mobile")
    assert engagement_award("view") == (5, "Page view: General")
    assert engagement_award("chat") == (20, "Chat interaction")
    assert engagement_award("dance") == (5, "General engagement")


def test_first_daily_claim():
    claim = claim_daily_reward(None, date(2024, 6, 1))
    assert (claim.streak, claim.points, claim.total_claims) == (1, 50, 1)
    assert claim.reference_id == "daily_2024-06-01"


def test_streak_continues_from_yesterday_with_weekly_bonus():
    previous = {"last_claim_date": "2024-05-31", "current_streak": 6, "total_claims": 10}
    claim = claim_daily_reward(previous, date(2024, 6, 1))
    assert claim.streak == 7
    assert claim.points == 100
    assert claim.total_claims == 11
    assert claim_daily_reward(previous, date(2024, 6, 1), is_premium=True).points == 200


def test_monthly_streak_bonus():
    previous = {"last_claim_date": "2024-05-31", "current_streak": 29, "total_claims": 29}
    assert claim_daily_reward(previous, date(2024, 6, 1)).points == 200


def test_missed_day_resets_streak():
    previous = {"last_claim_date": "2024-05-30", "current_streak": 12, "total_claims": 12}
    assert claim_daily_reward(previous, date(2024, 6, 1)).streak == 1


def test_second_claim_same_day_is_rejected():
    with pytest.raises(AlreadyClaimed):
        claim_daily_reward({"last_claim_date": "2024-06-01T08:00:00"}, date(2024, 6, 1))


# -----------------------------
# Service
# -----------------------------
def service(tables=None, **kw):
    sb = FakeSupabase(tables, **kw)
    return sb, LoyaltyService(LoyaltyRepository(sb))


def test_status_creates_missing_balance():
    sb, svc = service()
    status = run(svc.get_status("u1"))

    assert status.total_points == 0
    assert status.to_dict()["current_tier"] == "Bronze"
    assert sb.rows("user_loyalty_points")[0]["user_id"] == "u1"


def test_anonymous_status_is_demo(monkeypatch):
    _, svc = service()
    status = run(svc.get_status(None))
    assert status.demo is True
    assert status.total_points == 2400

    monkeypatch.setenv("DEMO_FALLBACKS", "false")
    with pytest.raises(CoreError) as exc:
        run(svc.get_status(None))
    assert exc.value.status_code == 401


def test_status_falls_back_to_demo_when_backend_fails():
    _, svc = service(failing=["user_loyalty_points"])
    status = run(svc.get_status("u1"))
    assert status.demo is True
    assert status.user_id == "u1"


def test_engagement_increments_balance_and_logs_transaction():
    sb, svc = service({"user_loyalty_points": [{"user_id": "u1", "total_points": 995, "points_earned_this_month": 5}]})
    out = run(svc.award_engagement("u1", "click", "Mobile"))

    assert out == {"points_awarded": 10, "description": "Product click: Mobile", "total_points": 1005}
    row = sb.rows("user_loyalty_points")[0]
    assert row["current_tier"] == "Silver"
    assert row["points_earned_this_month"] == 15
    tx = sb.rows("loyalty_transactions")[0]
    assert tx["transaction_type"] == "earned"
    assert tx["reference_id"].startswith("click_")


def test_claim_daily_persists_streak_and_credits():
    sb, svc = service(
        {
            "user_loyalty_points": [{"user_id": "u1", "total_points": 100}],
            "user_daily_rewards": [{"user_id": "u1", "last_claim_date": "2024-05-31", "current_streak": 6, "total_claims": 6}],
        }
    )
    claim = run(svc.claim_daily("u1", today=date(2024, 6, 1)))

    assert claim.points == 100
    daily = sb.rows("user_daily_rewards")
    assert len(daily) == 1
    assert daily[0]["current_streak"] == 7
    assert sb.rows("user_loyalty_points")[0]["total_points"] == 200

    with pytest.raises(CoreError) as exc:
        run(svc.claim_daily("u1", today=date(2024, 6, 1)))
    assert exc.value.code == "already_claimed"


def test_redeem_deducts_and_records():
    sb, svc = service(
        {
            "user_loyalty_points": [{"user_id": "u1", "total_points": 1000}],
            "accessory_vouchers": [{"id": "v9", "title": "Speaker", "points_cost": 600, "is_active": True}],
        }
    )
    out = run(svc.redeem("u1", "v9"))

    assert out["points_spent"] == 600
    assert out["total_points"] == 400
    tx = sb.rows("loyalty_transactions")[0]
    assert tx["points"] == -600
    assert tx["description"] == "Redeemed: Speaker"

    with pytest.raises(InsufficientPointsError):
        run(svc.redeem("u1", "v9"))


def test_redeem_unknown_or_inactive_voucher():
    _, svc = service({"loyalty_vouchers": [{"id": "old", "title": "Old", "points_cost": 1, "is_active": False}]})
    with pytest.raises(NotFoundError):
        run(svc.redeem("u1", "missing"))
    with pytest.raises(CoreError) as exc:
        run(svc.redeem("u1", "old"))
    assert exc.value.status_code == 410


def test_platinum_voucher_costs_nothing():
    _, svc = service()
    out = run(svc.redeem("u1", "platinum-audio-master"))
    assert out["points_spent"] == 0


def test_redeem_recomputes_stored_tier():
    sb, svc = service(
        {
            "user_loyalty_points": [{"user_id": "u1", "total_points": 1200, "current_tier": "Silver"}],
            "accessory_vouchers": [{"id": "v9", "title": "Speaker", "points_cost": 600, "is_active": True}],
        }
    )
    out = run(svc.redeem("u1", "v9"))

    assert out["current_tier"] == "Bronze"
    assert sb.rows("user_loyalty_points")[0]["current_tier"] == "Bronze"
