from dataclasses import replace

import httpx

from apps.backend.routes import chat as chat_routes
from apps.backend.services.chat.client import ChatClient
from apps.backend.services.settings import settings
from tests.conftest import AUTH, USER_ID


def view_row(name, user_id, at):
    return {"clicked_item_name": name, "category_id": "mobile", "user_id": user_id, "clicked_at": at}


# -----------------------------
# Root / health
# -----------------------------
def test_root_lists_routes(client):
    body = client.get("/").json()
    assert "/loyalty" in body["routes"]
    assert body["version"] == settings.APP_VERSION


def test_health(client):
    body = client.get("/health").json()
    assert body["ok"] is True
    assert body["data"]["supabase"] is True
    assert body["data"]["scheduler"] is False
    assert body["data"]["realtime_subscribers"] == 1


def test_backend_required_routes_answer_503_without_client(anon_client):
    r = anon_client.get("/tracking/activity")
    assert r.status_code == 503
    assert r.json() == {"ok": False, "error": "error", "message": "Supabase client unavailable"}


# -----------------------------
# Loyalty
# -----------------------------
def test_tiers_and_boosters(client):
    assert [t["name"] for t in client.get("/loyalty/tiers").json()["data"]] == [
        "Bronze", "Silver", "Gold", "Gold+", "Platinum",
    ]
    boosters = client.get("/loyalty/boosters").json()["data"]
    assert boosters[1]["total_points"] == 1400


def test_anonymous_status_is_demo(anon_client):
    body = anon_client.get("/loyalty/status").json()
    assert body["meta"]["demo"] is True
    assert body["data"]["total_points"] == 2400
    assert body["data"]["current_tier"] == "Silver"


def test_signed_in_status_creates_balance(client, sb):
    body = client.get("/loyalty/status", headers=AUTH).json()
    assert body["data"]["user_id"] == USER_ID
    assert body["data"]["total_points"] == 0
    assert sb.rows("user_loyalty_points")[0]["user_id"] == USER_ID


def test_invalid_token(client):
    r = client.get("/loyalty/status", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"


def test_daily_reward_flow(client):
    assert client.post("/loyalty/daily-reward").json()["error"] == "sign_in_required"

    first = client.post("/loyalty/daily-reward", headers=AUTH)
    assert first.status_code == 200
    assert first.json()["data"]["points"] == 50
    assert len(first.json()["data"]["claim_date"]) == 10

    again = client.post("/loyalty/daily-reward", headers=AUTH)
    assert again.status_code == 409
    assert again.json()["error"] == "already_claimed"

    history = client.get("/loyalty/transactions", headers=AUTH).json()["data"]
    assert [t["points"] for t in history] == [50]


def test_redeem_needs_enough_points(client, sb):
    sb.tables["loyalty_vouchers"] = [{"id": "v1", "title": "Movie", "points_cost": 500, "is_active": True}]
    r = client.post("/loyalty/redeem", json={"voucher_id": "v1"}, headers=AUTH)
    assert r.status_code == 409
    assert r.json()["error"] == "insufficient_points"


def test_discounts_default(client):
    ids = [d["id"] for d in client.get("/loyalty/discounts").json()["data"]]
    assert ids == ["default-1", "default-2"]


# -----------------------------
# Vouchers
# -----------------------------
def test_catalog_without_backend_serves_demo(anon_client):
    body = anon_client.get("/vouchers/catalog").json()
    assert body["meta"]["demo"] is True
    assert [v["id"] for v in body["data"]] == ["demo-1", "demo-2"]
    assert "Audio" in body["meta"]["categories"]


def test_catalog_filters_and_marks_affordability(client, sb):
    sb.tables["accessory_vouchers"] = [
        {"id": "a1", "title": "Headphones", "category": "Audio", "points_cost": 3000, "is_active": True},
    ]
    data = client.get("/vouchers/catalog", params={"category": "Audio", "points": 100}).json()["data"]
    by_id = {v["id"]: v for v in data}

    assert list(by_id) == ["platinum-audio-master", "a1"]
    assert by_id["platinum-audio-master"]["can_afford"] is True
    assert by_id["a1"]["can_afford"] is False
    assert by_id["a1"]["is_high_value"] is True


def test_smart_vouchers_served_from_live_snapshot(client, sb):
    sb.tables["user_interactions"] = [
        {"clicked_item_name": "Gaming console", "category_id": "gaming", "clicked_at": "2024-06-01T20:00:00"},
        {"clicked_item_name": "Game pass", "category_id": "gaming", "clicked_at": "2024-06-01T21:00:00"},
    ]
    first = client.get("/vouchers/smart").json()
    assert first["meta"]["source"] == "computed"
    assert [r["id"] for r in first["data"]["recommendations"]] == ["gaming-bundle-1"]

    second = client.get("/vouchers/smart").json()
    assert second["meta"]["source"] == "live"
    assert second["data"] == first["data"]


def test_search_validates_and_calls_rpc(client, sb):
    assert client.post("/vouchers/search", json={"query": ""}).status_code == 422

    sb.rpc_results["log_search_and_get_vouchers"] = {"vouchers": [{"id": "s1", "title": "JBL deal"}]}
    body = client.post("/vouchers/search", json={"query": " jbl "}, headers=AUTH).json()

    assert [v["id"] for v in body["data"]] == ["s1"]
    name, params = sb.rpc_calls[0]
    assert name == "log_search_and_get_vouchers"
    assert params == {"searching_user_id": USER_ID, "search_query_input": "jbl", "search_category_input": "accessories"}


def test_recent_searches_are_unique(client, sb):
    sb.tables["user_searches"] = [
        {"search_query": "jbl", "search_type": "accessory", "created_at": "2024-06-01T10:00:00"},
        {"search_query": "airpods", "search_type": "accessory", "created_at": "2024-06-01T11:00:00"},
        {"search_query": "jbl", "search_type": "accessory", "created_at": "2024-06-01T12:00:00"},
        {"search_query": "router", "search_type": "plan", "created_at": "2024-06-01T13:00:00"},
    ]
    assert client.get("/vouchers/search/recent").json()["data"] == ["jbl", "airpods"]


def test_voucher_view_tracking(client, sb):
    client.post("/vouchers/views", json={"voucher_id": "v1", "search_query": "jbl"})
    assert sb.rows("user_voucher_views")[0]["voucher_id"] == "v1"


def test_latest_search_vouchers_read_without_logging(client, sb):
    assert client.get("/vouchers/search/latest").json()["data"] == []

    sb.tables["user_searches"] = [
        {"search_query": "airpods", "search_type": "accessory", "created_at": "2024-06-01T10:00:00"},
        {"search_query": "jbl", "search_type": "accessory", "created_at": "2024-06-01T12:00:00"},
    ]
    sb.rpc_results["find_matching_vouchers"] = [{"id": "m1", "title": "JBL Flip"}]
    body = client.get("/vouchers/search/latest").json()

    assert body["meta"]["query"] == "jbl"
    assert [v["id"] for v in body["data"]] == ["m1"]
    assert sb.rpc_calls == [("find_matching_vouchers", {"search_text": "jbl"})]


# -----------------------------
# Tracking
# -----------------------------
def test_interaction_awards_points_and_queues_refresh(client):
    r = client.post(
        "/tracking/interaction",
        json={"action": "click", "category": "Mobile", "item_name": "iPhone 15"},
        headers=AUTH,
    )
    body = r.json()
    assert r.status_code == 201
    assert body["data"]["points"]["points_awarded"] == 10
    assert len(client.app.state.activity_hub.pending) == 1


def test_interaction_rejects_unknown_action(client):
    r = client.post("/tracking/interaction", json={"action": "dance"})
    assert r.status_code == 422
    assert r.json()["error"] == "validation_error"


def test_activity_summary_route(client):
    client.post("/tracking/interaction", json={"action": "view", "category": "TV", "item_name": "CAST"})
    data = client.get("/tracking/activity").json()["data"]
    assert data["total_views"] == 1
    assert data["top_categories"] == [{"category": "TV", "count": 1}]


def test_recent_views_scoped_to_caller(client, sb):
    sb.tables["user_interactions"] = [
        view_row("Mine", USER_ID, "2024-06-01T10:00:00"),
        view_row("Theirs", "someone-else", "2024-06-01T11:00:00"),
    ]
    mine = client.get("/tracking/recent", params={"user_id": "someone-else"}, headers=AUTH).json()["data"]
    assert [v["clicked_item_name"] for v in mine["recent_views"]] == ["Mine"]


def test_live_channel_subscribes(client):
    hub = client.app.state.activity_hub
    with client.websocket_connect("/tracking/live") as ws:
        assert ws.receive_json() == {"type": "subscribed", "version": 0}
        assert hub.subscriber_count == 2
    assert hub.subscriber_count == 1


# -----------------------------
# Chat
# -----------------------------
def test_support_chat(client):
    body = client.post("/chat/support", json={"message": "How is the network coverage?"}).json()
    assert body["data"]["branch"] == "coverage"


def test_support_greeting(client):
    assert "Singtel Assistant" in client.get("/chat/support/greeting").json()["data"]["response"]


def test_chat_replies_when_message_log_is_down(client, sb):
    sb.failing.add("chat_messages")

    support = client.post("/chat/support", json={"message": "coverage?", "session_id": "s1"})
    assert support.status_code == 200
    assert support.json()["data"]["branch"] == "coverage"

    assistant = client.post("/chat/assistant", json={"message": "show me sim plans"})
    assert assistant.status_code == 200
    assert assistant.json()["meta"]["mode"] == "local"


def test_chat_can_be_disabled(client, monkeypatch):
    monkeypatch.setenv("CHAT_ENABLED", "false")
    r = client.post("/chat/support", json={"message": "hi"})
    assert r.status_code == 404
    assert r.json()["error"] == "feature_disabled"


def test_local_assistant_requires_message(client):
    r = client.post("/chat/assistant", json={})
    assert r.status_code == 400
    assert r.json()["error"] == "no_message"


def test_remote_assistant_proxies_and_logs(client, sb, monkeypatch):
    def handler(request):
        return httpx.Response(200, json={"response": "Remote hello"})

    monkeypatch.setattr(chat_routes, "settings", replace(settings, CHAT_ENDPOINT_URL="https://chat.example"))
    monkeypatch.setattr(
        chat_routes,
        "ChatClient",
        lambda url, timeout: ChatClient(url, timeout=timeout, transport=httpx.MockTransport(handler)),
    )

    body = client.post("/chat/assistant", json={"message": "hello", "session_id": "s1"}).json()
    assert body["meta"]["mode"] == "remote"
    assert body["data"]["response"] == "Remote hello"
    assert [m["role"] for m in sb.rows("chat_messages")] == ["user", "assistant"]


# -----------------------------
# Usage / plans / shop / account
# -----------------------------
def test_usage_without_record(client):
    r = client.get("/usage/recommendations")
    assert r.status_code == 404
    assert r.json()["message"] == "No user data found"


def test_weekly_usage_summary(client):
    assert client.get("/usage/summary").json()["data"]["week_total_gb"] == 13.5


def test_plan_comparison(client, sb):
    sb.tables["Singtel_Sim_Plans"] = [{"Plan Name": "Core", "Price": "$40", "Position": 1}]
    data = client.get("/plans/comparison", params={"plan": "Core"}).json()["data"]
    assert data["plans"]["singtel"]["plan_name"] == "Core"
    assert data["price_gap"] is None


def test_shop(client, sb):
    assert len(client.get("/shop/categories").json()["data"]) == 7
    assert client.get("/shop/categories/pets").status_code == 404

    sb.tables["Broadband"] = [{"Type_Broadband": "1Gbps", "Position": 1}]
    data = client.get("/shop/categories/broadband").json()["data"]
    assert data["category"]["name"] == "Fibre Broadband"
    assert len(data["items"]) == 1

    r = client.post("/shop/categories/mobile/click", json={"item": {"Phone Name": "iPhone 15", "Position": 2}}, headers=AUTH)
    assert r.json()["data"]["points"]["points_awarded"] == 10


def test_account(client):
    profile = client.get("/account/profile", headers=AUTH).json()
    assert profile["meta"]["demo"] is False
    assert profile["data"]["loyalty"]["current_tier"] == "Bronze"

    bills = client.get("/account/bills").json()["data"]
    assert bills["current"]["status_label"] == "Due"
    assert len(bills["payment_methods"]) == 2


def test_shop_category_loads_when_tracking_is_down(client, sb):
    sb.tables["Mobile_with_SIM"] = [{"Phone Name": "iPhone 15", "Position": 1}]
    sb.failing.add("user_interactions")

    r = client.get("/shop/categories/mobile")
    assert r.status_code == 200
    assert [i["Phone Name"] for i in r.json()["data"]["items"]] == ["iPhone 15"]
