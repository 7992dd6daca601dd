from datetime import date, datetime, timezone

import pytest
from conftest import FakeSupabase

from utils import admin_repo, quotas
from utils.errors import BadRequest


def test_feature_display_name_known_and_fallback():
    assert admin_repo.feature_display_name("explore_gemini") == "Explore GEMINI"
    assert admin_repo.feature_display_name("custom_feature") == "Custom Feature"


def test_set_feature_toggle_updates_row():
    sb = FakeSupabase()
    admin_repo.set_feature_toggle(feature_name="ai_chatbot", is_enabled=False, sb=sb)
    q = sb.queries("feature_toggles")[0]
    assert q.op("update")[1][0] == {"is_enabled": False}
    assert q.op("eq")[1] == ("feature_name", "ai_chatbot")


def test_update_user_level_clears_expiry_for_non_researcher():
    sb = FakeSupabase()
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    admin_repo.update_user_level(user_id="u1", level=quotas.PREMIUM, level_expires_at="2026-01-01", sb=sb, now=now)
    row = sb.queries("profiles")[0].op("update")[1][0]
    assert row == {"level": "Premium", "level_expires_at": None, "updated_at": now.isoformat()}


def test_update_user_level_keeps_researcher_expiry():
    sb = FakeSupabase()
    admin_repo.update_user_level(user_id="u1", level=quotas.RESEARCHER, level_expires_at="2026-01-01", sb=sb)
    assert sb.queries("profiles")[0].op("update")[1][0]["level_expires_at"] == "2026-01-01"


def test_update_user_level_rejects_unknown_level():
    with pytest.raises(BadRequest):
        admin_repo.update_user_level(user_id="u1", level="Gold", sb=FakeSupabase())


def test_usage_stats_aggregates_and_zero_fills():
    rows = [
        {"usage_date": "2025-03-08", "feature_name": "ai_chatbot", "count": 4, "user_id": "a"},
        {"usage_date": "2025-03-10", "feature_name": "ai_chatbot", "count": 2, "user_id": "b"},
        {"usage_date": "2025-03-10", "feature_name": "ai_chatbot", "count": 1, "user_id": "a"},
        {"usage_date": "2025-03-10", "feature_name": "mind_map_maker", "count": 3, "user_id": "a"},
    ]
    stats = admin_repo.usage_stats(days=3, sb=FakeSupabase(data={"daily_usage": rows}), today=date(2025, 3, 10))

    assert stats["features"] == ["ai_chatbot", "mind_map_maker"]
    assert stats["totals"] == {"ai_chatbot": 7, "mind_map_maker": 3}
    assert stats["users"] == {"ai_chatbot": 2, "mind_map_maker": 1}
    assert [d["date"] for d in stats["series"]] == ["2025-03-08", "2025-03-09", "2025-03-10"]
    assert stats["series"][1] == {"date": "2025-03-09", "ai_chatbot": 0, "mind_map_maker": 0}
    assert stats["today"][0] == {"feature_name": "ai_chatbot", "total_usage": 3, "user_ids": ["b", "a"]}


def test_usage_stats_window_start():
    sb = FakeSupabase()
    admin_repo.usage_stats(days=7, sb=sb, today=date(2025, 3, 10))
    assert sb.queries("daily_usage")[0].op("gte")[1] == ("usage_date", "2025-03-04")


def test_user_quota_table_combines_profiles_and_today_usage():
    sb = FakeSupabase(
        data={
            "profiles": [
                {"id": "free-user", "level": "Free", "level_expires_at": None},
                {"id": "admin", "level": "Administrator", "level_expires_at": None},
            ],
            "rpc:get_today_all_usage": [
                {"user_id": "free-user", "feature_name": "ai_chatbot", "usage_count": 12},
                {"user_id": "free-user", "feature_name": "mind_map_maker", "usage_count": 2},
            ],
        }
    )
    table = admin_repo.user_quota_table(sb=sb)
    free = table["free-user"]["quotas"]
    assert free["ai_chatbot"] == {"limit": 10, "used": 12, "remaining": 0}
    assert free["mind_map_maker"] == {"limit": 5, "used": 2, "remaining": 3}
    assert free["medical_calculator"]["limit"] is None
    assert table["admin"]["quotas"]["ai_chatbot"]["remaining"] is None


def test_reset_user_quota_rpc():
    sb = FakeSupabase()
    admin_repo.reset_user_quota(user_id="u1", sb=sb)
    assert sb.rpc_calls("reset_user_quota_manual")[0].params == {"user_id_param": "u1"}


def test_countdown_to_utc_midnight():
    now = datetime(2025, 3, 10, 22, 30, 15, tzinfo=timezone.utc)
    secs = admin_repo.seconds_until_utc_midnight(now)
    assert secs == 5385
    assert admin_repo.format_countdown(secs) == "01:29:45"
    assert admin_repo.format_countdown(-5) == "00:00:00"
