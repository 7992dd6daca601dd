from datetime import datetime, timezone

import pytest

from utils import quotas


def test_administrator_is_unlimited_for_every_feature():
    for feature in quotas.FEATURES:
        assert quotas.get_quota_limit(quotas.ADMINISTRATOR, feature) is None


def test_per_level_table_wins_over_defaults():
    assert quotas.get_quota_limit(quotas.FREE, "ai_chatbot") == 10
    assert quotas.get_quota_limit(quotas.PREMIUM, "ai_chatbot") == 30
    assert quotas.get_quota_limit(quotas.RESEARCHER, "ai_chatbot") is None
    assert quotas.get_quota_limit(quotas.RESEARCHER, "explore_gemini") == 50


def test_learning_resources_closed_below_researcher():
    assert quotas.get_quota_limit(quotas.FREE, "learning_resources") == 0
    assert quotas.get_quota_limit(quotas.PREMIUM, "learning_resources") == 0
    assert quotas.get_quota_limit(quotas.RESEARCHER, "learning_resources") is None


def test_default_table_minus_one_means_unlimited():
    assert quotas.get_quota_limit(quotas.FREE, "medical_calculator") is None
    assert quotas.get_quota_limit(quotas.PREMIUM, "mind_map_maker") == 5
    assert quotas.get_quota_limit(quotas.FREE, "explore_deepseek") == 10


def test_unknown_level_is_treated_as_free():
    assert quotas.get_quota_limit("Gold", "ai_peer_review") == quotas.get_quota_limit(quotas.FREE, "ai_peer_review")
    assert quotas.get_quota_limit(None, "ai_peer_review") == 5


def test_unknown_feature_raises():
    with pytest.raises(KeyError):
        quotas.get_quota_limit(quotas.FREE, "teleportation")


def test_expired_researcher_falls_back_to_free():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert quotas.effective_level(quotas.RESEARCHER, "2025-05-31T23:59:59Z", now=now) == quotas.FREE
    assert quotas.effective_level(quotas.RESEARCHER, "2025-06-02T00:00:00+00:00", now=now) == quotas.RESEARCHER
    assert quotas.effective_level(quotas.RESEARCHER, None, now=now) == quotas.RESEARCHER
    # naive timestamps are read as UTC
    assert quotas.effective_level(quotas.RESEARCHER, "2025-05-01T00:00:00", now=now) == quotas.FREE


def test_effective_level_ignores_expiry_for_other_levels():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert quotas.effective_level(quotas.PREMIUM, "2020-01-01T00:00:00Z", now=now) == quotas.PREMIUM
    assert quotas.effective_level(None) == quotas.FREE
    assert quotas.effective_level("") == quotas.FREE


def test_has_required_level_ordering():
    assert quotas.has_required_level(quotas.ADMINISTRATOR, quotas.RESEARCHER)
    assert quotas.has_required_level(quotas.PREMIUM, quotas.PREMIUM)
    assert not quotas.has_required_level(quotas.PREMIUM, quotas.ADMINISTRATOR)
    assert not quotas.has_required_level(None, quotas.FREE)
    assert quotas.has_required_level(None, None)


def test_default_table_only_holds_level_independent_features():
    assert set(quotas.DEFAULT_QUOTAS) == {
        "medical_calculator", "explore_deepseek", "mind_map_maker", "clinical_scoring", "custom_feature",
    }
    assert not set(quotas.DEFAULT_QUOTAS) & set(quotas.LEVEL_QUOTAS)
