import pytest

from utils import quotas, session
from utils.auth_service import AuthSession
from utils.errors import UpstreamError
from utils.feature_access import AccessResult


class StopPage(Exception):
    pass


class FakeStreamlit:
    """Records what the session helpers would show on the page."""

    def __init__(self):
        self.session_state = {}
        self.shown = []

    def warning(self, msg):
        self.shown.append(("warning", msg))

    def error(self, msg):
        self.shown.append(("error", msg))

    def caption(self, msg):
        self.shown.append(("caption", msg))

    def page_link(self, *args, **kwargs):
        self.shown.append(("page_link", args[0]))

    def stop(self):
        raise StopPage()


@pytest.fixture
def st(monkeypatch):
    fake = FakeStreamlit()
    monkeypatch.setattr(session, "st", fake)
    return fake


@pytest.fixture
def gate(monkeypatch):
    """Controls the toggle/quota answers and records counted uses."""
    state = {
        "enabled": True,
        "access": AccessResult(allowed=True, remaining=4, quota=5, current_usage=1, level=quotas.FREE),
        "counted": [],
        "count_result": {"ok": True},
    }
    monkeypatch.setattr(session, "is_feature_enabled", lambda feature: state["enabled"])
    monkeypatch.setattr(session, "check_access", lambda user_id, feature, level: state["access"])

    def increment(user_id, feature):
        state["counted"].append((user_id, feature))
        return state["count_result"]

    monkeypatch.setattr(session, "increment_usage", increment)
    return state


USER = AuthSession(user_id="u1", email="a@b.c", level=quotas.FREE)


def test_successful_action_is_counted_once(st, gate):
    assert session.run_gated("ai_chatbot", lambda: "answer", USER) == "answer"
    assert gate["counted"] == [("u1", "ai_chatbot")]
    assert ("caption", "Remaining today: 3") in st.shown


def test_failed_action_is_not_counted(st, gate):
    def fails():
        raise UpstreamError("Gemini API Error: quota")

    assert session.run_gated("ai_chatbot", fails, USER) is None
    assert gate["counted"] == []
    assert ("error", "Gemini API Error: quota") in st.shown


def test_unexpected_errors_propagate(st, gate):
    def breaks():
        raise KeyError("x")

    with pytest.raises(KeyError):
        session.run_gated("ai_chatbot", breaks, USER)
    assert gate["counted"] == []


def test_denied_access_skips_the_action(st, gate):
    gate["access"] = AccessResult(allowed=False, remaining=0, message="Daily quota (10) reached")
    ran = []
    assert session.run_gated("ai_chatbot", lambda: ran.append(1), USER) is None
    assert ran == []
    assert gate["counted"] == []
    assert st.shown == [("warning", "Daily quota (10) reached")]


def test_disabled_feature_is_denied_before_the_quota_check(st, gate, monkeypatch):
    gate["enabled"] = False
    monkeypatch.setattr(session, "check_access", lambda *a: pytest.fail("quota checked for a disabled feature"))
    result = session.gate_feature("ai_chatbot", USER)
    assert not result.allowed
    assert st.shown == [("warning", "This feature is currently disabled.")]


def test_unlimited_access_shows_no_remaining_count(st, gate):
    gate["access"] = AccessResult(allowed=True, remaining=None, level=quotas.RESEARCHER)
    session.run_gated("ai_chatbot", lambda: "ok", USER)
    assert gate["counted"] == [("u1", "ai_chatbot")]
    assert not [m for kind, m in st.shown if kind == "caption"]


def test_unrecorded_usage_is_reported(st, gate):
    gate["count_result"] = {"ok": False, "error": "Failed to record usage of 'ai chatbot'."}
    assert session.run_gated("ai_chatbot", lambda: "ok", USER) == "ok"
    assert ("caption", "Failed to record usage of 'ai chatbot'.") in st.shown


def test_gate_uses_the_signed_in_user(st, gate, monkeypatch):
    seen = []
    monkeypatch.setattr(session, "check_access", lambda user_id, feature, level: seen.append((user_id, level))
                        or gate["access"])
    st.session_state[session.SESSION_KEY] = USER
    session.gate_feature("ai_chatbot")
    assert seen == [("u1", quotas.FREE)]


def test_require_login_stops_anonymous_visitors(st):
    with pytest.raises(StopPage):
        session.require_login()
    assert st.shown[0] == ("warning", "Please sign in to use this page.")


def test_require_login_checks_the_level(st):
    st.session_state[session.SESSION_KEY] = USER
    with pytest.raises(StopPage):
        session.require_login(quotas.ADMINISTRATOR)
    assert st.shown[0][0] == "error"
    assert session.require_login(quotas.FREE) is USER
