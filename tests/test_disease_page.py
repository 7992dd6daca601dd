import pytest
from streamlit.testing.v1 import AppTest

from agents.disease import agent as disease_agent
from utils import quotas, session
from utils.auth_service import AuthSession
from utils.feature_access import AccessResult

PAGE = "../src/pages/9_disease_library.py"


@pytest.fixture
def counted(monkeypatch):
    uses = []
    monkeypatch.setattr(session, "is_feature_enabled", lambda feature: True)
    monkeypatch.setattr(
        session, "check_access",
        lambda user_id, feature, level: AccessResult(allowed=True, remaining=5, quota=10, level=level),
    )
    monkeypatch.setattr(session, "increment_usage", lambda user_id, feature: uses.append(feature) or {"ok": True})
    monkeypatch.setattr(disease_agent, "summarize_disease", lambda q: {"summary": f"Ringkasan {q}"})
    monkeypatch.setattr(disease_agent, "disease_details", lambda name: {"details": f"## Etiologi {name}"})
    return uses


def test_clinical_overview_counts_as_a_use(counted):
    at = AppTest.from_file(PAGE, default_timeout=30)
    at.session_state[session.SESSION_KEY] = AuthSession(user_id="u1", level=quotas.FREE)
    at.run()

    at.text_input[0].input("Dengue").run()
    at.button[0].click().run()
    assert counted == ["disease_library"]

    overview = next(b for b in at.button if b.label == "Show full clinical overview")
    overview.click().run()

    assert counted == ["disease_library", "disease_library"]
    assert any("Etiologi Dengue" in m.value for m in at.markdown)
    at.run()
    assert not [b for b in at.button if b.label == "Show full clinical overview"]
