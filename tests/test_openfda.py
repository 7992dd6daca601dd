import pytest
import requests
from conftest import FakeResponse, FakeSession

from tools import openfda
from utils.errors import BadRequest, NotFound, UpstreamError

LABEL = {
    "openfda": {"brand_name": ["Coumadin"], "generic_name": ["WARFARIN SODIUM"], "rxcui": ["855332"]},
    "indications_and_usage": ["Prophylaxis of venous thrombosis."],
    "boxed_warning": ["Bleeding risk."],
    "mechanism_of_action": [""],
}


def test_search_requires_term():
    with pytest.raises(BadRequest, match="Missing search term"):
        openfda.search_drug("  ")


def test_search_tags_sources_without_ai():
    session = FakeSession(FakeResponse(200, {"results": [LABEL]}))
    label = openfda.search_drug("coumadin", session=session, use_ai=False)

    assert label["indications_and_usage"] == [{"text": "Prophylaxis of venous thrombosis.", "source": "fda"}]
    assert label["mechanism_of_action"] == [{"text": "Information not available from FDA.", "source": "unavailable"}]
    assert label["openfda"]["brand_name"] == [{"text": "Coumadin", "source": "fda"}]
    url = session.calls[0][1]
    assert 'openfda.brand_name:"coumadin"+openfda.generic_name:"coumadin"&limit=1' in url


def test_search_fills_gaps_with_ai(monkeypatch):
    asked = []

    def fake_supplement(drug, field):
        asked.append((drug, field))
        return None if field == "adverse_reactions" else f"AI {field}"

    monkeypatch.setattr(openfda, "ai_supplement", fake_supplement)
    session = FakeSession(FakeResponse(200, {"results": [LABEL]}))
    label = openfda.search_drug("coumadin", session=session, use_ai=True)

    assert ("Coumadin", "mechanism_of_action") in asked
    assert ("Coumadin", "indications_and_usage") not in asked
    assert label["mechanism_of_action"] == [{"text": "AI mechanism_of_action", "source": "ai"}]
    assert label["adverse_reactions"][0]["source"] == "unavailable"


def test_search_404_is_not_found():
    with pytest.raises(NotFound, match="No results found"):
        openfda.search_drug("zzz", session=FakeSession(FakeResponse(404, {"error": {"message": "No matches"}})))


def test_search_upstream_error_message():
    session = FakeSession(FakeResponse(500, {"error": {"message": "Server busy"}}))
    with pytest.raises(UpstreamError, match="OpenFDA API Error: Server busy"):
        openfda.search_drug("x", session=session)


def test_escape_lucene():
    assert openfda.escape_lucene('a+b (c)') == r"a\+b\ \(c\)"


@pytest.mark.parametrize("drugs", [None, "aspirin", ["aspirin"], ["aspirin", "  "]])
def test_interaction_needs_two_names(drugs):
    with pytest.raises(BadRequest):
        openfda.clean_drug_list(drugs)


def test_rxcui_lookup_tolerates_failures():
    session = FakeSession(
        FakeResponse(200, {"approximateGroup": {"candidate": [{"rxcui": "11289"}]}}),
        requests.ConnectionError("down"),
        FakeResponse(500),
    )
    assert openfda.get_rxcuis(["warfarin", "aspirin", "x"], session=session) == {
        "warfarin": "11289", "aspirin": None, "x": None,
    }


def test_parse_interactions_finds_pairs_once():
    labels = [
        {
            "openfda": {"rxcui": ["11289"], "generic_name": ["WARFARIN"]},
            "drug_interactions": ["Aspirin increases bleeding risk. Ibuprofen too."],
        },
        {
            "openfda": {"brand_name": ["Bayer"], "generic_name": ["ASPIRIN"]},
            "drug_interactions": ["Warfarin: additive effect."],
        },
        {"openfda": {"generic_name": ["UNRELATED"]}, "drug_interactions": ["aspirin"]},
    ]
    found = openfda.parse_interactions(labels, {"warfarin": "11289", "aspirin": None}, ["warfarin", "aspirin"])
    assert len(found) == 1
    assert found[0].pair == ["aspirin", "warfarin"]
    assert found[0].severity == "Unknown"
    assert "labeling for warfarin" in found[0].description


def test_check_interactions_end_to_end():
    session = FakeSession(
        FakeResponse(200, {"approximateGroup": {"candidate": [{"rxcui": "11289"}]}}),
        FakeResponse(200, {"approximateGroup": {"candidate": []}}),
        FakeResponse(200, {"results": [
            {"openfda": {"rxcui": ["11289"]}, "drug_interactions": ["Avoid with ASPIRIN."]},
        ]}),
    )
    out = openfda.check_interactions(["warfarin", "aspirin"], session=session)
    assert out["interactions"][0]["pair"] == ["aspirin", "warfarin"]
    assert 'openfda.rxcui:"11289"' in session.calls[2][1]


def test_no_labels_means_no_interactions():
    session = FakeSession(FakeResponse(500), FakeResponse(500), FakeResponse(404))
    assert openfda.check_interactions(["a", "b"], session=session) == {"interactions": []}
