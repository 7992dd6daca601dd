from datetime import date

import pytest
from conftest import FakeResponse, FakeSession

from tools import pubmed
from utils.errors import BadRequest, UpstreamError

ESEARCH = """<?xml version="1.0"?>
<eSearchResult><Count>42</Count><RetMax>2</RetMax>
<IdList><Id>111</Id><Id>222</Id></IdList></eSearchResult>"""

ESUMMARY = """<?xml version="1.0"?>
<eSummaryResult>
<DocSum><Id>111</Id>
  <Item Name="PubDate" Type="Date">2023 Mar</Item>
  <Item Name="Source" Type="String">Lancet</Item>
  <Item Name="Title" Type="String">Hypertension guideline</Item>
  <Item Name="ArticleIds" Type="List">
    <Item Name="pubmed" Type="String">111</Item>
    <Item Name="pmc" Type="String">PMC999</Item>
  </Item>
</DocSum>
<DocSum><Id>222</Id>
  <Item Name="Title" Type="String"></Item>
</DocSum>
</eSummaryResult>"""


def test_build_term_filters():
    term = pubmed.build_term("asthma", "5years", True, today=date(2024, 2, 29))
    assert term == (
        "asthma AND (Guideline[ptyp] OR Practice Guideline[ptyp])"
        " AND (2019/02/28:3000/12/31[dp]) AND free full text[filter]"
    )
    assert "[dp]" not in pubmed.build_term("asthma", "none")


def test_parse_esummary_defaults_and_pmc():
    results = pubmed.parse_esummary(ESUMMARY)
    first, second = results
    assert first.title == "Hypertension guideline"
    assert first.journal == "Lancet"
    assert first.pmcid == "PMC999"
    assert first.link == "https://pubmed.ncbi.nlm.nih.gov/111/"
    assert second.title == "No Title Available"
    assert second.journal == "No Journal"
    assert second.pubDate == "No Date"
    assert second.pmcid is None


def test_search_paginates_and_sorts():
    session = FakeSession(FakeResponse(200, text=ESEARCH), FakeResponse(200, text=ESUMMARY))
    out = pubmed.search_guidelines("hypertension", sort_by="pub_date_newest", page="3", session=session)
    assert out["totalCount"] == 42
    assert [r["pmid"] for r in out["results"]] == ["111", "222"]
    params = session.calls[0][2]["params"]
    assert params["retstart"] == 60
    assert params["sort"] == "pub+date"
    assert session.calls[1][2]["params"]["id"] == "111,222"


def test_search_adds_api_key(monkeypatch):
    monkeypatch.setenv("NCBI_API_KEY", "k")
    session = FakeSession(FakeResponse(200, text="<eSearchResult><Count>0</Count><IdList/></eSearchResult>"))
    assert pubmed.search_guidelines("x", session=session) == {"totalCount": 0, "results": []}
    assert session.calls[0][2]["params"]["api_key"] == "k"


def test_search_requires_keywords():
    with pytest.raises(BadRequest):
        pubmed.search_guidelines("  ")


def test_bad_xml_is_upstream_error():
    session = FakeSession(FakeResponse(200, text="<html>oops"))
    with pytest.raises(UpstreamError, match="parse PubMed XML"):
        pubmed.search_guidelines("x", session=session)


def test_http_failure_is_upstream_error():
    with pytest.raises(UpstreamError, match="PubMed search failed"):
        pubmed.search_guidelines("x", session=FakeSession(FakeResponse(503)))
