# src/tools/pubmed.py
"""PubMed clinical-guideline search over NCBI E-utilities (esearch -> esummary)."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from tools.medical_schema import GuidelineResult
from utils.errors import BadRequest, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_ncbi_api_key

logger = get_logger(__name__)

ESEARCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esearch.fcgi"
ESUMMARY_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/esummary.fcgi"
RESULTS_PER_PAGE = 30
DATE_FILTERS = {"5years": 5, "10years": 10, "none": None}
SORTS = {"relevance": "relevance", "pub_date_newest": "pub+date"}


def _years_back(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:  # Feb 29
        return today.replace(year=today.year - years, day=28)


def build_term(keywords: str, date_filter: str = "none", free_full_text: bool = False,
               today: Optional[date] = None) -> str:
    term = f"{keywords} AND (Guideline[ptyp] OR Practice Guideline[ptyp])"
    years = DATE_FILTERS.get(date_filter)
    if years:
        start = _years_back(today or date.today(), years)
        term += f" AND ({start.strftime('%Y/%m/%d')}:3000/12/31[dp])"
    if free_full_text:
        term += " AND free full text[filter]"
    return term


def _parse(xml_text: str) -> ET.Element:
    try:
        return ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise UpstreamError("Failed to parse PubMed XML response.") from e


def parse_esearch(xml_text: str) -> tuple[int, List[str]]:
    root = _parse(xml_text)
    count = int((root.findtext("Count") or "0").strip() or 0)
    ids = [el.text.strip() for el in root.findall("./IdList/Id") if el.text]
    return count, ids


def parse_esummary(xml_text: str) -> List[GuidelineResult]:
    root = _parse(xml_text)
    results: List[GuidelineResult] = []
    for doc in root.findall("DocSum"):
        pmid = (doc.findtext("Id") or "").strip()
        if not pmid:
            continue
        items = {it.get("Name"): it for it in doc.findall("Item")}

        def text_of(name: str, default: str) -> str:
            el = items.get(name)
            if el is None:
                return default
            return (el.text or "").strip() or default

        pmcid = None
        ids = items.get("ArticleIds")
        if ids is not None:
            for sub in ids.findall("Item"):
                if sub.get("Name") == "pmc" and (sub.text or "").strip():
                    pmcid = sub.text.strip()
                    break

        results.append(
            GuidelineResult(
                pmid=pmid,
                title=text_of("Title", "No Title Available"),
                journal=text_of("Source", "No Journal"),
                pubDate=text_of("PubDate", "No Date"),
                pmcid=pmcid,
                link=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
            )
        )
    return results


def search_guidelines(
    keywords: Optional[str],
    *,
    date_filter: str = "none",
    sort_by: str = "relevance",
    free_full_text_only: bool = False,
    page: Any = 1,
    session=None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    keywords = (keywords or "").strip()
    if not keywords:
        raise BadRequest("Keywords are required.")
    if date_filter not in DATE_FILTERS:
        date_filter = "none"
    try:
        page = max(1, int(page))
    except (TypeError, ValueError):
        page = 1

    http = session or requests
    api_key = get_ncbi_api_key()
    term = build_term(keywords, date_filter, bool(free_full_text_only), today=today)
    params: Dict[str, Any] = {
        "db": "pubmed",
        "term": term,
        "retmax": RESULTS_PER_PAGE,
        "retstart": (page - 1) * RESULTS_PER_PAGE,
        "sort": SORTS.get(sort_by, "relevance"),
        "usehistory": "y",
        "retmode": "xml",
    }
    if api_key:
        params["api_key"] = api_key

    logger.info("pubmed esearch page=%s term=%s", page, term)
    try:
        resp = http.get(ESEARCH_URL, params=params, timeout=20)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise UpstreamError(f"PubMed search failed: {e}") from e

    total, pmids = parse_esearch(resp.text)
    if total == 0 or not pmids:
        return {"totalCount": total, "results": []}

    summary_params: Dict[str, Any] = {"db": "pubmed", "id": ",".join(pmids), "retmode": "xml"}
    if api_key:
        summary_params["api_key"] = api_key
    try:
        resp = http.get(ESUMMARY_URL, params=summary_params, timeout=20)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise UpstreamError(f"PubMed summary failed: {e}") from e

    return {"totalCount": total, "results": [r.model_dump() for r in parse_esummary(resp.text)]}
