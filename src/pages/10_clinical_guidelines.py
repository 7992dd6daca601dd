import math

import streamlit as st

from gateway.theme import page_header
from tools.pubmed import RESULTS_PER_PAGE, search_guidelines
from utils.session import require_login, run_gated

FEATURE = "clinical_guidelines"
DATE_LABELS = {"none": "Any time", "5years": "Last 5 years", "10years": "Last 10 years"}
SORT_LABELS = {"relevance": "Relevance", "pub_date_newest": "Newest first"}


def _search(user, page: int) -> None:
    q = st.session_state["guideline_query"]
    res = run_gated(
        FEATURE,
        lambda: search_guidelines(
            q["keywords"],
            date_filter=q["date_filter"],
            sort_by=q["sort_by"],
            free_full_text_only=q["free"],
            page=page,
        ),
        user,
    )
    if res is not None:
        st.session_state["guideline_results"] = {**res, "page": page}


def run_guidelines():
    page_header("Clinical Guidelines", "Practice guidelines from PubMed.")
    user = require_login()

    with st.form("guideline-search"):
        keywords = st.text_input("Keywords", placeholder="e.g. sepsis management")
        c1, c2, c3 = st.columns(3)
        date_filter = c1.selectbox("Published", list(DATE_LABELS), format_func=DATE_LABELS.get)
        sort_by = c2.selectbox("Sort by", list(SORT_LABELS), format_func=SORT_LABELS.get)
        free = c3.checkbox("Free full text only")
        submitted = st.form_submit_button("Search")
    if submitted and keywords.strip():
        st.session_state["guideline_query"] = {
            "keywords": keywords, "date_filter": date_filter, "sort_by": sort_by, "free": free,
        }
        with st.spinner("Searching PubMed..."):
            _search(user, 1)

    res = st.session_state.get("guideline_results")
    if not res:
        return

    total, page = res["totalCount"], res["page"]
    pages = max(1, math.ceil(total / RESULTS_PER_PAGE))
    st.caption(f"{total} guideline(s) · page {page} of {pages}")
    for r in res["results"]:
        with st.container(border=True):
            st.markdown(f"**[{r['title']}]({r['link']})**")
            extra = f" · PMC: {r['pmcid']}" if r.get("pmcid") else ""
            st.caption(f"{r['journal']} · {r['pubDate']} · PMID {r['pmid']}{extra}")

    prev_col, _, next_col = st.columns([1, 4, 1])
    if prev_col.button("← Previous", disabled=page <= 1):
        _search(user, page - 1)
        st.rerun()
    if next_col.button("Next →", disabled=page >= pages):
        _search(user, page + 1)
        st.rerun()


run_guidelines()
