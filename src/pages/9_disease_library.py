import streamlit as st

from agents.disease.agent import disease_details, summarize_disease
from gateway.theme import page_header
from utils.session import require_login, run_gated

FEATURE = "disease_library"


def run_disease_library():
    page_header("Disease Library", "Ringkasan dan gambaran klinis terstruktur (Bahasa Indonesia).")
    user = require_login()

    query = st.text_input("Condition", placeholder="e.g. Demam berdarah dengue")
    if st.button("Search", disabled=not query.strip()):
        with st.spinner("Summarising..."):
            res = run_gated(FEATURE, lambda: summarize_disease(query), user)
        if res:
            st.session_state["disease"] = {"name": query.strip(), "summary": res["summary"], "details": None}

    disease = st.session_state.get("disease")
    if not disease:
        return

    st.subheader(disease["name"])
    st.write(disease["summary"])

    # the overview is a second model call and counts as its own use
    if disease["details"] is None and st.button("Show full clinical overview"):
        with st.spinner("Writing the overview..."):
            res = run_gated(FEATURE, lambda: disease_details(disease["name"]), user)
        if res is not None:
            disease["details"] = res["details"]
    if disease["details"] is not None:
        st.markdown(disease["details"] or "_No details were returned._")
    st.caption("Informasi ini hanya untuk pengetahuan umum; konsultasikan dengan profesional kesehatan.")


run_disease_library()
