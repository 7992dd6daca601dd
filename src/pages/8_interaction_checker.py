import streamlit as st

from agents.chat.agent import summarize_interactions
from gateway.theme import page_header
from tools.openfda import check_interactions
from utils.errors import ServiceError
from utils.session import require_login, run_gated

FEATURE = "interaction_checker"


def run_interaction_checker():
    page_header("Drug Interaction Checker", "Finds label interaction text that mentions another drug in your list.")
    user = require_login()

    raw = st.text_area("Drugs (one per line or comma separated)", placeholder="warfarin\naspirin\nomeprazole")
    drugs = [d.strip() for chunk in raw.splitlines() for d in chunk.split(",") if d.strip()]

    if st.button("Check interactions", disabled=len(drugs) < 2):
        with st.spinner("Checking labels..."):
            result = run_gated(FEATURE, lambda: check_interactions(drugs), user)
        if result is not None:
            st.session_state["interactions"] = result["interactions"]
            st.session_state.pop("interaction_summary", None)

    found = st.session_state.get("interactions")
    if found is None:
        return
    if not found:
        st.success("No interactions found in the labels for these drugs. Absence of evidence is not evidence of safety.")
        return

    st.warning(f"{len(found)} potential interaction(s) found.")
    for item in found:
        with st.expander(" + ".join(item["pair"]) + f" · severity: {item['severity']}"):
            st.write(item["description"])

    # ---------------------------------
    # AI summary of the label excerpts
    # ---------------------------------
    if st.button("Summarise with AI"):
        text = "\n\n".join(f"{' + '.join(i['pair'])}: {i['description']}" for i in found)
        try:
            with st.spinner("Summarising..."):
                st.session_state["interaction_summary"] = summarize_interactions(text)
        except ServiceError as e:
            st.error(str(e))
    if st.session_state.get("interaction_summary"):
        st.markdown(st.session_state["interaction_summary"])


run_interaction_checker()
