import streamlit as st

from gateway.theme import page_header
from gateway.ui import card, source_badge
from tools.openfda import FIELDS_TO_SUPPLEMENT, search_drug
from utils.session import require_login, run_gated

FEATURE = "drug_reference"

SECTION_TITLES = {
    "indications_and_usage": "Indications & Usage",
    "boxed_warning": "Boxed Warning",
    "mechanism_of_action": "Mechanism of Action",
    "contraindications": "Contraindications",
    "dosage_forms_and_strengths": "Dosage Forms & Strengths",
    "adverse_reactions": "Adverse Reactions",
}


def _first_text(values) -> str:
    if not values:
        return ""
    first = values[0]
    return first.get("text", "") if isinstance(first, dict) else str(first)


def run_drug_reference():
    page_header("Drug Reference", "FDA label sections; gaps are filled by AI and marked as such.")
    user = require_login()

    term = st.text_input("Brand or generic name", placeholder="e.g. metformin")
    if st.button("Search", disabled=not term.strip()):
        with st.spinner("Looking up the label..."):
            label = run_gated(FEATURE, lambda: search_drug(term), user)
        if label:
            st.session_state["drug_label"] = label

    label = st.session_state.get("drug_label")
    if not label:
        return

    openfda = label.get("openfda") or {}
    st.subheader(_first_text(openfda.get("brand_name")) or term)
    meta = {
        "Generic name": _first_text(openfda.get("generic_name")),
        "Manufacturer": _first_text(openfda.get("manufacturer_name")),
        "Route": _first_text(openfda.get("route")),
    }
    st.caption(" · ".join(f"{k}: {v}" for k, v in meta.items() if v))

    for field in FIELDS_TO_SUPPLEMENT:
        entry = (label.get(field) or [{}])[0]
        with card(SECTION_TITLES[field] + source_badge(entry.get("source"))):
            st.write(entry.get("text", ""))
    st.caption("AI-generated sections are not from the FDA label; verify before clinical use.")


run_drug_reference()
