import json

import streamlit as st

from agents.mindmap.agent import generate_mind_map, radial_layout, validate_mind_map
from gateway.theme import page_header
from utils.session import require_login, run_gated

FEATURE = "mind_map_maker"


def to_dot(mind_map: dict) -> str:
    """Graphviz source for the nodes/edges JSON (labels quoted, root highlighted)."""
    def q(s) -> str:
        return '"' + str(s).replace("\\", "\\\\").replace('"', '\\"') + '"'

    lines = ["digraph MindMap {", "  rankdir=LR;", '  node [shape=box, style="rounded,filled", fillcolor="#E0F2FE"];']
    for n in mind_map.get("nodes", []):
        label = (n.get("data") or {}).get("label", n.get("id"))
        extra = ', fillcolor="#0E7490", fontcolor="white"' if n.get("id") == "root" else ""
        lines.append(f"  {q(n.get('id'))} [label={q(label)}{extra}];")
    for e in mind_map.get("edges", []):
        lines.append(f"  {q(e.get('source'))} -> {q(e.get('target'))};")
    lines.append("}")
    return "\n".join(lines)


def run_mindmap():
    page_header("AI Mind Map", "A short summary of a medical topic, then a concept map built from it.")
    user = require_login()

    topic = st.text_input("Medical topic", placeholder="e.g. Type 2 diabetes mellitus")
    if st.button("Generate", disabled=not topic.strip()):
        with st.spinner("Summarising and mapping..."):
            result = run_gated(FEATURE, lambda: generate_mind_map(topic), user)
        if result:
            st.session_state["mindmap_result"] = result

    result = st.session_state.get("mindmap_result")
    if result:
        st.subheader("Summary")
        st.write(result["summary"])
        st.subheader("Mind map")
        if validate_mind_map(result["mindMap"]) is None:
            st.caption("Some nodes or edges came back in an unexpected shape; drawing what is there.")
        st.graphviz_chart(to_dot(result["mindMap"]), use_container_width=True)
        laid_out = radial_layout(result["mindMap"])
        with st.expander("Raw JSON (with radial positions)"):
            st.json(laid_out)
        st.download_button(
            "Download JSON", json.dumps(laid_out, indent=2), file_name="mindmap.json", mime="application/json"
        )


run_mindmap()
