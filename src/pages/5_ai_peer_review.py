import base64

import streamlit as st

from agents.chat.agent import explore_gemini
from gateway.theme import page_header
from gateway.ui import card
from tools.medical_schema import ExploreGeminiRequest, ImageData
from utils.session import require_login, run_gated

FEATURE = "ai_peer_review"
INSTRUCTION_ID = "manuscript-peer-review-assistant"


def run_peer_review():
    page_header("AI Peer-Review", "A structured first-pass review of a manuscript. The final judgment stays with you.")
    user = require_login()

    with card("Manuscript", "Paste the text, or upload a PDF / image of the pages."):
        text = st.text_area("Manuscript text", height=260)
        upload = st.file_uploader("Or upload a file", type=["pdf", "png", "jpg", "jpeg"])
        focus = st.text_input("Anything specific to check? (optional)",
                              placeholder="e.g. statistics in the results section")

    if not st.button("Review", disabled=not (text.strip() or upload)):
        return

    prompt = "Please review the following manuscript."
    if focus.strip():
        prompt += f" Pay particular attention to: {focus.strip()}."
    if text.strip():
        prompt += f"\n\n{text.strip()}"

    image = None
    if upload is not None:
        image = ImageData(mime_type=upload.type, data=base64.b64encode(upload.getvalue()).decode("ascii"))

    req = ExploreGeminiRequest(
        prompt=prompt,
        image_data=image,
        model_name="gemini-2.0-flash",
        system_instruction_id=INSTRUCTION_ID,
    )
    with st.spinner("Reviewing..."):
        result = run_gated(FEATURE, lambda: explore_gemini(req), user)
    if result:
        st.markdown(result["responseText"])


run_peer_review()
