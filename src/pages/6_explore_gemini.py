import base64

import streamlit as st

from agents.chat.agent import EXPLORE_DEFAULT_MODEL, EXPLORE_MODELS, THINKING_MODEL, explore_gemini
from gateway.theme import page_header
from tools.medical_schema import ExploreGeminiRequest
from utils.session import require_login, run_gated

FEATURE = "explore_gemini"
HISTORY_KEY = "gemini_history"  # wire-shape turns: {"role", "parts": [...]}

INSTRUCTIONS = {
    "Default assistant": None,
    "Medical research assistant": "medical-research-assistant",
    "Manuscript peer-review assistant": "manuscript-peer-review-assistant",
    "Custom...": "custom",
}


def _render_turn(turn: dict) -> None:
    role = "assistant" if turn["role"] == "model" else "user"
    with st.chat_message(role):
        for part in turn["parts"]:
            if part.get("text"):
                st.markdown(part["text"])
            inline = part.get("inlineData")
            if inline and str(inline.get("mimeType", "")).startswith("image/"):
                st.image(base64.b64decode(inline["data"]))


def run_explore_gemini():
    page_header("Explore GEMINI", "Chat with Gemini models; attach an image; turn on thinking for 2.5 Flash.")
    user = require_login()

    # ---------------------------------
    # 1. Settings
    # ---------------------------------
    with st.sidebar:
        st.markdown("**Gemini settings**")
        model = st.selectbox("Model", EXPLORE_MODELS, index=EXPLORE_MODELS.index(EXPLORE_DEFAULT_MODEL))
        thinking = st.toggle("Enable thinking", disabled=model != THINKING_MODEL,
                             help="Only available on Gemini 2.5 Flash.")
        choice = st.selectbox("System instruction", list(INSTRUCTIONS))
        custom = st.text_area("Custom instruction") if INSTRUCTIONS[choice] == "custom" else None
        if st.button("Clear conversation"):
            st.session_state[HISTORY_KEY] = []
            st.rerun()

    history = st.session_state.setdefault(HISTORY_KEY, [])
    for turn in history:
        _render_turn(turn)

    # ---------------------------------
    # 2. New turn
    # ---------------------------------
    upload = st.file_uploader("Attach an image (optional)", type=["png", "jpg", "jpeg", "webp"])
    prompt = st.chat_input("Message Gemini...")
    if not prompt:
        return

    parts = [{"text": prompt}]
    if upload is not None:
        parts.append({"inlineData": {"mimeType": upload.type, "data": base64.b64encode(upload.getvalue()).decode("ascii")}})
    turn = {"role": "user", "parts": parts}
    _render_turn(turn)
    pending = [*history, turn]

    instruction_id = INSTRUCTIONS[choice]
    req = ExploreGeminiRequest(
        prompt=prompt,
        history=pending,
        model_name=model,
        system_instruction_id=instruction_id if instruction_id != "custom" else None,
        custom_system_instruction=custom,
        enable_thinking=thinking,
    )
    with st.spinner("Generating..."):
        result = run_gated(FEATURE, lambda: explore_gemini(req), user)
    if result is None:
        return

    reply_parts = [{"text": result["responseText"]}] if result.get("responseText") else []
    if result.get("responseImage"):
        reply_parts.append({"inlineData": result["responseImage"]})
    reply = {"role": "model", "parts": reply_parts}
    _render_turn(reply)
    if result.get("thoughtsGenerated"):
        st.caption("🧠 The model thought before answering.")
    st.session_state[HISTORY_KEY] = [*pending, reply]


run_explore_gemini()
