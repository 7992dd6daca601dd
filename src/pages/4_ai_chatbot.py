import streamlit as st

from agents.chat.agent import deepseek_chat
from gateway.theme import page_header
from tools.deepseek_client import MODELS
from tools.medical_schema import DeepSeekChatRequest
from utils.session import require_login, run_gated

HISTORY_KEY = "deepseek_history"
# same chat, counted against a different quota
MODES = {"AI Chatbot": "ai_chatbot", "Explore DeepSeek": "explore_deepseek"}


def run_chatbot():
    page_header("AI Chatbot", "Medical Q&A powered by DeepSeek.")
    user = require_login()

    c1, c2, c3 = st.columns([1.2, 1.2, 1])
    with c1:
        mode = st.radio("Mode", list(MODES), horizontal=True)
    with c2:
        model = st.selectbox("Model", MODELS, help="deepseek-reasoner thinks before answering (slower).")
    with c3:
        if st.button("New chat"):
            st.session_state[HISTORY_KEY] = []
            st.rerun()

    history = st.session_state.setdefault(HISTORY_KEY, [])
    for msg in history:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    prompt = st.chat_input("Ask a medical question...")
    if not prompt:
        return

    with st.chat_message("user"):
        st.markdown(prompt)
    pending = [*history, {"role": "user", "content": prompt}]

    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            result = run_gated(
                MODES[mode],
                lambda: deepseek_chat(DeepSeekChatRequest(messages=pending, model=model)),
                user,
            )
        if result is None:
            return
        st.markdown(result["responseText"])

    st.session_state[HISTORY_KEY] = [*pending, {"role": "assistant", "content": result["responseText"]}]


run_chatbot()
