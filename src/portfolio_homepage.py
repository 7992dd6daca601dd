# src/portfolio_homepage.py
import os, sys, asyncio
import requests
import streamlit as st

# --- Windows async policy (keep) ---
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from utils.logging_config import get_logger, setup_logging

setup_logging()
logger = get_logger("medtools.app")

# Doppler names some secrets differently; copy them onto the names the app reads
SECRET_ALIASES = {
    "SUPABASE__URL": "SUPABASE_URL",
    "SUPABASE__SUPABASE_SERVICE_KEY": "SUPABASE_SERVICE_KEY",
    "SUPABASE_SERVICE_ROLE_KEY": "SUPABASE_SERVICE_KEY",
    "SUPABASE__ANON_KEY": "SUPABASE_ANON_KEY",
    "GEMINI__API_KEY": "GEMINI_API_KEY",
    "GOOGLE_API_KEY": "GEMINI_API_KEY",
    "DEEPSEEK__API_KEY": "DEEPSEEK_API_KEY",
    "MIDTRANS__SERVER_KEY": "MIDTRANS_SERVER_KEY",
    "TURNSTILE__SECRET_KEY": "TURNSTILE_SECRET_KEY",
}


def _secret(name: str):
    try:
        return st.secrets.get(name)
    except FileNotFoundError:
        return None


# --- Doppler bootstrap (only when the token is in Streamlit secrets) ---
def doppler_bootstrap() -> int:
    DT = _secret("DOPPLER_TOKEN")
    DP = _secret("DOPPLER_PROJECT")
    DC = _secret("DOPPLER_CONFIG")
    if not (DT and DP and DC):
        return 0
    r = requests.get(
        "https://api.doppler.com/v3/configs/config/secrets",
        params={"project": DP, "config": DC},
        headers={"Authorization": f"Bearer {DT}"},
        timeout=10,
    )
    r.raise_for_status()
    exported = 0
    for k, v in r.json().get("secrets", {}).items():
        val = v.get("computed") if isinstance(v, dict) else v
        if not val:
            continue
        for name in (k, SECRET_ALIASES.get(k)):
            if name and not os.getenv(name):
                os.environ[name] = str(val)
                exported += 1
    return exported


@st.cache_resource(show_spinner=False)
def _bootstrap_once() -> int:
    try:
        n = doppler_bootstrap()
    except requests.RequestException as e:
        logger.warning("Doppler bootstrap failed, using local secrets: %s", e)
        return 0
    if n:
        logger.info("exported %d secrets from Doppler", n)
    return n


_bootstrap_once()

# --- Page config: keep only here ---
st.set_page_config(page_title="MedTools: clinical AI workspace", page_icon="🩺", layout="wide")

from gateway.menu import MENU
from gateway.theme import hero, page_setup
from utils import quotas
from utils.news_repo import list_latest_news
from utils.nucleus_repo import latest_posts
from utils.session import current_user

page_setup()

TOOL_PREVIEWS = [
    ("🧠 AI Mind Map", "Turn a medical topic into a summary and a concept map.", "pages/3_mindmap.py"),
    ("💊 Drug Reference", "FDA labels, with AI filling sections the label leaves out.", "pages/7_drug_reference.py"),
    ("⚠️ Interaction Checker", "Screen a drug list against label interaction text.", "pages/8_interaction_checker.py"),
    ("📑 Clinical Guidelines", "Search PubMed practice guidelines.", "pages/10_clinical_guidelines.py"),
    ("🧮 Scoring Hub", "CHA₂DS₂-VASc, CURB-65, GCS, MELD, Wells.", "pages/12_clinical_scores.py"),
    ("✨ Explore GEMINI", "Multimodal chat with optional thinking.", "pages/6_explore_gemini.py"),
]


def landing():
    # ===== Hero =====
    hero(
        "MedTools",
        "AI assistants, drug and guideline lookups, and bedside calculators in one place.",
        cta_text="Sign in to get started" if current_user() is None else None,
        cta_page="pages/1_auth_login.py",
    )
    st.divider()

    # ===== Tool previews =====
    st.markdown("## Tools")
    cols = st.columns(3)
    for i, (title, blurb, path) in enumerate(TOOL_PREVIEWS):
        with cols[i % 3]:
            with st.container(border=True):
                st.markdown(f"#### {title}")
                st.write(blurb)
                st.page_link(path, label="Open", icon="➡️")

    st.divider()
    left, right = st.columns([1.2, 1])

    # ===== Latest news =====
    with left:
        st.markdown("## Latest medical news")
        try:
            items = list_latest_news(limit=8)
        except Exception as e:
            logger.warning("news list failed: %s", e)
            items = []
            st.caption("News is unavailable right now.")
        for item in items:
            st.markdown(f"**[{item.get('title')}]({item.get('link')})**  \n"
                        f"<small>{item.get('source', '')} · {(item.get('pub_date') or '')[:10]}</small>",
                        unsafe_allow_html=True)
            if item.get("content_snippet"):
                st.caption(item["content_snippet"])

    # ===== Latest Nucleus posts =====
    with right:
        st.markdown("## From Nucleus")
        try:
            posts = latest_posts(limit=5)
        except Exception as e:
            logger.warning("nucleus list failed: %s", e)
            posts = []
            st.caption("Nucleus posts are unavailable right now.")
        for post in posts:
            with st.container(border=True):
                st.markdown(f"**{post.get('title')}**")
                if post.get("summary"):
                    st.caption(post["summary"])
                if st.button("Read", key=f"post-{post.get('slug')}"):
                    st.session_state["nucleus_slug"] = post.get("slug")
                    st.switch_page("pages/14_nucleus_archive.py")


# ---- Pages / Nav --------------------------------------------------------------
def build_navigation():
    user = current_user()
    level = getattr(user, "level", None)
    sections = {"Home": [st.Page(landing, title="Home", icon="🏠", default=True)]}
    for section in MENU:
        pages = [
            st.Page(p["path"], title=p["label"], icon=p.get("icon"))
            for p in section["pages"]
            if quotas.has_required_level(level, p.get("level"))
        ]
        if pages:
            sections[section["section"]] = pages
    return st.navigation(sections, position="sidebar")


nav = build_navigation()
nav.run()
