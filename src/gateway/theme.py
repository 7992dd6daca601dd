# gateway/theme.py
from __future__ import annotations
import streamlit as st
import os
from gateway.ui import inject_styles as base_styles, render_user_box
from gateway.autostart_api import ensure_fastapi
from utils.session import current_user

# ---- Theme tokens (edit here to restyle the whole app) -----------------------
THEME = {
    "font_family": "Inter, system-ui, -apple-system, Segoe UI, Roboto",
    "bg": "#F5F7FB",            # app background
    "panel": "#FFFFFF",         # card background
    "primary": "#0E7490",       # clinical teal
    "text": "#0F172A",
    "muted": "#64748B",
    "radius": "12px",
    "shadow": "0 4px 18px rgba(2, 6, 23, 0.06)",
}


def _inject_theme_css() -> None:
    """Define global CSS variables + primitives, then load base component styles."""
    st.markdown(
        f"""
        <style>
          :root {{
            --mt-bg: {THEME['bg']};
            --mt-panel: {THEME['panel']};
            --mt-primary: {THEME['primary']};
            --mt-text: {THEME['text']};
            --mt-muted: {THEME['muted']};
            --mt-radius: {THEME['radius']};
            --mt-shadow: {THEME['shadow']};
            --mt-font: {THEME['font_family']};
          }}
          html, body, [data-testid="stAppViewContainer"] {{
            background: var(--mt-bg) !important;
            color: var(--mt-text);
            font-family: var(--mt-font);
          }}
          .stButton > button {{
            background: var(--mt-primary);
            color:#fff; border:0; border-radius: var(--mt-radius);
            padding:.6rem 1rem; font-weight:600;
          }}
          .mt-hero h1 {{
            font-size:3.0rem; line-height:1.05; font-weight:800; letter-spacing:.01em; margin:0;
          }}
          .mt-hero .tagline {{ margin-top:.35rem; font-size:1.05rem; color:var(--mt-muted); }}
          .mt-header h1 {{ font-size:2.0rem; line-height:1.1; font-weight:800; margin:.25rem 0; }}
          .mt-header .tag {{ opacity:.75; margin-top:.15rem; }}
        </style>
        """,
        unsafe_allow_html=True,
    )
    base_styles()


def page_setup() -> dict:
    """Theme + sidebar user box + gateway autostart. Called once per run by the entry script."""
    _inject_theme_css()
    render_user_box(current_user())

    # Auto-start FastAPI (idempotent; cached)
    info = ensure_fastapi()
    if os.getenv("MT_API_SHOW_STATUS", "0").lower() in ("1", "true", "yes"):
        st.sidebar.caption(f"API: {info['status']} → {info['url'] or 'disabled'}")
    return info


def hero(title_html: str, tagline: str, cta_text: str | None = None, cta_page: str | None = None) -> None:
    """Landing hero block (HTML allowed in title_html for line breaks)."""
    st.markdown(
        f'<div class="mt-hero"><h1>{title_html}</h1><div class="tagline">{tagline}</div></div>',
        unsafe_allow_html=True,
    )
    if cta_text and cta_page:
        st.page_link(cta_page, label=cta_text, icon="➡️")


def page_header(title: str, tag: str = "") -> None:
    """Uniform page header for all non-landing pages."""
    st.markdown(
        f'<div class="mt-header"><h1>{title}</h1><div class="tag">{tag}</div></div>',
        unsafe_allow_html=True,
    )
