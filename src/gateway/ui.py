# gateway/ui.py
from __future__ import annotations
import streamlit as st
from contextlib import contextmanager

# Badge colours for where a drug-reference section came from
SOURCE_BADGES = {
    "fda": ("FDA", "#2563EB"),
    "ai": ("AI", "#7C3AED"),
    "unavailable": ("N/A", "#94A3B8"),
}


def inject_styles() -> None:
    """Base styles shared by all pages (cards, badges, sidebar)."""
    st.markdown(
        """
        <style>
          /* Card header/subtitle (the box is provided by st.container(border=True)) */
          .mt-card-header { font-weight: 700; margin: .15rem 0 .35rem; }
          .mt-card-sub { color: var(--mt-muted); font-size:.95rem; margin-top:-.2rem; margin-bottom:.35rem; }

          /* Source badges on drug sections */
          .mt-badge {
            display:inline-block; padding:.05rem .45rem; border-radius:999px;
            font-size:.72rem; font-weight:700; color:#fff; margin-left:.35rem; vertical-align:middle;
          }

          /* Sidebar user box */
          [data-testid="stSidebar"] { padding-top: .8rem; }
          .mt-user { font-size:.85rem; color: var(--mt-muted); margin-bottom:.5rem; }
          .mt-user b { color: var(--mt-text); }
        </style>
        """,
        unsafe_allow_html=True,
    )


@contextmanager
def card(title: str, subtitle: str | None = None, *, border: bool = True):
    """
    Consistent panel used across pages.
    Uses Streamlit's bordered container to avoid stray empty <div>s.
    """
    with st.container(border=border):
        st.markdown(f'<div class="mt-card-header">{title}</div>', unsafe_allow_html=True)
        if subtitle:
            st.markdown(f'<div class="mt-card-sub">{subtitle}</div>', unsafe_allow_html=True)
        yield


def source_badge(source: str | None) -> str:
    label, colour = SOURCE_BADGES.get(source or "unavailable", SOURCE_BADGES["unavailable"])
    return f'<span class="mt-badge" style="background:{colour}">{label}</span>'


def render_user_box(user) -> None:
    """Signed-in email + level at the top of the sidebar."""
    with st.sidebar:
        if user is None:
            st.markdown('<div class="mt-user">Not signed in</div>', unsafe_allow_html=True)
        else:
            st.markdown(
                f'<div class="mt-user"><b>{user.email or user.user_id}</b><br/>Level: {user.level}</div>',
                unsafe_allow_html=True,
            )
