# src/utils/supabase_utils.py
"""
Secrets helper + Supabase client creator.

Resolution order for secrets:
1) st.secrets (Streamlit Cloud / local .streamlit/secrets.toml)
2) Environment variables (.env, Doppler CLI, GH Actions, Docker)

Aliases supported:
- SUPABASE_URL  or SUPABASE__URL
- SUPABASE_SERVICE_KEY  or SUPABASE_SERVICE_ROLE_KEY  or SUPABASE__SUPABASE_SERVICE_KEY  or SUPABASE_KEY
- SUPABASE_ANON_KEY  or SUPABASE__ANON_KEY
- GEMINI_API_KEY     or GEMINI__API_KEY
- DEEPSEEK_API_KEY   or DEEPSEEK__API_KEY
"""

from __future__ import annotations

import os
import streamlit as st
from dotenv import load_dotenv
from supabase import create_client, Client

from utils.errors import ConfigError

# Make local .env work
load_dotenv()

SUPABASE_URL_NAMES = ("SUPABASE_URL", "SUPABASE__URL")
SUPABASE_KEY_NAMES = (
    "SUPABASE_SERVICE_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE__SUPABASE_SERVICE_KEY",
    "SUPABASE_KEY",
)

_TRUTHY = ("1", "true", "yes", "y", "on")


def sget(*names: str) -> str | None:
    """
    Return the first non-empty value among names,
    checking Streamlit secrets first, then environment.
    """
    for n in names:
        try:
            if n in st.secrets:
                v = st.secrets[n]
                if v:
                    return str(v)
        except Exception:
            # no secrets.toml at all (plain python / uvicorn): env only
            pass
        v = os.getenv(n)
        if v:
            return v
    return None


def sflag(*names: str, default: bool = False) -> bool:
    v = sget(*names)
    if v is None:
        return default
    return v.strip().lower() in _TRUTHY


def _missing_msg(missing: list[str]) -> str:
    return (
        "Missing required secrets: "
        + ", ".join(missing)
        + "\nAdd them in Streamlit Cloud → Settings → Secrets (TOML) or export as env vars.\n"
        "Aliases supported for Supabase: SUPABASE__URL, SUPABASE__SUPABASE_SERVICE_KEY."
    )


def _require(value: str | None, name: str, required: bool) -> str | None:
    if required and not value:
        raise ConfigError(_missing_msg([name]))
    return value


@st.cache_resource(show_spinner=False)
def get_supabase_client() -> Client:
    """Create a cached Supabase client (service role, shared by all sessions)."""
    url = sget(*SUPABASE_URL_NAMES)
    key = sget(*SUPABASE_KEY_NAMES)

    missing = []
    if not url:
        missing.append("SUPABASE_URL")
    if not key:
        missing.append("SUPABASE_SERVICE_KEY")
    if missing:
        raise ConfigError(_missing_msg(missing))

    return create_client(url, key)


def create_auth_client() -> Client:
    """
    Fresh, uncached client for auth calls (sign in / sign up / password).
    Auth calls store the user session on the client, so it must not be shared.
    """
    url = sget(*SUPABASE_URL_NAMES)
    key = sget("SUPABASE_ANON_KEY", "SUPABASE__ANON_KEY") or sget(*SUPABASE_KEY_NAMES)
    missing = []
    if not url:
        missing.append("SUPABASE_URL")
    if not key:
        missing.append("SUPABASE_ANON_KEY")
    if missing:
        raise ConfigError(_missing_msg(missing))
    return create_client(url, key)


# --- LLM API keys -------------------------------------------------------------

def get_gemini_api_key(required: bool = True) -> str | None:
    """Returns Gemini key from secrets/env; raises if required and missing."""
    return _require(sget("GEMINI_API_KEY", "GEMINI__API_KEY", "GOOGLE_API_KEY"), "GEMINI_API_KEY", required)


def get_deepseek_api_key(required: bool = True) -> str | None:
    """Returns DeepSeek key from secrets/env; raises if required and missing."""
    return _require(sget("DEEPSEEK_API_KEY", "DEEPSEEK__API_KEY"), "DEEPSEEK_API_KEY", required)


# --- Medical data APIs ---------------------------------------------------------

def get_ncbi_api_key() -> str | None:
    # E-utilities work without a key, just with a lower rate limit
    return sget("NCBI_API_KEY", "PUBMED_API_KEY")


def get_usda_api_key() -> str:
    return sget("USDA_FDC_API_KEY", "USDA_API_KEY") or "DEMO_KEY"


# --- Payments / CAPTCHA ----------------------------------------------------------

def get_midtrans_server_key(required: bool = True) -> str | None:
    return _require(sget("MIDTRANS_SERVER_KEY", "MIDTRANS__SERVER_KEY"), "MIDTRANS_SERVER_KEY", required)


def midtrans_is_production() -> bool:
    return sflag("MIDTRANS_IS_PRODUCTION")


def payments_enabled() -> bool:
    return sflag("PAYMENTS_ENABLED")


def get_turnstile_secret(required: bool = True) -> str | None:
    return _require(sget("TURNSTILE_SECRET_KEY", "TURNSTILE__SECRET_KEY"), "TURNSTILE_SECRET_KEY", required)


def get_site_url() -> str:
    return (sget("SITE_URL", "PUBLIC_SITE_URL") or "http://localhost:8501").rstrip("/")


def integration_status() -> dict[str, str]:
    """Which integrations are configured (never returns the values)."""
    def state(*names: str) -> str:
        return "ok" if sget(*names) else "missing"

    return {
        "supabase": "ok" if sget(*SUPABASE_URL_NAMES) and sget(*SUPABASE_KEY_NAMES) else "missing",
        "gemini": state("GEMINI_API_KEY", "GEMINI__API_KEY", "GOOGLE_API_KEY"),
        "deepseek": state("DEEPSEEK_API_KEY", "DEEPSEEK__API_KEY"),
        "ncbi": state("NCBI_API_KEY", "PUBMED_API_KEY"),
        "usda_fdc": state("USDA_FDC_API_KEY", "USDA_API_KEY"),
        "midtrans": state("MIDTRANS_SERVER_KEY", "MIDTRANS__SERVER_KEY"),
        "turnstile": state("TURNSTILE_SECRET_KEY", "TURNSTILE__SECRET_KEY"),
    }
