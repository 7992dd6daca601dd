# src/utils/session.py
"""
Streamlit-side session helpers: who is signed in, page protection, and the
quota gate wrapped around a tool action.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import streamlit as st

from utils import quotas
from utils.auth_service import AuthSession, resolve_level
from utils.errors import ServiceError
from utils.feature_access import AccessResult, check_access, increment_usage, is_feature_enabled
from utils.logging_config import get_logger

logger = get_logger(__name__)

SESSION_KEY = "auth_session"


def current_user() -> Optional[AuthSession]:
    return st.session_state.get(SESSION_KEY)


def set_current_user(session: Optional[AuthSession]) -> None:
    if session is None:
        st.session_state.pop(SESSION_KEY, None)
    else:
        st.session_state[SESSION_KEY] = session


def refresh_level() -> Optional[AuthSession]:
    """Re-read the level from profiles (after an upgrade or an admin change)."""
    user = current_user()
    if user is None:
        return None
    level, expires = resolve_level(user.user_id)
    user = user.model_copy(update={"level": level, "level_expires_at": expires})
    set_current_user(user)
    return user


def require_login(required_level: Optional[str] = None) -> AuthSession:
    """Stop the page unless someone is signed in with at least `required_level`."""
    user = current_user()
    if user is None:
        st.warning("Please sign in to use this page.")
        st.page_link("pages/1_auth_login.py", label="Sign in", icon="🔑")
        st.stop()
    if required_level and not quotas.has_required_level(user.level, required_level):
        st.error(f"Insufficient level: this page requires {required_level} (you are {user.level}).")
        st.stop()
    return user


def gate_feature(feature: str, user: Optional[AuthSession] = None) -> AccessResult:
    """Toggle + quota check; shows the denial message. Does not count usage."""
    user = user or current_user()
    if not is_feature_enabled(feature):
        result = AccessResult(allowed=False, remaining=0, message="This feature is currently disabled.")
    else:
        result = check_access(
            getattr(user, "user_id", None),
            feature,
            getattr(user, "level", None),
        )
    if not result.allowed:
        st.warning(result.message or "Access denied.")
    return result


def run_gated(feature: str, action: Callable[[], Any], user: Optional[AuthSession] = None) -> Any:
    """
    Check access, run `action`, then count one use.
    Returns the action's result, or None when access was denied or the
    action raised a ServiceError (shown with st.error).
    """
    user = user or current_user()
    access = gate_feature(feature, user)
    if not access.allowed:
        return None
    try:
        result = action()
    except ServiceError as e:
        st.error(str(e))
        return None

    counted = increment_usage(getattr(user, "user_id", None), feature)
    if not counted.get("ok"):
        st.caption(counted.get("error", "Usage was not recorded."))
    elif access.remaining is not None:
        st.caption(f"Remaining today: {max(0, access.remaining - 1)}")
    return result
