# src/utils/feature_access.py
"""
Quota gate: decides whether a user may run a tool right now.

check_access() compares the user's daily counter (Supabase RPC
`get_user_level_and_usage`) against utils.quotas; increment_usage() bumps
the counter through RPC `increment_usage` after a successful action.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel

from utils import quotas
from utils.logging_config import get_logger
from utils.supabase_utils import get_supabase_client

logger = get_logger(__name__)


class AccessResult(BaseModel):
    allowed: bool
    remaining: Optional[int] = None  # None = unlimited
    message: Optional[str] = None
    quota: Optional[int] = None
    current_usage: int = 0
    level: Optional[str] = None


def _denied(message: str, level: Optional[str] = None, usage: int = 0) -> AccessResult:
    return AccessResult(allowed=False, remaining=0, message=message, quota=0, current_usage=usage, level=level)


def _fetch_usage(sb, user_id: str, feature: str) -> Dict[str, Any]:
    res = sb.rpc(
        "get_user_level_and_usage",
        {"user_id_param": user_id, "feature_name_param": feature},
    ).execute()
    rows = getattr(res, "data", None) or []
    if isinstance(rows, dict):
        return rows
    return rows[0] if rows else {}


def _level_expiry(sb, user_id: str) -> Optional[str]:
    # the usage RPC reports the raw level only; the expiry lives on the profile
    res = sb.table("profiles").select("level_expires_at").eq("id", user_id).limit(1).execute()
    rows = getattr(res, "data", None) or []
    return rows[0].get("level_expires_at") if rows else None


def check_access(user_id: Optional[str], feature: str, level: Optional[str], *, sb=None) -> AccessResult:
    if not user_id or not level:
        return _denied("Authentication required.")

    if not quotas.is_known_feature(feature):
        logger.error("quota check for unknown feature %r", feature)
        return _denied("Feature configuration error.")

    words = quotas.feature_words(feature)
    quota = quotas.get_quota_limit(level, feature)

    if quota == 0:
        if level in (quotas.FREE, quotas.PREMIUM):
            msg = f"The '{words}' feature requires the Researcher level."
        else:
            msg = f"You do not have access to '{words}'."
        return _denied(msg, level=level)

    if quota is None:
        return AccessResult(allowed=True, remaining=None, quota=None, current_usage=0, level=level)

    sb = sb or get_supabase_client()
    try:
        row = _fetch_usage(sb, user_id, feature)
        db_level = row.get("user_level") or level
        if db_level == quotas.RESEARCHER:
            expires = row["level_expires_at"] if "level_expires_at" in row else _level_expiry(sb, user_id)
            db_level = quotas.effective_level(db_level, expires)
    except Exception:
        logger.exception("get_user_level_and_usage failed for feature=%s", feature)
        return _denied("Failed to check usage quota.")

    usage = int(row.get("usage_count") or 0)
    if db_level != level:
        logger.info("level mismatch for user %s: session=%s db=%s", user_id, level, db_level)

    quota = quotas.get_quota_limit(db_level, feature)
    if quota == 0:
        return _denied(f"The '{words}' feature requires a higher level.", level=db_level, usage=usage)
    if quota is None:
        return AccessResult(allowed=True, remaining=None, quota=None, current_usage=usage, level=db_level)

    if usage >= quota:
        return AccessResult(
            allowed=False,
            remaining=0,
            message=(
                f"Daily quota ({quota}) for '{words}' has been reached. "
                "Upgrade for more usage or try again tomorrow."
            ),
            quota=quota,
            current_usage=usage,
            level=db_level,
        )
    return AccessResult(allowed=True, remaining=quota - usage, quota=quota, current_usage=usage, level=db_level)


def increment_usage(user_id: Optional[str], feature: str, *, sb=None) -> Dict[str, Any]:
    """Record one use of `feature`. Never raises into the UI."""
    if not user_id:
        return {"ok": False, "error": "not-authenticated"}
    sb = sb or get_supabase_client()
    try:
        sb.rpc("increment_usage", {"user_id_param": user_id, "feature_name_param": feature}).execute()
    except Exception as e:
        logger.warning("increment_usage failed for feature=%s: %s", feature, e)
        return {"ok": False, "error": f"Failed to record usage of '{quotas.feature_words(feature)}'."}
    return {"ok": True}


def is_feature_enabled(feature: str, *, sb=None) -> bool:
    """feature_toggles row decides; no row means enabled."""
    sb = sb or get_supabase_client()
    res = (
        sb.table("feature_toggles")
        .select("is_enabled")
        .eq("feature_name", feature)
        .limit(1)
        .execute()
    )
    rows = getattr(res, "data", None) or []
    if not rows:
        return True
    return bool(rows[0].get("is_enabled", True))
