from __future__ import annotations
from typing import Optional, Dict, Any, List
from datetime import date, datetime, timedelta, timezone

from utils import quotas
from utils.errors import BadRequest
from utils.logging_config import get_logger
from utils.supabase_utils import get_supabase_client

logger = get_logger(__name__)

FEATURE_DISPLAY_NAMES = {
    "medical_calculator": "Medical Calculator",
    "drug_reference": "Drug Reference",
    "disease_library": "Disease Library",
    "clinical_guidelines": "Clinical Guidelines",
    "ai_chatbot": "AI Chatbot",
    "ai_peer_review": "AI Peer-Review",
    "explore_gemini": "Explore GEMINI",
    "interaction_checker": "Drug Interaction Checker",
    "mind_map_maker": "AI Mind Map Generator",
    "clinical_scoring": "Clinical Scoring Hub",
    "learning_resources": "Learning Resources",
    "explore_deepseek": "Explore DeepSeek",
    "nutrition_database": "Nutrition Database",
}

# features shown in the per-user quota table
QUOTA_TABLE_FEATURES = [
    "ai_chatbot", "ai_peer_review", "disease_library", "drug_reference",
    "clinical_guidelines", "interaction_checker", "explore_gemini",
    "medical_calculator", "nutrition_database", "learning_resources",
    "mind_map_maker", "clinical_scoring", "explore_deepseek",
]


def feature_display_name(feature: str) -> str:
    if feature in FEATURE_DISPLAY_NAMES:
        return FEATURE_DISPLAY_NAMES[feature]
    return " ".join(w[:1].upper() + w[1:] for w in feature.replace("_", " ").split(" "))


def _now() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------
# Feature toggles
# -----------------------------
def list_feature_toggles(*, sb=None) -> List[Dict[str, Any]]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("feature_toggles")
        .select("feature_name, is_enabled, description")
        .order("feature_name")
        .execute()
    )
    return getattr(res, "data", []) or []


def set_feature_toggle(*, feature_name: str, is_enabled: bool, sb=None) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("feature_toggles")
        .update({"is_enabled": bool(is_enabled)})
        .eq("feature_name", feature_name)
        .execute()
    )
    logger.info("feature toggle %s -> %s", feature_name, is_enabled)
    return {"ok": True, "updated": getattr(res, "data", [])}


# -----------------------------
# Users / levels
# -----------------------------
def list_profiles(*, sb=None) -> List[Dict[str, Any]]:
    sb = sb or get_supabase_client()
    res = (
        sb.table("profiles")
        .select("id, level, level_expires_at, created_at, updated_at")
        .order("created_at", desc=True)
        .execute()
    )
    return getattr(res, "data", []) or []


def update_user_level(
    *,
    user_id: str,
    level: str,
    level_expires_at: Optional[str] = None,
    sb=None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    if level not in quotas.LEVELS:
        raise BadRequest(f"Unknown level: {level}")
    sb = sb or get_supabase_client()
    row = {
        "level": level,
        # expiry only means something for Researcher subscriptions
        "level_expires_at": level_expires_at if level == quotas.RESEARCHER else None,
        "updated_at": (now or _now()).isoformat(),
    }
    res = sb.table("profiles").update(row).eq("id", user_id).execute()
    logger.info("user %s level -> %s", user_id, level)
    return {"ok": True, "updated": getattr(res, "data", [])}


# -----------------------------
# Usage statistics
# -----------------------------
def usage_stats(*, days: int = 7, sb=None, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Aggregate `daily_usage` for the last `days` days (today included).

    Returns:
      totals        {feature: count}
      users         {feature: distinct users}
      series        [{"date": "YYYY-MM-DD", <feature>: count, ...}] zero-filled
      today         [{"feature_name", "total_usage", "user_ids"}]
      features      sorted feature names seen in the window
    """
    sb = sb or get_supabase_client()
    today = today or _now().date()
    start = today - timedelta(days=days - 1)
    res = (
        sb.table("daily_usage")
        .select("usage_date, feature_name, count, user_id")
        .gte("usage_date", start.isoformat())
        .order("usage_date")
        .execute()
    )
    rows = getattr(res, "data", []) or []

    features = sorted({r["feature_name"] for r in rows if r.get("feature_name")})
    totals: Dict[str, int] = {f: 0 for f in features}
    user_sets: Dict[str, set] = {f: set() for f in features}
    by_day: Dict[str, Dict[str, int]] = {
        (start + timedelta(days=i)).isoformat(): {f: 0 for f in features} for i in range(days)
    }
    today_map: Dict[str, Dict[str, Any]] = {}
    today_key = today.isoformat()

    for r in rows:
        f = r.get("feature_name")
        d = str(r.get("usage_date"))[:10]
        n = int(r.get("count") or 0)
        if not f:
            continue
        totals[f] += n
        if r.get("user_id"):
            user_sets[f].add(r["user_id"])
        if d in by_day:
            by_day[d][f] += n
        if d == today_key:
            entry = today_map.setdefault(f, {"feature_name": f, "total_usage": 0, "user_ids": []})
            entry["total_usage"] += n
            if r.get("user_id") and r["user_id"] not in entry["user_ids"]:
                entry["user_ids"].append(r["user_id"])

    return {
        "features": features,
        "totals": totals,
        "users": {f: len(s) for f, s in user_sets.items()},
        "series": [{"date": d, **counts} for d, counts in by_day.items()],
        "today": sorted(today_map.values(), key=lambda e: -e["total_usage"]),
    }


# -----------------------------
# Quotas
# -----------------------------
def user_quota_table(*, sb=None, now: Optional[datetime] = None) -> Dict[str, Dict[str, Any]]:
    """
    {user_id: {"level": effective level,
               "quotas": {feature: {"limit", "used", "remaining"}}}}
    for every profile, using today's counters from RPC get_today_all_usage.
    """
    sb = sb or get_supabase_client()
    now = now or _now()
    profiles = getattr(sb.table("profiles").select("id, level, level_expires_at").execute(), "data", []) or []
    usage = getattr(sb.rpc("get_today_all_usage", {}).execute(), "data", []) or []

    used: Dict[tuple, int] = {}
    for u in usage:
        key = (u.get("user_id"), u.get("feature_name"))
        used[key] = used.get(key, 0) + int(u.get("usage_count") or 0)

    table: Dict[str, Dict[str, Any]] = {}
    for p in profiles:
        uid = p["id"]
        level = quotas.effective_level(p.get("level"), p.get("level_expires_at"), now=now)
        per_feature = {}
        for f in QUOTA_TABLE_FEATURES:
            limit = quotas.get_quota_limit(level, f)
            n = used.get((uid, f), 0)
            per_feature[f] = {
                "limit": limit,
                "used": n,
                "remaining": None if limit is None else max(0, limit - n),
            }
        table[uid] = {"user_id": uid, "level": level, "quotas": per_feature}
    return table


def reset_user_quota(*, user_id: str, sb=None) -> Dict[str, Any]:
    sb = sb or get_supabase_client()
    sb.rpc("reset_user_quota_manual", {"user_id_param": user_id}).execute()
    logger.info("quota reset for user %s", user_id)
    return {"ok": True}


def seconds_until_utc_midnight(now: Optional[datetime] = None) -> int:
    now = now or _now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    midnight = datetime(now.year, now.month, now.day, tzinfo=timezone.utc) + timedelta(days=1)
    return max(0, int((midnight - now).total_seconds()))


def format_countdown(seconds: int) -> str:
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"
