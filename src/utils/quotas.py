# src/utils/quotas.py
"""Daily quota tables per user level. None = unlimited, 0 = no access."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

FREE = "Free"
PREMIUM = "Premium"
RESEARCHER = "Researcher"
ADMINISTRATOR = "Administrator"

LEVELS = (FREE, PREMIUM, RESEARCHER, ADMINISTRATOR)
_LEVEL_RANK = {lvl: i for i, lvl in enumerate(LEVELS)}

# Per-level limits for the gated tools
LEVEL_QUOTAS: Dict[str, Dict[str, Optional[int]]] = {
    "ai_chatbot":          {FREE: 10, PREMIUM: 30, RESEARCHER: None},
    "ai_peer_review":      {FREE: 5,  PREMIUM: 15, RESEARCHER: None},
    "disease_library":     {FREE: 10, PREMIUM: 20, RESEARCHER: None},
    "drug_reference":      {FREE: 10, PREMIUM: 20, RESEARCHER: None},
    "clinical_guidelines": {FREE: 5,  PREMIUM: 50, RESEARCHER: None},
    "interaction_checker": {FREE: 5,  PREMIUM: 15, RESEARCHER: None},
    "explore_gemini":      {FREE: 5,  PREMIUM: 20, RESEARCHER: 50},
    "nutrition_database":  {FREE: 10, PREMIUM: 20, RESEARCHER: None},
    "learning_resources":  {FREE: 0,  PREMIUM: 0,  RESEARCHER: None},
}

# Level-independent limits for everything else; -1 = unlimited
DEFAULT_QUOTAS: Dict[str, int] = {
    "medical_calculator": -1,
    "explore_deepseek": 10,
    "mind_map_maker": 5,
    "clinical_scoring": -1,
    "custom_feature": -1,
}

FEATURES = tuple(dict.fromkeys([*LEVEL_QUOTAS, *DEFAULT_QUOTAS]))


def is_known_feature(feature: str) -> bool:
    return feature in LEVEL_QUOTAS or feature in DEFAULT_QUOTAS


def get_quota_limit(level: Optional[str], feature: str) -> Optional[int]:
    """
    Daily limit for `feature` at `level`.
    Administrator is unlimited; per-level table first, then the flat default.
    Raises KeyError for an unknown feature.
    """
    if level == ADMINISTRATOR:
        return None
    if level not in _LEVEL_RANK:
        level = FREE
    per_level = LEVEL_QUOTAS.get(feature)
    if per_level is not None:
        return per_level[level]
    if feature in DEFAULT_QUOTAS:
        limit = DEFAULT_QUOTAS[feature]
        return None if limit == -1 else limit
    raise KeyError(feature)


def _as_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def effective_level(level: Optional[str], level_expires_at=None, now: Optional[datetime] = None) -> str:
    """Missing level → Free; an expired Researcher subscription falls back to Free."""
    if not level:
        return FREE
    if level == RESEARCHER:
        expires = _as_datetime(level_expires_at)
        now = now or datetime.now(timezone.utc)
        if expires is not None and expires < now:
            return FREE
    return level


def has_required_level(level: Optional[str], required: Optional[str]) -> bool:
    if not required:
        return True
    if level not in _LEVEL_RANK:
        return False
    return _LEVEL_RANK[level] >= _LEVEL_RANK.get(required, len(LEVELS))


def feature_words(feature: str) -> str:
    return feature.replace("_", " ")
