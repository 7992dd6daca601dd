# src/tools/deepseek_client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from utils.errors import UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_deepseek_api_key

logger = get_logger(__name__)

DEEPSEEK_URL = "https://api.deepseek.com/chat/completions"
MODELS = ("deepseek-chat", "deepseek-reasoner")


def chat_completion(
    messages: List[Dict[str, str]],
    *,
    model: str = "deepseek-chat",
    api_key: Optional[str] = None,
    session=None,
    timeout: float = 120,
) -> str:
    """POST a non-streaming chat completion; returns the first choice's content ('' when absent)."""
    api_key = api_key or get_deepseek_api_key(required=True)
    http = session or requests
    payload: Dict[str, Any] = {"model": model, "messages": messages, "stream": False}

    logger.info("deepseek chat model=%s messages=%d", model, len(messages))
    try:
        resp = http.post(
            DEEPSEEK_URL,
            json=payload,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"DeepSeek API Error: {e}") from e

    if not resp.ok:
        logger.warning("deepseek %s: %s", resp.status_code, resp.text[:300])
        raise UpstreamError(f"DeepSeek API Error: {resp.text}", status_code=resp.status_code)

    data = resp.json()
    choices = data.get("choices") or []
    if not choices:
        return ""
    return (choices[0].get("message") or {}).get("content") or ""
