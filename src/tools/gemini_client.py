# src/tools/gemini_client.py
"""
Thin wrapper over the google-genai SDK.

generate() takes contents in the REST wire shape the front ends send
({"role", "parts": [{"text"} | {"inlineData": {"mimeType", "data"}}]}),
or a plain prompt string, and returns a GeminiReply.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional, Union

import streamlit as st
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from utils.errors import BadRequest, UpstreamError
from utils.logging_config import get_logger
from utils.supabase_utils import get_gemini_api_key

logger = get_logger(__name__)

DEFAULT_SAFETY = [
    types.SafetySetting(category=types.HarmCategory.HARM_CATEGORY_HARASSMENT,
                        threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH),
    types.SafetySetting(category=types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
                        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
    types.SafetySetting(category=types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
                        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE),
    types.SafetySetting(category=types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
                        threshold=types.HarmBlockThreshold.BLOCK_NONE),
]

# every category at MEDIUM_AND_ABOVE; used by the mind map pipeline
STRICT_SAFETY = [
    types.SafetySetting(category=c, threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
    for c in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiReply(BaseModel):
    text: str = ""
    image: Optional[Dict[str, str]] = None  # {"mimeType", "data" (base64)}
    thoughts_token_count: int = 0
    finish_reason: Optional[str] = None
    block_reason: Optional[str] = None


@st.cache_resource(show_spinner=False)
def get_client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def _enum_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", None) or str(value)


def _to_part(part: Dict[str, Any]) -> types.Part:
    if part.get("text") is not None:
        return types.Part.from_text(text=str(part["text"]))
    inline = part.get("inlineData") or part.get("inline_data")
    if inline:
        mime = inline.get("mimeType") or inline.get("mime_type")
        data = inline.get("data")
        if not mime or not data:
            raise BadRequest("Invalid 'imageData' provided. Both mimeType and data are required.")
        return types.Part.from_bytes(data=base64.b64decode(data), mime_type=mime)
    raise BadRequest("Unsupported message part.")


def to_contents(turns: List[Dict[str, Any]]) -> List[types.Content]:
    return [
        types.Content(role=t.get("role", "user"), parts=[_to_part(p) for p in t.get("parts") or []])
        for t in turns
    ]


def user_turn(prompt: Optional[str] = None, image: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """One user turn in wire shape from an optional prompt and optional image."""
    parts: List[Dict[str, Any]] = []
    if prompt:
        parts.append({"text": prompt})
    if image:
        if not image.get("mimeType") or not image.get("data"):
            raise BadRequest("Invalid 'imageData' provided. Both mimeType and data are required.")
        parts.append({"inlineData": {"mimeType": image["mimeType"], "data": image["data"]}})
    if not parts:
        raise BadRequest("No content (prompt or file) provided for generation.")
    return {"role": "user", "parts": parts}


def parse_response(resp: Any) -> GeminiReply:
    """Collect non-thought text, the last inline image, and the finish/block reasons."""
    reply = GeminiReply()
    candidates = getattr(resp, "candidates", None) or []
    candidate = candidates[0] if candidates else None
    if candidate is not None:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            if getattr(part, "thought", False):
                continue
            if getattr(part, "text", None):
                reply.text += part.text
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                data = inline.data
                if isinstance(data, (bytes, bytearray)):
                    data = base64.b64encode(data).decode("ascii")
                reply.image = {"mimeType": inline.mime_type, "data": data}
        reply.finish_reason = _enum_name(getattr(candidate, "finish_reason", None))

    usage = getattr(resp, "usage_metadata", None)
    reply.thoughts_token_count = int(getattr(usage, "thoughts_token_count", None) or 0)
    feedback = getattr(resp, "prompt_feedback", None)
    reply.block_reason = _enum_name(getattr(feedback, "block_reason", None))
    return reply


def generate(
    contents: Union[str, List[Dict[str, Any]]],
    *,
    model: str = "gemini-2.0-flash",
    system_instruction: Optional[str] = None,
    temperature: Optional[float] = None,
    top_k: Optional[float] = None,
    top_p: Optional[float] = None,
    max_output_tokens: Optional[int] = None,
    safety: Union[bool, List[types.SafetySetting]] = True,
    include_thoughts: bool = False,
    client: Optional[genai.Client] = None,
) -> GeminiReply:
    if isinstance(contents, str):
        contents = [user_turn(contents)]

    config = types.GenerateContentConfig(
        system_instruction=system_instruction or None,
        temperature=temperature,
        top_k=top_k,
        top_p=top_p,
        max_output_tokens=max_output_tokens,
        safety_settings=(safety if isinstance(safety, list) else DEFAULT_SAFETY) if safety else None,
        thinking_config=types.ThinkingConfig(include_thoughts=True) if include_thoughts else None,
    )

    client = client or get_client(get_gemini_api_key(required=True))
    logger.info("gemini generate model=%s turns=%d", model, len(contents))
    try:
        resp = client.models.generate_content(model=model, contents=to_contents(contents), config=config)
    except genai_errors.APIError as e:
        logger.warning("gemini API error %s: %s", e.code, e.message)
        raise UpstreamError(f"Gemini API Error: {e.message or e}") from e
    except BadRequest:
        raise
    except Exception as e:
        logger.exception("gemini call failed")
        raise UpstreamError(f"Gemini API Error: {e}") from e
    return parse_response(resp)
