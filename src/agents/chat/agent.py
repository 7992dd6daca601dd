# src/agents/chat/agent.py
"""
Chat front doors: Explore Gemini (multimodal, optional thinking), the plain
Gemini chat / interaction summariser, and the DeepSeek chatbot.

Each takes the request model the gateway parses and returns the JSON
payload the UI renders.
"""

from typing import Any, Dict, List, Optional

from agents.prompts import (
    DEFAULT_ASSISTANT,
    FORMATTING_INSTRUCTIONS,
    FORMATTING_INSTRUCTIONS_WITH_TABLES,
    INTERACTION_SUMMARY_PROMPT,
    SYSTEM_INSTRUCTIONS,
)
from tools import deepseek_client, gemini_client
from tools.medical_schema import DeepSeekChatRequest, ExploreGeminiRequest, GeminiChatRequest
from utils.errors import BadRequest, UpstreamError
from utils.logging_config import get_logger

logger = get_logger(__name__)

# ---- Explore Gemini -----------------------------------------------------------
EXPLORE_MODELS = (
    "gemini-1.5-flash",
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
    "gemini-2.5-flash-preview-04-17",
)
EXPLORE_DEFAULT_MODEL = "gemini-1.5-flash"
THINKING_MODEL = "gemini-2.5-flash-preview-04-17"
SAFETY_NOTICE = "\n\n[Content generation stopped due to safety settings.]"


def pick_model(requested: Optional[str], valid, default: str) -> str:
    return requested if requested in valid else default


def explore_system_instruction(custom: Optional[str], instruction_id: Optional[str]) -> str:
    """Custom text > built-in id > default assistant; formatting rules always appended."""
    if custom and custom.strip():
        base = custom
    elif instruction_id and SYSTEM_INSTRUCTIONS.get(instruction_id):
        base = SYSTEM_INSTRUCTIONS[instruction_id]
    else:
        base = DEFAULT_ASSISTANT
    return base + FORMATTING_INSTRUCTIONS


def explore_gemini(req: ExploreGeminiRequest) -> Dict[str, Any]:
    image = req.image_data.wire() if req.image_data else None
    if not req.prompt and not image:
        raise BadRequest("Request must include 'prompt' and/or 'imageData'")

    model = pick_model(req.model_name, EXPLORE_MODELS, EXPLORE_DEFAULT_MODEL)
    thinking = bool(req.enable_thinking) and model == THINKING_MODEL
    if req.history:
        contents = req.history
    else:
        contents = [gemini_client.user_turn(req.prompt, image)]

    logger.info("explore gemini model=%s thinking=%s turns=%d", model, thinking, len(contents))
    reply = gemini_client.generate(
        contents,
        model=model,
        system_instruction=explore_system_instruction(req.custom_system_instruction, req.system_instruction_id),
        temperature=0.9,
        top_k=1,
        top_p=1,
        max_output_tokens=2048,
        include_thoughts=thinking,
    )
    return shape_explore_reply(reply, thinking)


def shape_explore_reply(reply: gemini_client.GeminiReply, thinking: bool) -> Dict[str, Any]:
    text = reply.text or ""
    if reply.finish_reason == "SAFETY":
        text += SAFETY_NOTICE

    if not text and not reply.image:
        if reply.block_reason:
            raise BadRequest(f"Prompt blocked due to safety settings: {reply.block_reason}")
        if reply.finish_reason and reply.finish_reason != "STOP":
            text = f"[Content generation finished early: {reply.finish_reason}]"
        else:
            raise UpstreamError("Received an empty or unhandled response from the model.")

    out: Dict[str, Any] = {
        "responseText": text,
        "thoughtsGenerated": bool(thinking and reply.thoughts_token_count > 0),
    }
    if reply.image:
        out["responseImage"] = reply.image
    return out


# ---- Gemini chat / summariser -----------------------------------------------------
CHAT_MODELS = ("gemini-1.5-flash", "gemini-2.0-flash", "gemini-2.0-flash-lite", "gemini-2.5-pro-exp-03-25")
CHAT_DEFAULT_MODEL = "gemini-2.0-flash"


def _valid_turns(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    kept = [
        m for m in messages
        if isinstance(m, dict) and m.get("role") in ("user", "model") and isinstance(m.get("parts"), list) and m["parts"]
    ]
    if len(kept) != len(messages):
        logger.warning("dropped %d invalid chat turns", len(messages) - len(kept))
    return kept


def gemini_chat(req: GeminiChatRequest) -> Dict[str, Any]:
    image = req.image_data.wire() if req.image_data else None
    if not req.messages and not req.prompt and not image and not req.text_to_summarize:
        raise BadRequest("Request must include 'messages' OR 'prompt'/'imageData' OR 'textToSummarize'")

    model = pick_model(req.model_name, CHAT_MODELS, CHAT_DEFAULT_MODEL)
    system = None
    if req.custom_system_instruction and req.custom_system_instruction.strip():
        system = req.custom_system_instruction
    elif req.system_instruction_id and SYSTEM_INSTRUCTIONS.get(req.system_instruction_id):
        system = SYSTEM_INSTRUCTIONS[req.system_instruction_id]

    if req.messages:
        contents = _valid_turns(req.messages)
        if not contents:
            raise BadRequest("No valid messages provided in the 'messages' array.")
    elif req.text_to_summarize:
        # summaries never carry the image
        contents = [gemini_client.user_turn(INTERACTION_SUMMARY_PROMPT.format(text=req.text_to_summarize))]
    elif req.prompt:
        contents = [gemini_client.user_turn(req.prompt, image)]
    else:
        raise BadRequest("No valid single-turn input (prompt, imageData, or textToSummarize) found.")

    reply = gemini_client.generate(
        contents, model=model, system_instruction=system, temperature=0.9, top_k=1, top_p=1
    )
    out: Dict[str, Any] = {}
    if reply.text:
        out["responseText"] = reply.text
    if reply.image:
        out["responseImage"] = reply.image
    return out


def summarize_interactions(text: str) -> str:
    """Plain-text AI summary used by the interaction checker page."""
    result = gemini_chat(GeminiChatRequest(text_to_summarize=text))
    return result.get("responseText", "")


# ---- DeepSeek -------------------------------------------------------------------
def prepare_deepseek_messages(messages: List[Any]) -> List[Dict[str, str]]:
    if not messages:
        raise BadRequest("Missing messages array or model in request body")
    for m in messages:
        if not isinstance(m, dict) or m.get("role") not in ("system", "user", "assistant") \
                or not isinstance(m.get("content"), str):
            raise BadRequest("Invalid message structure in messages array")

    final = [{"role": m["role"], "content": m["content"]} for m in messages]
    idx = next((i for i, m in enumerate(final) if m["role"] == "system"), None)
    if idx is not None:
        base = final[idx]["content"].replace(DEFAULT_ASSISTANT, "").strip()
        final[idx]["content"] = (base or DEFAULT_ASSISTANT) + FORMATTING_INSTRUCTIONS_WITH_TABLES
    else:
        final.insert(0, {"role": "system", "content": DEFAULT_ASSISTANT + FORMATTING_INSTRUCTIONS_WITH_TABLES})
    return final


def deepseek_chat(req: DeepSeekChatRequest, *, session=None) -> Dict[str, Any]:
    if not req.model:
        raise BadRequest("Missing messages array or model in request body")
    if req.model not in deepseek_client.MODELS:
        raise BadRequest("Invalid model specified")
    messages = prepare_deepseek_messages(req.messages)
    text = deepseek_client.chat_completion(messages, model=req.model, session=session)
    return {"responseText": text}
