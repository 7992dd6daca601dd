# src/agents/disease/agent.py
"""Disease library: short lay summary for a search, structured details for one condition."""

from typing import Any, Dict, Optional

from agents.prompts import DISEASE_DETAILS_PROMPT, DISEASE_SUMMARY_PROMPT
from tools import gemini_client
from utils.errors import BadRequest
from utils.logging_config import get_logger

logger = get_logger(__name__)

MODEL = "gemini-1.5-flash-latest"


def summarize_disease(query: Optional[str]) -> Dict[str, Any]:
    if not query or not query.strip():
        raise BadRequest("Missing or invalid 'query' parameter in request body.")
    logger.info("disease summary query=%s", query)
    reply = gemini_client.generate(DISEASE_SUMMARY_PROMPT.format(query=query.strip()), model=MODEL)
    return {"summary": reply.text.strip()}


def disease_details(disease_name: Optional[str]) -> Dict[str, Any]:
    if not disease_name or not disease_name.strip():
        raise BadRequest("Missing or invalid diseaseName in request body")
    logger.info("disease details name=%s", disease_name)
    reply = gemini_client.generate(
        DISEASE_DETAILS_PROMPT.format(disease=disease_name.strip()),
        model=MODEL,
        temperature=0.7,
        max_output_tokens=8192,
    )
    return {"details": reply.text or ""}
