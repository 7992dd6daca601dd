# src/agents/mindmap/agent.py
"""
Two-stage mind map pipeline: topic -> short summary -> React-Flow JSON.

    result = generate_mind_map("Hypertension")
    result["summary"], result["mindMap"]["nodes"], result["mindMap"]["edges"]
"""

import json
import math
import re
from collections import deque
from typing import Any, Dict, List, Optional, TypedDict

from langgraph.graph import StateGraph, END
from pydantic import ValidationError

from tools import gemini_client
from tools.medical_schema import MindMap
from utils.errors import BadRequest, ServiceError
from utils.logging_config import get_logger

logger = get_logger(__name__)

MODEL = "gemini-1.5-flash"
GENERATION = {"temperature": 0.6, "top_k": 1, "top_p": 1, "max_output_tokens": 8192}

SUMMARY_PROMPT = """
Generate a concise and informative summary (around 100-150 words) about the medical topic: "{topic}".
Focus on key aspects like definition, main causes or types, common symptoms, and general treatment principles if applicable.
Ensure the summary is clear and easy to understand. Output only the summary text."""

MINDMAP_PROMPT = """
Based on the following summary text:
"{summary}"

Create a mind map structure in valid JSON format suitable for React Flow. The JSON object MUST strictly adhere to this structure:
{{
  "nodes": [
    {{ "id": "string (unique)", "data": {{ "label": "string (node text)" }}, "position": {{ "x": 0, "y": 0 }} }}
    // ... more nodes based on the summary
  ],
  "edges": [
    {{ "id": "string (unique)", "source": "string (source node id)", "target": "string (target node id)", "type": "smoothstep" }}
    // ... more edges connecting the nodes
  ]
}}

Rules:
- The root node MUST have id "root" and its label should be the original topic: "{topic}".
- Extract key concepts, sub-topics, and relationships from the summary text to create the nodes and edges.
- Generate unique string IDs for all nodes and edges (e.g., "node-1", "edge-root-1").
- Ensure all 'source' and 'target' IDs in 'edges' correspond to valid 'id's in 'nodes'.
- Set all node positions to {{ x: 0, y: 0 }}; layouting will happen in the frontend.
- CRITICAL JSON RULES:
  - Ensure every object within the 'nodes' array is separated by a comma (,), except for the last object.
  - Ensure every object within the 'edges' array is separated by a comma (,), except for the last object.
  - All property names (like "id", "data", "label", "position", "x", "y", "source", "target", "type") MUST be enclosed in double quotes ("").
  - All string values MUST be enclosed in double quotes ("").
- Output ONLY the JSON object, without any introductory text, explanations, or markdown formatting like ```json.
"""

# greedy on purpose: first "{" to last "}"
_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")
PROCESS_ERROR = "Failed to process Mind Map AI response"


# ---- LangGraph state ----------------------------------------------------------
class MindMapState(TypedDict, total=False):
    topic: str
    summary: str
    mind_map: Dict[str, Any]


def _ask(prompt: str) -> str:
    reply = gemini_client.generate(prompt, model=MODEL, safety=gemini_client.STRICT_SAFETY, **GENERATION)
    return reply.text


def summarize(state: MindMapState) -> MindMapState:
    """Stage 1: short plain-text summary of the topic."""
    logger.info("mindmap summary topic=%s", state["topic"])
    text = _ask(SUMMARY_PROMPT.format(topic=state["topic"]))
    if not text or not text.strip():
        raise ServiceError("Received empty summary from AI.")
    return {"summary": text}


def parse_mind_map(raw: str) -> Dict[str, Any]:
    match = _JSON_BLOCK.search(raw or "")
    if not match:
        logger.error("no JSON block in mind map response: %s", (raw or "")[:500])
        raise ServiceError(PROCESS_ERROR)
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error("mind map JSON did not parse: %s", e)
        raise ServiceError(PROCESS_ERROR) from e
    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list) or not isinstance(data.get("edges"), list):
        logger.error("mind map JSON missing nodes/edges arrays")
        raise ServiceError(PROCESS_ERROR)
    return data


def build_map(state: MindMapState) -> MindMapState:
    """Stage 2: summary -> nodes/edges JSON."""
    raw = _ask(MINDMAP_PROMPT.format(summary=state["summary"], topic=state["topic"]))
    return {"mind_map": parse_mind_map(raw)}


# ---- Build graph --------------------------------------------------------------
workflow = StateGraph(MindMapState)
workflow.add_node("summarize", summarize)
workflow.add_node("build_map", build_map)
workflow.set_entry_point("summarize")
workflow.add_edge("summarize", "build_map")
workflow.add_edge("build_map", END)

app = workflow.compile()


# ---- Public entrypoint ------------------------------------------------------------
def generate_mind_map(topic: Optional[str]) -> Dict[str, Any]:
    if not topic or not isinstance(topic, str) or not topic.strip():
        raise BadRequest('Missing or invalid "topic" in request body')
    result = app.invoke({"topic": topic})
    return {"summary": result["summary"].strip(), "mindMap": result["mind_map"]}


# ---- Display helpers -----------------------------------------------------------
def radial_layout(mind_map: Dict[str, Any], ring: float = 220.0) -> Dict[str, Any]:
    """
    Give each node a position on concentric rings around "root" (BFS depth
    = ring index). Nodes not reachable from root go on an outer ring.
    """
    nodes: List[Dict[str, Any]] = [dict(n) for n in mind_map.get("nodes") or []]
    edges = mind_map.get("edges") or []
    ids = [n.get("id") for n in nodes]
    children: Dict[str, List[str]] = {i: [] for i in ids}
    for e in edges:
        if e.get("source") in children and e.get("target") in children:
            children[e["source"]].append(e["target"])

    root = "root" if "root" in children else (ids[0] if ids else None)
    depth: Dict[str, int] = {}
    if root is not None:
        depth[root] = 0
        queue = deque([root])
        while queue:
            cur = queue.popleft()
            for nxt in children[cur]:
                if nxt not in depth:
                    depth[nxt] = depth[cur] + 1
                    queue.append(nxt)
    outer = (max(depth.values()) + 1) if depth else 1
    for i in ids:
        depth.setdefault(i, outer)

    rings: Dict[int, List[str]] = {}
    for i in ids:
        rings.setdefault(depth[i], []).append(i)
    pos: Dict[str, Dict[str, float]] = {}
    for d, members in rings.items():
        for k, node_id in enumerate(members):
            angle = 2 * math.pi * k / len(members)
            pos[node_id] = {"x": round(d * ring * math.cos(angle), 1), "y": round(d * ring * math.sin(angle), 1)}

    for n in nodes:
        n["position"] = pos.get(n.get("id"), {"x": 0.0, "y": 0.0})
    return {"nodes": nodes, "edges": list(edges)}


def validate_mind_map(mind_map: Dict[str, Any]) -> Optional[MindMap]:
    """Typed view of the map for callers that want it; None when the AI output doesn't fit the model."""
    try:
        return MindMap.model_validate(mind_map)
    except ValidationError as e:
        logger.warning("mind map did not validate: %s", e.error_count())
        return None
