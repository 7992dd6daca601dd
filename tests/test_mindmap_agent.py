import json

import pytest

from agents.mindmap import agent as mindmap
from tools import gemini_client
from tools.gemini_client import GeminiReply
from utils.errors import BadRequest, ServiceError

MAP = {
    "nodes": [
        {"id": "root", "data": {"label": "Asthma"}, "position": {"x": 0, "y": 0}},
        {"id": "node-1", "data": {"label": "Triggers"}, "position": {"x": 0, "y": 0}},
        {"id": "node-2", "data": {"label": "Inhalers"}, "position": {"x": 0, "y": 0}},
        {"id": "node-3", "data": {"label": "Steroids"}, "position": {"x": 0, "y": 0}},
    ],
    "edges": [
        {"id": "e1", "source": "root", "target": "node-1", "type": "smoothstep"},
        {"id": "e2", "source": "root", "target": "node-2", "type": "smoothstep"},
        {"id": "e3", "source": "node-2", "target": "node-3", "type": "smoothstep"},
    ],
}


@pytest.fixture
def gemini(monkeypatch):
    calls = []
    replies = []

    def fake_generate(contents, **kwargs):
        calls.append((contents, kwargs))
        return GeminiReply(text=replies.pop(0))

    monkeypatch.setattr(gemini_client, "generate", fake_generate)
    return calls, replies


def test_two_stage_pipeline(gemini):
    calls, replies = gemini
    replies.extend(["  Asthma is a chronic airway disease.  ", "```json\n" + json.dumps(MAP) + "\n```"])

    out = mindmap.generate_mind_map("Asthma")

    assert out["summary"] == "Asthma is a chronic airway disease."
    assert out["mindMap"] == MAP
    assert 'medical topic: "Asthma"' in calls[0][0]
    assert "Asthma is a chronic airway disease." in calls[1][0]
    assert calls[0][1]["model"] == mindmap.MODEL
    assert calls[0][1]["safety"] is gemini_client.STRICT_SAFETY
    assert calls[1][1]["max_output_tokens"] == 8192


def test_missing_topic(gemini):
    with pytest.raises(BadRequest, match='Missing or invalid "topic"'):
        mindmap.generate_mind_map("   ")
    assert gemini[0] == []


def test_empty_summary_stops_before_second_call(gemini):
    calls, replies = gemini
    replies.append("   ")
    with pytest.raises(ServiceError, match="Received empty summary from AI."):
        mindmap.generate_mind_map("Asthma")
    assert len(calls) == 1


def test_prose_around_json_is_ignored():
    raw = "Here you go:\n" + json.dumps(MAP) + "\nHope this helps."
    assert mindmap.parse_mind_map(raw) == MAP


@pytest.mark.parametrize("raw", ["no json here", '{"nodes": [}', '{"nodes": []}', '{"nodes": {}, "edges": []}'])
def test_unusable_map_output(raw):
    with pytest.raises(ServiceError) as exc:
        mindmap.parse_mind_map(raw)
    assert exc.value.message == mindmap.PROCESS_ERROR
    assert exc.value.status_code == 500


def test_radial_layout_rings():
    laid = mindmap.radial_layout(MAP, ring=100)
    pos = {n["id"]: n["position"] for n in laid["nodes"]}
    assert pos["root"] == {"x": 0.0, "y": 0.0}
    assert pos["node-1"] == {"x": 100.0, "y": 0.0}
    assert pos["node-2"] == {"x": -100.0, "y": 0.0}
    assert pos["node-3"] == {"x": 200.0, "y": 0.0}
    # input untouched
    assert MAP["nodes"][1]["position"] == {"x": 0, "y": 0}


def test_radial_layout_orphans_go_outside():
    mm = {"nodes": [{"id": "root", "data": {}}, {"id": "lost", "data": {}}], "edges": []}
    pos = {n["id"]: n["position"] for n in mindmap.radial_layout(mm, ring=50)["nodes"]}
    assert pos["lost"] == {"x": 50.0, "y": 0.0}


def test_validate_mind_map():
    assert mindmap.validate_mind_map(MAP).nodes[0].id == "root"
    assert mindmap.validate_mind_map({"nodes": [{"label": "x"}], "edges": []}) is None
