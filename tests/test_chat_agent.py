import pytest
from conftest import FakeResponse, FakeSession

from agents import prompts
from agents.chat import agent as chat
from tools import gemini_client
from tools.gemini_client import GeminiReply
from tools.medical_schema import DeepSeekChatRequest, ExploreGeminiRequest, GeminiChatRequest
from utils.errors import BadRequest, UpstreamError


@pytest.fixture
def gemini(monkeypatch):
    calls = []
    state = {"reply": GeminiReply(text="ok", finish_reason="STOP")}

    def fake_generate(contents, **kwargs):
        calls.append((contents, kwargs))
        return state["reply"]

    monkeypatch.setattr(gemini_client, "generate", fake_generate)
    return calls, state


# ---- Explore Gemini ------------------------------------------------------------

def test_explore_requires_prompt_or_image(gemini):
    with pytest.raises(BadRequest, match="'prompt' and/or 'imageData'"):
        chat.explore_gemini(ExploreGeminiRequest())


def test_explore_defaults(gemini):
    calls, _ = gemini
    out = chat.explore_gemini(ExploreGeminiRequest(prompt="hi", modelName="gpt-4"))
    assert out == {"responseText": "ok", "thoughtsGenerated": False}
    contents, kwargs = calls[0]
    assert contents == [{"role": "user", "parts": [{"text": "hi"}]}]
    assert kwargs["model"] == chat.EXPLORE_DEFAULT_MODEL
    assert kwargs["temperature"] == 0.9
    assert kwargs["max_output_tokens"] == 2048
    assert kwargs["system_instruction"] == prompts.DEFAULT_ASSISTANT + prompts.FORMATTING_INSTRUCTIONS
    assert kwargs["include_thoughts"] is False


def test_explore_thinking_only_on_thinking_model(gemini):
    calls, state = gemini
    state["reply"] = GeminiReply(text="deep", finish_reason="STOP", thoughts_token_count=12)
    out = chat.explore_gemini(
        ExploreGeminiRequest(prompt="why", modelName=chat.THINKING_MODEL, enableThinking=True)
    )
    assert out["thoughtsGenerated"] is True
    assert calls[0][1]["include_thoughts"] is True

    chat.explore_gemini(ExploreGeminiRequest(prompt="why", modelName="gemini-2.0-flash", enableThinking=True))
    assert calls[1][1]["include_thoughts"] is False


def test_explore_history_replaces_prompt(gemini):
    calls, _ = gemini
    history = [
        {"role": "user", "parts": [{"text": "a"}]},
        {"role": "model", "parts": [{"text": "b"}]},
        {"role": "user", "parts": [{"text": "c"}]},
    ]
    chat.explore_gemini(ExploreGeminiRequest(prompt="c", history=history))
    assert calls[0][0] == history


def test_explore_image_only(gemini):
    calls, _ = gemini
    chat.explore_gemini(ExploreGeminiRequest(imageData={"mimeType": "image/png", "data": "aGVsbG8="}))
    assert calls[0][0][0]["parts"] == [{"inlineData": {"mimeType": "image/png", "data": "aGVsbG8="}}]


def test_system_instruction_priority():
    custom = chat.explore_system_instruction("Be brief.", "manuscript-peer-review-assistant")
    assert custom == "Be brief." + prompts.FORMATTING_INSTRUCTIONS
    builtin = chat.explore_system_instruction(None, "manuscript-peer-review-assistant")
    assert builtin.startswith(prompts.SYSTEM_INSTRUCTIONS["manuscript-peer-review-assistant"])
    assert chat.explore_system_instruction("  ", "unknown").startswith(prompts.DEFAULT_ASSISTANT)


def test_shape_reply_safety_suffix():
    out = chat.shape_explore_reply(GeminiReply(text="partial", finish_reason="SAFETY"), False)
    assert out["responseText"] == "partial" + chat.SAFETY_NOTICE


def test_shape_reply_blocked_prompt():
    with pytest.raises(BadRequest, match="Prompt blocked due to safety settings: SAFETY"):
        chat.shape_explore_reply(GeminiReply(block_reason="SAFETY"), False)


def test_shape_reply_early_finish_and_empty():
    out = chat.shape_explore_reply(GeminiReply(finish_reason="MAX_TOKENS"), False)
    assert out["responseText"] == "[Content generation finished early: MAX_TOKENS]"
    with pytest.raises(UpstreamError, match="empty or unhandled"):
        chat.shape_explore_reply(GeminiReply(finish_reason="STOP"), False)


def test_shape_reply_image():
    img = {"mimeType": "image/png", "data": "eA=="}
    out = chat.shape_explore_reply(GeminiReply(image=img, finish_reason="STOP"), False)
    assert out["responseImage"] == img
    assert out["responseText"] == ""


# ---- Gemini chat ------------------------------------------------------------------

def test_gemini_chat_filters_invalid_turns(gemini):
    calls, _ = gemini
    msgs = [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "system", "parts": [{"text": "x"}]},
        {"role": "model", "parts": []},
    ]
    assert chat.gemini_chat(GeminiChatRequest(messages=msgs)) == {"responseText": "ok"}
    assert calls[0][0] == [msgs[0]]
    assert calls[0][1]["model"] == chat.CHAT_DEFAULT_MODEL
    assert calls[0][1]["system_instruction"] is None


def test_gemini_chat_all_turns_invalid(gemini):
    with pytest.raises(BadRequest, match="No valid messages"):
        chat.gemini_chat(GeminiChatRequest(messages=[{"role": "bot", "parts": [{"text": "x"}]}]))


def test_summarize_interactions_ignores_image(gemini):
    calls, state = gemini
    state["reply"] = GeminiReply(text="Warfarin + aspirin: bleeding risk.")
    assert chat.summarize_interactions("raw label text") == "Warfarin + aspirin: bleeding risk."
    parts = calls[0][0][0]["parts"]
    assert len(parts) == 1
    assert "raw label text" in parts[0]["text"]


def test_gemini_chat_requires_some_input(gemini):
    with pytest.raises(BadRequest):
        chat.gemini_chat(GeminiChatRequest())


# ---- DeepSeek ------------------------------------------------------------------

def test_prepare_deepseek_inserts_default_system():
    msgs = chat.prepare_deepseek_messages([{"role": "user", "content": "hello"}])
    assert msgs[0] == {
        "role": "system",
        "content": prompts.DEFAULT_ASSISTANT + prompts.FORMATTING_INSTRUCTIONS_WITH_TABLES,
    }
    assert msgs[1] == {"role": "user", "content": "hello"}


def test_prepare_deepseek_keeps_custom_system():
    msgs = chat.prepare_deepseek_messages(
        [{"role": "system", "content": "You are a pharmacist."}, {"role": "user", "content": "q"}]
    )
    assert msgs[0]["content"] == "You are a pharmacist." + prompts.FORMATTING_INSTRUCTIONS_WITH_TABLES
    assert len(msgs) == 2


@pytest.mark.parametrize(
    "messages, error",
    [
        ([], "Missing messages array"),
        ([{"role": "robot", "content": "x"}], "Invalid message structure"),
        ([{"role": "user", "content": 5}], "Invalid message structure"),
    ],
)
def test_prepare_deepseek_rejects(messages, error):
    with pytest.raises(BadRequest, match=error):
        chat.prepare_deepseek_messages(messages)


def test_deepseek_chat_round_trip(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-key")
    session = FakeSession(FakeResponse(200, {"choices": [{"message": {"content": "Answer"}}]}))
    out = chat.deepseek_chat(
        DeepSeekChatRequest(messages=[{"role": "user", "content": "q"}], model="deepseek-reasoner"),
        session=session,
    )
    assert out == {"responseText": "Answer"}
    method, url, kwargs = session.calls[0]
    assert url == "https://api.deepseek.com/chat/completions"
    assert kwargs["json"]["model"] == "deepseek-reasoner"
    assert kwargs["json"]["stream"] is False
    assert kwargs["headers"]["Authorization"] == "Bearer ds-key"


def test_deepseek_invalid_model():
    with pytest.raises(BadRequest, match="Invalid model specified"):
        chat.deepseek_chat(DeepSeekChatRequest(messages=[{"role": "user", "content": "q"}], model="gpt-4"))


def test_deepseek_upstream_error_keeps_status(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "ds-key")
    session = FakeSession(FakeResponse(429, text="rate limited"))
    with pytest.raises(UpstreamError) as exc:
        chat.deepseek_chat(DeepSeekChatRequest(messages=[{"role": "user", "content": "q"}]), session=session)
    assert exc.value.status_code == 429
