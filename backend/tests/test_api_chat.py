"""Tests for the in-app help assistant"""

import pytest

from seo_platform.api.api_v1.endpoints import chat
from seo_platform.services.llm import LLMError, LLMProfile, LLMResponse, LLMUsage

API = "/api/v1"


@pytest.fixture
def fake_generate(monkeypatch):
    """Record what the endpoint sends to the LLM shim"""
    state = {"calls": [], "reply": "Keep titles between 30 and 70 characters.", "error": None}

    async def _generate_text(db, workspace_id, options, profile=LLMProfile.BALANCED, **kwargs):
        state["calls"].append({"workspace_id": workspace_id, "options": options, "profile": profile})
        if state["error"]:
            raise state["error"]
        return LLMResponse(content=state["reply"], usage=LLMUsage(), provider="openai", model="gpt-4o-mini")

    monkeypatch.setattr(chat, "generate_text", _generate_text)
    return state


def test_chat_without_any_key_is_unavailable(client, owner_headers):
    response = client.post(f"{API}/chat", json={"messages": [{"role": "user", "content": "Hi"}]},
                           headers=owner_headers)

    assert response.status_code == 503
    assert response.json()["detail"] == "Chat feature is not configured"


def test_chat_reply(client, owner_headers, workspace_id, fake_generate):
    response = client.post(f"{API}/chat", json={"messages": [
        {"role": "user", "content": "How long should a title be?"},
    ]}, headers=owner_headers)

    assert response.status_code == 200
    assert response.json() == {"message": {"role": "assistant", "content": "Keep titles between 30 and 70 characters."}}
    call = fake_generate["calls"][0]
    assert str(call["workspace_id"]) == workspace_id
    assert call["profile"] == LLMProfile.FAST
    assert call["options"].prompt == "How long should a title be?"
    assert call["options"].history == []
    assert (call["options"].max_tokens, call["options"].temperature) == (500, 0.7)
    assert "general guidance only" in call["options"].system


def test_only_recent_messages_are_sent(client, owner_headers, fake_generate):
    messages = []
    for i in range(7):
        messages.append({"role": "user", "content": f"question {i}"})
        messages.append({"role": "assistant", "content": f"answer {i}"})
    messages.append({"role": "user", "content": "last question"})

    client.post(f"{API}/chat", json={"messages": messages}, headers=owner_headers)

    options = fake_generate["calls"][0]["options"]
    # The newest ten messages open with an assistant turn, which is dropped
    assert [(m.role, m.content) for m in options.history][:2] == [("user", "question 3"), ("assistant", "answer 3")]
    assert len(options.history) == 8
    assert options.prompt == "last question"


def test_last_message_must_come_from_user(client, owner_headers, fake_generate):
    response = client.post(f"{API}/chat", json={"messages": [
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello!"},
    ]}, headers=owner_headers)

    assert response.status_code == 400
    assert fake_generate["calls"] == []


def test_invalid_messages(client, owner_headers, fake_generate):
    empty = client.post(f"{API}/chat", json={"messages": []}, headers=owner_headers)
    system_role = client.post(f"{API}/chat", json={"messages": [{"role": "system", "content": "x"}]},
                              headers=owner_headers)

    assert empty.status_code == 400
    assert system_role.status_code == 400


def test_provider_failure(client, owner_headers, fake_generate):
    fake_generate["error"] = LLMError("OpenAI API error: boom")

    response = client.post(f"{API}/chat", json={"messages": [{"role": "user", "content": "Hi"}]},
                           headers=owner_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to process chat request"


def test_empty_reply(client, owner_headers, fake_generate):
    fake_generate["reply"] = ""

    response = client.post(f"{API}/chat", json={"messages": [{"role": "user", "content": "Hi"}]},
                           headers=owner_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "No response from AI"


def test_chat_is_rate_limited(client, owner_headers, fake_generate):
    payload = {"messages": [{"role": "user", "content": "Hi"}]}

    statuses = [client.post(f"{API}/chat", json=payload, headers=owner_headers).status_code for _ in range(21)]

    assert statuses == [200] * 20 + [429]
