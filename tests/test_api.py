import pytest
from fastapi.testclient import TestClient

import app.main as main
from app.config import AppSettings
from app.runtime import build_orchestrator
from companion_agent.fakes import make_connection_error, make_status_error


@pytest.fixture()
def api(monkeypatch, settings, make_client):
    """Point the app at a fake completion client and return (TestClient, fake)."""

    def _api(*outcomes, app_settings=None):
        app_settings = app_settings or settings
        fake = make_client(*outcomes)
        orchestrator = build_orchestrator(app_settings, client=fake, memory_store=main._memory_store)
        monkeypatch.setattr(main, "settings", app_settings)
        monkeypatch.setattr(main, "_orchestrator", orchestrator)
        return TestClient(main.app), fake

    return _api


def test_health_and_readiness(api):
    client, _ = api("unused")
    assert client.get("/health").json() == {"status": "ok"}

    ready = client.get("/health/ready").json()
    assert ready["status"] == "ready"
    assert ready["openai_api_key_configured"] is True
    assert ready["openai_api_key_valid"] is True
    assert ready["model"] == "gpt-4o-mini"
    assert ready["tracing_enabled"] is False


def test_readiness_degraded_without_key(api):
    client, _ = api("unused", app_settings=AppSettings(openai_api_key=None))
    ready = client.get("/health/ready").json()
    assert ready["status"] == "degraded"
    assert ready["openai_api_key_configured"] is False


def test_lists_agents_and_routes_without_calling(api):
    client, fake = api("unused")

    agents = client.get("/v1/agents").json()["agents"]
    assert [agent["name"] for agent in agents] == [
        "default",
        "financial",
        "wellness",
        "planner",
        "learning",
        "relationship",
        "media",
        "notes",
    ]

    routed = client.post("/v1/agents/route", json={"message": "Remind me to call mom"}).json()
    assert routed == {"agent": "planner", "matched_keyword": "remind"}
    assert fake.calls == []


def test_chat_returns_specialist_reply(api, reply_json):
    client, fake = api(reply_json("Let's sort your budget.", nextStep="Track one week of spending"))

    body = client.post("/v1/chat", json={"message": "I need to budget for my trip"}).json()

    assert body["summary"] == "Let's sort your budget."
    assert body["next_step"] == "Track one week of spending"
    assert body["agent"] == "financial"
    assert body["confidence"] == 0.9
    assert body["error"] is None
    assert len(fake.calls) == 1


def test_chat_reports_fallback_reply(api, reply_json):
    client, fake = api(make_status_error(500), reply_json("I'm here. Tell me more."))

    body = client.post("/v1/chat", json={"message": "need better sleep"}).json()

    assert body["agent"] == "default"
    assert body["confidence"] == 0.7
    assert body["summary"] == "I'm here. Tell me more."
    assert len(fake.calls) == 2


def test_empty_message_is_answered_without_calling(api):
    client, fake = api("unused")

    body = client.post("/v1/chat", json={"message": "   "}).json()

    assert body["error"] == "Empty input"
    assert body["summary"] == "I didn't catch that. What's on your mind?"
    assert fake.calls == []


def test_malformed_key_is_reported_before_calling(api):
    client, fake = api("unused", app_settings=AppSettings(openai_api_key="not-a-real-key"))

    body = client.post("/v1/chat", json={"message": "hello"}).json()

    assert body["error"] == "Invalid API key format"
    assert fake.calls == []


@pytest.mark.parametrize(
    "failure, error",
    [
        (make_status_error(401), "Invalid API key"),
        (make_status_error(429), "Rate limited"),
        (make_status_error(503), "Server error"),
        (make_status_error(418), "API error 418"),
        (make_connection_error(), "Network error"),
    ],
)
def test_terminal_failures_become_friendly_replies(api, failure, error):
    client, _ = api(failure)

    response = client.post("/v1/chat", json={"message": "hey, how's it going?"})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] == error
    assert body["agent"] is None
    assert body["summary"]


def test_stored_memories_feed_later_chats(api, reply_json):
    client, fake = api(reply_json("Japan is going to be great."))

    created = client.post(
        "/v1/memories",
        json={"user_id": "api-user", "content": "Saving up for a trip to Japan", "topic": "finance"},
    )
    assert created.status_code == 201
    assert created.json() == {"user_id": "api-user", "stored": True}

    client.post("/v1/chat", json={"message": "How is my Japan trip budget looking?", "user_id": "api-user"})

    assert "Memory 1 [finance]: Saving up for a trip to Japan" in fake.system_prompts[0]


def test_memory_requires_content(api):
    client, _ = api("unused")
    response = client.post("/v1/memories", json={"user_id": "api-user", "content": ""})
    assert response.status_code == 422
