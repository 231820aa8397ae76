import json

import pytest

from app.config import AgentSettings, AppSettings, FallbackPolicy, ObservabilitySettings
from companion_agent.fakes import FakeCompletionClient, RecordingTracer
from companion_agent.memory import InMemoryMemoryStore, Memory


@pytest.fixture()
def sample_messages():
    return {
        "financial": "I need to budget for my trip",
        "wellness": "feeling anxious about my workout plan",
        "planner": "Can you help me plan tomorrow?",
        "learning": "I want to learn a new skill",
        "relationship": "Had a fight with my sister",
        "media": "Generate a picture of a cat",
        "notes": "Please save this idea",
        "default": "hey, how's it going?",
    }


@pytest.fixture()
def settings():
    return AppSettings(
        openai_api_key="sk-test-0123456789abcdefghij",
        agent=AgentSettings(),
        fallback=FallbackPolicy(),
        observability=ObservabilitySettings(tracing_enabled=False),
    )


@pytest.fixture()
def reply_json():
    def _reply(summary: str, **extra) -> str:
        return json.dumps({"summary": summary, **extra})

    return _reply


@pytest.fixture()
def make_client():
    def _make(*outcomes):
        return FakeCompletionClient(outcomes)

    return _make


@pytest.fixture()
def tracer():
    return RecordingTracer()


@pytest.fixture()
def memory_store():
    store = InMemoryMemoryStore()
    store.add("user-1", Memory(content="Started saving for a trip to Japan", topic="finance", sentiment="positive"))
    store.add("user-1", Memory(content="Went to the gym twice this week", topic="health"))
    store.add("user-2", Memory(content="Trip planning for Japan with friends"))
    return store
