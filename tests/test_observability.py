import asyncio
import json
import logging

import httpx

from app.config import ObservabilitySettings
from app.observability import MetricsEmitter, RunTracer
from companion_agent.router import AgentCategory


def tracing_settings(**overrides):
    values = dict(tracing_enabled=True, langsmith_api_key="ls-key-123", langsmith_base_url="https://smith.test/")
    values.update(overrides)
    return ObservabilitySettings(**values)


def test_log_run_posts_trace_payload():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"ok": True})

    tracer = RunTracer(tracing_settings(), transport=httpx.MockTransport(handler))
    asyncio.run(tracer.log_run(AgentCategory.WELLNESS, "need sleep", "Try winding down earlier.", 123.4))

    request = captured[0]
    assert str(request.url) == "https://smith.test/runs"
    assert request.headers["x-api-key"] == "ls-key-123"
    assert json.loads(request.content) == {
        "name": "happiness_ai_wellness",
        "run_type": "llm",
        "inputs": {"message": "need sleep"},
        "outputs": {"response": "Try winding down earlier."},
        "extra": {"latency_ms": 123.4, "agent_type": "wellness"},
        "project_name": "happiness-ai",
    }


def test_tracer_disabled_without_key_or_with_placeholder():
    def handler(request):
        raise AssertionError("no request expected")

    for settings in (
        tracing_settings(langsmith_api_key=None),
        tracing_settings(langsmith_api_key="your_langsmith_key"),
        tracing_settings(tracing_enabled=False),
    ):
        tracer = RunTracer(settings, transport=httpx.MockTransport(handler))
        assert not tracer.enabled
        asyncio.run(tracer.log_run(AgentCategory.DEFAULT, "hi", "hello", 1.0))


def test_tracer_swallows_http_and_transport_errors(caplog):
    def server_error(request):
        return httpx.Response(500)

    def unreachable(request):
        raise httpx.ConnectError("down", request=request)

    with caplog.at_level(logging.WARNING, logger="app.observability"):
        for handler in (server_error, unreachable):
            tracer = RunTracer(tracing_settings(), transport=httpx.MockTransport(handler))
            asyncio.run(tracer.log_run(AgentCategory.NOTES, "note", "noted", 2.0))

    assert sum("Run tracing failed" in record.message for record in caplog.records) == 2


def test_metrics_sink_failure_is_logged_not_raised(caplog):
    received = []

    def broken_sink(name, payload):
        raise RuntimeError("sink down")

    emitter = MetricsEmitter(sinks=[broken_sink, lambda name, payload: received.append((name, payload))])
    with caplog.at_level(logging.ERROR):
        emitter.emit_agent_fallback(AgentCategory.PLANNER, 503)

    assert received == [("agent_fallback", {"failed_agent": "planner", "status_code": 503})]
    assert any("Metric sink failed" in record.message for record in caplog.records)
