"""Runtime wiring for the companion agent orchestrator."""
from __future__ import annotations

import logging
from typing import Any, Optional

from companion_agent.memory import InMemoryMemoryStore, MemoryStore

from app.agents.caller import AgentCaller
from app.config import AppSettings, load_settings
from app.observability import MetricsEmitter, RunTracer
from app.orchestrator import AgentOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Optional[AppSettings] = None,
    *,
    client: Optional[Any] = None,
    memory_store: Optional[MemoryStore] = None,
    metrics: Optional[MetricsEmitter] = None,
) -> AgentOrchestrator:
    """Construct an orchestrator from explicit settings.

    ``client`` replaces the OpenAI client and ``memory_store`` the default
    process-local store, which is how tests inject fakes.
    """

    settings = settings or load_settings()
    metrics = metrics or MetricsEmitter()
    caller = AgentCaller(settings, client=client, metrics_emitter=metrics)
    tracer = RunTracer(settings.observability)
    if not tracer.enabled:
        logger.info("Run tracing disabled (no LangSmith key configured)")

    return AgentOrchestrator(
        caller=caller,
        memory_store=memory_store if memory_store is not None else InMemoryMemoryStore(),
        tracer=tracer,
        metrics_emitter=metrics,
        fallback_policy=settings.fallback,
        memory_context_limit=settings.memory_context_limit,
    )
