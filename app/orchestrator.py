"""Routes a chat message to its specialist agent and falls back to the default companion."""
from __future__ import annotations

import logging
import time
from typing import Any, Optional

from companion_agent.memory import MemoryStore, build_context_from_memories
from companion_agent.models import DEFAULT_CONFIDENCE, FALLBACK_CONFIDENCE, AgentReply, AgentResponse
from companion_agent.router import AgentCategory, route_message
from companion_agent.templates import build_system_prompt

from .agents.caller import AgentCaller
from .config import DEFAULT_MEMORY_CONTEXT_LIMIT, FallbackPolicy
from .exceptions import AgentCallError
from .observability import MetricsEmitter

logger = logging.getLogger(__name__)


class AgentOrchestrator:
    """Coordinates routing, memory context, the agent call, and the single fallback."""

    def __init__(
        self,
        caller: AgentCaller,
        memory_store: Optional[MemoryStore] = None,
        tracer: Optional[Any] = None,
        metrics_emitter: Optional[MetricsEmitter] = None,
        fallback_policy: FallbackPolicy | None = None,
        memory_context_limit: int = DEFAULT_MEMORY_CONTEXT_LIMIT,
    ) -> None:
        self.caller = caller
        self.memory_store = memory_store
        self.tracer = tracer
        self.metrics = metrics_emitter
        self.fallback_policy = fallback_policy or FallbackPolicy()
        self.memory_context_limit = memory_context_limit

    async def respond(self, message: str, user_id: Optional[str] = None) -> AgentResponse:
        """Answer ``message`` with the agent the router picks.

        When that agent's call fails and the fallback policy allows it, the
        message is retried once with the default companion and the answer is
        reported as coming from the default agent with lowered confidence.
        A failure of the default agent (first call or retry) propagates.
        """

        start_time = time.perf_counter()
        decision = route_message(message)
        category = decision.category
        logger.info("Routing to agent %s", category.value, extra={"keyword": decision.matched_keyword})
        if self.metrics:
            self.metrics.emit_agent_route(category, decision.matched_keyword)

        memory_context = await self._memory_context(user_id, message)

        try:
            reply = await self.caller.call(category, build_system_prompt(category, memory_context), message)
        except AgentCallError as exc:
            if not self.fallback_policy.allows(category):
                logger.error("Agent %s failed: %s", category.value, exc)
                raise

            logger.warning("Agent %s failed (%s); falling back to default companion", category.value, exc)
            if self.metrics:
                self.metrics.emit_agent_fallback(category, exc.status_code)

            fallback = AgentCategory.DEFAULT
            reply = await self.caller.call(fallback, build_system_prompt(fallback, memory_context), message)
            return await self._finish(
                fallback,
                message,
                reply,
                start_time,
                confidence=FALLBACK_CONFIDENCE,
                fallback_from=category,
            )

        return await self._finish(category, message, reply, start_time, confidence=DEFAULT_CONFIDENCE)

    async def _memory_context(self, user_id: Optional[str], message: str) -> str:
        if not user_id or self.memory_store is None:
            return ""
        try:
            memories = await self.memory_store.retrieve(user_id, message, limit=self.memory_context_limit)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Memory retrieval skipped: %s", exc, extra={"user_id": user_id})
            return ""
        if memories:
            logger.info("Retrieved memory context", extra={"user_id": user_id, "count": len(memories)})
        return build_context_from_memories(memories)

    async def _finish(
        self,
        category: AgentCategory,
        message: str,
        reply: AgentReply,
        start_time: float,
        *,
        confidence: float,
        fallback_from: AgentCategory | None = None,
    ) -> AgentResponse:
        summary = reply.summary()
        latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info("Agent %s responded in %.0fms", category.value, latency_ms)
        if self.metrics:
            self.metrics.emit_agent_latency(category, latency_ms)

        if self.tracer is not None:
            try:
                await self.tracer.log_run(category, message, summary, latency_ms)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Run tracing failed: %s", exc)

        metadata = {"latency_ms": latency_ms}
        if fallback_from is not None:
            metadata["fallback_from"] = fallback_from.value
        return AgentResponse(
            summary=summary,
            agent=category,
            confidence=confidence,
            next_step=reply.next_step(),
            metadata=metadata,
        )
