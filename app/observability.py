"""Logging, run tracing, and lightweight metrics helpers for the agents."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from companion_agent.router import AgentCategory

from .config import ObservabilitySettings

MetricSink = Callable[[str, Dict[str, Any]], None]

PLACEHOLDER_KEY_MARKER = "your_"


def configure_logging(settings: ObservabilitySettings) -> None:
    """Configure structured logging according to the provided settings."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger(__name__).debug(
        "Logging configured", extra={"level": settings.log_level.upper()}
    )


class RunTracer:
    """Forwards completed agent runs to a LangSmith-compatible ``/runs`` endpoint.

    Tracing is best effort: every failure is logged and swallowed so it can
    never change the answer the user gets.
    """

    def __init__(
        self,
        settings: ObservabilitySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    @property
    def enabled(self) -> bool:
        key = self.settings.langsmith_api_key
        return bool(self.settings.tracing_enabled and key and PLACEHOLDER_KEY_MARKER not in key)

    def build_run(self, category: AgentCategory, message: str, output: str, latency_ms: float) -> Dict[str, Any]:
        agent = AgentCategory(category).value
        return {
            "name": f"{self.settings.run_name_prefix}_{agent}",
            "run_type": "llm",
            "inputs": {"message": message},
            "outputs": {"response": output},
            "extra": {"latency_ms": latency_ms, "agent_type": agent},
            "project_name": self.settings.langsmith_project,
        }

    async def log_run(self, category: AgentCategory, message: str, output: str, latency_ms: float) -> None:
        if not self.enabled:
            return

        url = f"{self.settings.langsmith_base_url.rstrip('/')}/runs"
        payload = self.build_run(category, message, output, latency_ms)
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"x-api-key": self.settings.langsmith_api_key or ""},
                )
                response.raise_for_status()
            self.logger.debug("Run traced", extra={"agent": payload["extra"]["agent_type"]})
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Run tracing failed: %s", exc, extra={"agent": payload["extra"]["agent_type"]})


@dataclass
class MetricsEmitter:
    """Simple metrics helper that fans out to configured sinks."""

    sinks: Iterable[MetricSink] = field(default_factory=list)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def _emit(self, name: str, payload: Dict[str, Any]) -> None:
        self.logger.info("metric.%s", name, extra={"metric": payload})

        for sink in self.sinks:
            try:
                sink(name, payload)
            except Exception:
                self.logger.exception("Metric sink failed", extra={"metric_name": name})

    def emit_token_usage(
        self,
        stage: str,
        prompt_tokens: int,
        completion_tokens: int,
        model: Optional[str] = None,
    ) -> None:
        payload = {
            "stage": stage,
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
        }
        if model:
            payload["model"] = model
        self._emit("token_usage", payload)

    def emit_agent_route(self, category: AgentCategory, matched_keyword: Optional[str]) -> None:
        self._emit("agent_route", {"agent": AgentCategory(category).value, "keyword": matched_keyword})

    def emit_agent_fallback(self, failed: AgentCategory, status_code: Optional[int]) -> None:
        self._emit("agent_fallback", {"failed_agent": AgentCategory(failed).value, "status_code": status_code})

    def emit_agent_latency(self, category: AgentCategory, latency_ms: float) -> None:
        self._emit("agent_latency", {"agent": AgentCategory(category).value, "latency_ms": latency_ms})

    def emit_metric(self, name: str, value: float, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a generic metric."""
        payload = {"value": value}
        if extra:
            payload.update(extra)
        self._emit(name, payload)
