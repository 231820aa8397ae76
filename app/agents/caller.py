"""Chat-completion caller shared by every companion agent."""
from __future__ import annotations

import logging
from typing import Any, Optional

from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from app.config import AppSettings
from app.exceptions import AgentCallError, ConfigurationError
from app.observability import MetricsEmitter
from companion_agent.models import AgentReply, RawReply, parse_reply
from companion_agent.router import AgentCategory

logger = logging.getLogger(__name__)


def build_client(settings: AppSettings) -> Optional[AsyncOpenAI]:
    """Create the async OpenAI client, or ``None`` when no API key is configured."""

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not configured; agents will not be able to respond")
        return None
    kwargs: dict = {"api_key": settings.openai_api_key}
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    if settings.agent.timeout_seconds is not None:
        kwargs["timeout"] = settings.agent.timeout_seconds
    return AsyncOpenAI(**kwargs)


class AgentCaller:
    """Sends one system prompt plus the user's message and parses the JSON reply."""

    def __init__(
        self,
        settings: AppSettings,
        client: Optional[Any] = None,
        metrics_emitter: Optional[MetricsEmitter] = None,
    ) -> None:
        self.settings = settings
        self.client = client if client is not None else build_client(settings)
        self.metrics = metrics_emitter

    def build_request(self, system_prompt: str, message: str) -> dict:
        agent = self.settings.agent
        return {
            "model": agent.model,
            "temperature": agent.temperature,
            "max_tokens": agent.max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            "response_format": {"type": "json_object"},
        }

    async def call(self, category: AgentCategory, system_prompt: str, message: str) -> AgentReply:
        """
        Run a single chat completion for ``category``.

        Raises:
            ConfigurationError: no client could be built (missing API key).
            AgentCallError: non-2xx response, transport failure or any other
                SDK error; carries the category and, for HTTP failures, the
                status code.
        """
        category = AgentCategory(category)
        if self.client is None:
            raise ConfigurationError("OpenAI client not available - set OPENAI_API_KEY")

        try:
            response = await self.client.chat.completions.create(**self.build_request(system_prompt, message))
        except APIStatusError as exc:
            raise AgentCallError(category, status_code=exc.status_code, detail=exc.message) from exc
        except APIConnectionError as exc:
            # Also covers APITimeoutError.
            raise AgentCallError(category, detail=str(exc)) from exc
        except APIError as exc:
            raise AgentCallError(category, detail=str(exc)) from exc

        usage = getattr(response, "usage", None)
        if self.metrics and usage is not None:
            self.metrics.emit_token_usage(
                stage=f"agent_{category.value}",
                prompt_tokens=getattr(usage, "prompt_tokens", 0),
                completion_tokens=getattr(usage, "completion_tokens", 0),
                model=self.settings.agent.model,
            )

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            logger.warning("Agent %s returned empty content", category.value)

        reply = parse_reply(content)
        if isinstance(reply, RawReply) and content:
            logger.warning("Agent %s reply was not a JSON object; using raw content", category.value)
        return reply
