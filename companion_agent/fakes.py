from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Union

import httpx
from openai import APIConnectionError, APIResponseValidationError, APIStatusError

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"

Outcome = Union[str, BaseException]


def make_status_error(status_code: int, message: str = "upstream error") -> APIStatusError:
    """Build the SDK error raised for a non-2xx chat completion response."""

    request = httpx.Request("POST", CHAT_COMPLETIONS_URL)
    response = httpx.Response(status_code, request=request, json={"error": {"message": message}})
    return APIStatusError(message, response=response, body={"error": {"message": message}})


def make_connection_error() -> APIConnectionError:
    """Build the SDK error raised when the completion endpoint cannot be reached."""

    return APIConnectionError(request=httpx.Request("POST", CHAT_COMPLETIONS_URL))


def make_validation_error() -> APIResponseValidationError:
    """Build the SDK error raised when a 2xx response body does not match the expected schema."""

    request = httpx.Request("POST", CHAT_COMPLETIONS_URL)
    response = httpx.Response(200, request=request, json={"unexpected": True})
    return APIResponseValidationError(response=response, body={"unexpected": True})


def make_completion(content: str, prompt_tokens: int = 12, completion_tokens: int = 8) -> SimpleNamespace:
    message = SimpleNamespace(role="assistant", content=content)
    return SimpleNamespace(
        choices=[SimpleNamespace(index=0, message=message, finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class _FakeCompletions:
    def __init__(self, owner: "FakeCompletionClient") -> None:
        self._owner = owner

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        return self._owner._next(kwargs)


class FakeCompletionClient:
    """Deterministic stand-in for ``AsyncOpenAI`` that replays queued outcomes.

    Each outcome is either reply content (returned as a completion) or an
    exception (raised). Once the queue is exhausted the last outcome repeats.
    """

    def __init__(self, outcomes: Iterable[Outcome]):
        self.outcomes: List[Outcome] = list(outcomes)
        if not self.outcomes:
            raise ValueError("FakeCompletionClient needs at least one outcome")
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=_FakeCompletions(self))

    @property
    def system_prompts(self) -> List[str]:
        return [call["messages"][0]["content"] for call in self.calls]

    def _next(self, kwargs: Dict[str, Any]) -> SimpleNamespace:
        self.calls.append(kwargs)
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return make_completion(outcome)


class RecordingTracer:
    """Tracer double that keeps every run it is asked to log."""

    def __init__(self) -> None:
        self.runs: List[Dict[str, Any]] = []

    async def log_run(self, category: Any, message: str, output: str, latency_ms: float) -> None:
        self.runs.append(
            {"category": category, "message": message, "output": output, "latency_ms": latency_ms}
        )


__all__ = [
    "FakeCompletionClient",
    "RecordingTracer",
    "make_completion",
    "make_connection_error",
    "make_status_error",
    "make_validation_error",
]
