"""Custom exceptions for agent failures."""
from __future__ import annotations

from typing import Optional

from companion_agent.router import AgentCategory


class AgentError(RuntimeError):
    """Base exception for agent failures."""
    pass


class AgentCallError(AgentError):
    """Raised when the chat completion for an agent fails in transport or with a non-2xx status."""

    def __init__(self, category: AgentCategory, status_code: Optional[int] = None, detail: str = "") -> None:
        self.category = AgentCategory(category)
        self.status_code = status_code
        self.detail = detail
        status = f"API error: {status_code}" if status_code is not None else "request failed"
        message = f"Agent {self.category.value} {status}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConfigurationError(AgentError):
    """Raised when the agents are asked to run without usable configuration."""
    pass
