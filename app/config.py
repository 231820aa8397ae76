"""Environment-driven configuration helpers for the companion agents."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Mapping, MutableMapping, Optional

from dotenv import load_dotenv

from companion_agent.router import AgentCategory

DEFAULT_AGENT_MODEL = "gpt-4o-mini"
DEFAULT_AGENT_TEMPERATURE = 0.85
DEFAULT_AGENT_MAX_TOKENS = 400
DEFAULT_MEMORY_CONTEXT_LIMIT = 5
DEFAULT_LANGSMITH_BASE_URL = "https://api.smith.langchain.com"
DEFAULT_LANGSMITH_PROJECT = "happiness-ai"
DEFAULT_ENV_FILE = Path(".env")

SPECIALIST_CATEGORIES: FrozenSet[AgentCategory] = frozenset(
    category for category in AgentCategory if category is not AgentCategory.DEFAULT
)


def _to_bool(value: Optional[str], *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def _to_categories(value: Optional[str]) -> FrozenSet[AgentCategory]:
    if value is None or not value.strip():
        return SPECIALIST_CATEGORIES
    names = [item.strip().lower() for item in value.split(",") if item.strip()]
    return frozenset(AgentCategory(name) for name in names) - {AgentCategory.DEFAULT}


def validate_api_key(key: Optional[str]) -> bool:
    """Return True when ``key`` looks like a usable OpenAI secret key."""

    return bool(key and len(key) > 20 and key.startswith("sk-"))


@dataclass
class ObservabilitySettings:
    """Tracing and logging toggles."""

    tracing_enabled: bool = False
    langsmith_api_key: Optional[str] = None
    langsmith_base_url: str = DEFAULT_LANGSMITH_BASE_URL
    langsmith_project: str = DEFAULT_LANGSMITH_PROJECT
    run_name_prefix: str = "happiness_ai"
    log_level: str = "INFO"


@dataclass
class AgentSettings:
    """Parameters for every chat completion the agents send."""

    model: str = DEFAULT_AGENT_MODEL
    temperature: float = DEFAULT_AGENT_TEMPERATURE
    max_tokens: int = DEFAULT_AGENT_MAX_TOKENS
    timeout_seconds: Optional[float] = None  # None keeps the SDK default


@dataclass
class FallbackPolicy:
    """Which failed specialists get one retry through the default companion."""

    enabled: bool = True
    categories: FrozenSet[AgentCategory] = SPECIALIST_CATEGORIES

    def allows(self, category: AgentCategory) -> bool:
        return self.enabled and category is not AgentCategory.DEFAULT and category in self.categories


@dataclass
class AppSettings:
    """Aggregated configuration for the application."""

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    agent: AgentSettings = field(default_factory=AgentSettings)
    fallback: FallbackPolicy = field(default_factory=FallbackPolicy)
    memory_context_limit: int = DEFAULT_MEMORY_CONTEXT_LIMIT
    observability: ObservabilitySettings = field(default_factory=ObservabilitySettings)

    @property
    def has_valid_api_key(self) -> bool:
        return validate_api_key(self.openai_api_key)


def load_settings(env: Mapping[str, str] | MutableMapping[str, str] | None = None, env_file: Optional[Path] = None) -> AppSettings:
    """Load settings from the provided environment mapping (defaults to ``os.environ``).

    A ``.env`` file is read first when the process environment is used; values
    already set in the environment win over the file.
    """

    if env is None:
        env_file_path = env_file or DEFAULT_ENV_FILE
        if env_file_path.exists():
            load_dotenv(env_file_path, override=False)
        env = os.environ

    agent = AgentSettings(
        model=env.get("OPENAI_AGENT_MODEL", DEFAULT_AGENT_MODEL),
        temperature=float(env.get("AGENT_TEMPERATURE", DEFAULT_AGENT_TEMPERATURE)),
        max_tokens=int(env.get("AGENT_MAX_TOKENS", DEFAULT_AGENT_MAX_TOKENS)),
        timeout_seconds=_to_optional_float(env.get("AGENT_TIMEOUT_SECONDS")),
    )

    fallback = FallbackPolicy(
        enabled=_to_bool(env.get("AGENT_FALLBACK_ENABLED"), default=True),
        categories=_to_categories(env.get("AGENT_FALLBACK_CATEGORIES")),
    )

    observability = ObservabilitySettings(
        tracing_enabled=_to_bool(env.get("TRACING_ENABLED"), default=True),
        langsmith_api_key=env.get("LANGSMITH_API_KEY"),
        langsmith_base_url=env.get("LANGSMITH_BASE_URL", DEFAULT_LANGSMITH_BASE_URL),
        langsmith_project=env.get("LANGSMITH_PROJECT", DEFAULT_LANGSMITH_PROJECT),
        run_name_prefix=env.get("LANGSMITH_RUN_PREFIX", "happiness_ai"),
        log_level=env.get("LOG_LEVEL", "INFO"),
    )

    return AppSettings(
        openai_api_key=env.get("OPENAI_API_KEY"),
        openai_base_url=env.get("OPENAI_BASE_URL"),
        agent=agent,
        fallback=fallback,
        memory_context_limit=int(env.get("MEMORY_CONTEXT_LIMIT", DEFAULT_MEMORY_CONTEXT_LIMIT)),
        observability=observability,
    )
