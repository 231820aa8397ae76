"""Keyword router that picks the specialist agent for a chat message."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Tuple


class AgentCategory(str, Enum):
    """Specialist agents a message can be routed to."""

    FINANCIAL = "financial"
    WELLNESS = "wellness"
    PLANNER = "planner"
    LEARNING = "learning"
    RELATIONSHIP = "relationship"
    MEDIA = "media"
    NOTES = "notes"
    DEFAULT = "default"


@dataclass(frozen=True)
class RouteDecision:
    """Represents the routing decision for a single incoming message."""

    category: AgentCategory
    matched_keyword: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.category is AgentCategory.DEFAULT


def _keywords(*words: str) -> Pattern[str]:
    return re.compile(r"\b(" + "|".join(words) + r")\b")


# Evaluated top to bottom; the first match wins. "remind" appears in both
# planner and notes, so planner takes it.
ROUTING_RULES: Tuple[Tuple[Pattern[str], AgentCategory], ...] = (
    (
        _keywords(
            "money", "budget", "invest", "stock", "crypto", "finance", "bank",
            "saving", "spending", "income", "expense", "401k", "retirement",
            "wealth", "market", "trading",
        ),
        AgentCategory.FINANCIAL,
    ),
    (
        _keywords(
            "health", "workout", "exercise", "gym", "diet", "nutrition", "sleep",
            "stress", "anxiety", "anxious", "meditation", "mindful", "weight",
            "fitness", "yoga", "therapy", "mental", "emotion",
        ),
        AgentCategory.WELLNESS,
    ),
    (
        _keywords(
            "plan", "schedule", "task", "todo", "goal", "deadline", "calendar",
            "remind", "meeting", "appointment", "organize", "priority", "week",
            "month", "today", "tomorrow",
        ),
        AgentCategory.PLANNER,
    ),
    (
        _keywords(
            "learn", "study", "course", "book", "skill", "tutorial", "teach",
            "education", "training", "practice", "improve", "knowledge",
            "research", "read",
        ),
        AgentCategory.LEARNING,
    ),
    (
        _keywords(
            "friend", "family", "relationship", "partner", "dating", "social",
            "love", "marriage", "colleague", "boss", "parent", "child",
            "brother", "sister", "conflict", "communication",
        ),
        AgentCategory.RELATIONSHIP,
    ),
    (
        _keywords(
            "image", "photo", "video", "music", "art", "creative", "design",
            "draw", "generate", "create", "picture", "movie", "podcast",
            "content", "visual",
        ),
        AgentCategory.MEDIA,
    ),
    (
        _keywords(
            "note", "remember", "remind", "save", "recall", "memory", "document",
            "idea", "thought", "journal", "write", "record",
        ),
        AgentCategory.NOTES,
    ),
)

AGENT_DESCRIPTIONS = {
    AgentCategory.DEFAULT: "General companion & conversation",
    AgentCategory.FINANCIAL: "Money, budgets & investments",
    AgentCategory.WELLNESS: "Health, fitness & mental wellness",
    AgentCategory.PLANNER: "Tasks, goals & scheduling",
    AgentCategory.LEARNING: "Education & skill development",
    AgentCategory.RELATIONSHIP: "Relationships & social",
    AgentCategory.MEDIA: "Creative & content generation",
    AgentCategory.NOTES: "Knowledge & memory",
}


def route_message(message: Optional[str]) -> RouteDecision:
    """
    Map a chat message to exactly one specialist agent.

    Rules in ``ROUTING_RULES`` are tried in order against the lower-cased
    message and the first one that matches decides the category. Messages
    that match nothing (including empty ones) go to the default companion.
    """

    normalized = (message or "").lower()
    for pattern, category in ROUTING_RULES:
        match = pattern.search(normalized)
        if match:
            return RouteDecision(category=category, matched_keyword=match.group(0))
    return RouteDecision(category=AgentCategory.DEFAULT)


def detect_agent_intent(message: Optional[str]) -> AgentCategory:
    """Return the category :func:`route_message` would pick for ``message``."""

    return route_message(message).category


def available_agents() -> List[Tuple[AgentCategory, str]]:
    return list(AGENT_DESCRIPTIONS.items())
