"""Routing, prompt selection, and reply parsing for the companion chat agents."""

from .router import AgentCategory, RouteDecision, available_agents, detect_agent_intent, route_message
from .templates import build_system_prompt
from .models import AgentResponse, ParsedReply, RawReply, parse_reply
from .memory import InMemoryMemoryStore, Memory, MemoryStore, build_context_from_memories

__all__ = [
    "AgentCategory",
    "RouteDecision",
    "available_agents",
    "detect_agent_intent",
    "route_message",
    "build_system_prompt",
    "AgentResponse",
    "ParsedReply",
    "RawReply",
    "parse_reply",
    "InMemoryMemoryStore",
    "Memory",
    "MemoryStore",
    "build_context_from_memories",
]
