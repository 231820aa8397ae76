import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .router import AgentCategory

DEFAULT_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.7

SUMMARY_KEYS = ("summary", "Summary", "response", "message")
NEXT_STEP_KEYS = ("nextStep", "next_step")
EMPTY_REPLY_SUMMARY = "I'm listening. Tell me more about what's on your mind."


@dataclass(frozen=True)
class ParsedReply:
    """Model content that decoded to a JSON object."""

    payload: Dict[str, Any]
    raw: str

    def summary(self) -> str:
        for key in SUMMARY_KEYS:
            value = self.payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return self.raw

    def next_step(self) -> Optional[str]:
        for key in NEXT_STEP_KEYS:
            value = self.payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None


@dataclass(frozen=True)
class RawReply:
    """Model content that was not a JSON object; the text itself is the summary."""

    raw: str

    def summary(self) -> str:
        return self.raw if self.raw.strip() else EMPTY_REPLY_SUMMARY

    def next_step(self) -> Optional[str]:
        return None


AgentReply = Union[ParsedReply, RawReply]


def parse_reply(content: Optional[str]) -> AgentReply:
    """Decode the model's JSON answer, keeping the raw text when it does not decode."""

    text = content or ""
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        return RawReply(raw=text)
    if not isinstance(decoded, dict):
        return RawReply(raw=text)
    return ParsedReply(payload=decoded, raw=text)


@dataclass
class AgentResponse:
    """What the companion hands back to the chat screen for one message."""

    summary: str
    agent: AgentCategory
    confidence: float = DEFAULT_CONFIDENCE
    next_step: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return bool(self.metadata.get("fallback_from"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "next_step": self.next_step,
            "agent": self.agent.value,
            "confidence": self.confidence,
        }
