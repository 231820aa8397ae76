"""Past-conversation memories and the context block built from them."""
from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

_WORD = re.compile(r"[a-z0-9']+")


@dataclass
class Memory:
    """A remembered snippet from an earlier session."""

    content: str
    topic: Optional[str] = None
    sentiment: Optional[str] = None
    similarity: Optional[float] = None


@runtime_checkable
class MemoryStore(Protocol):
    async def retrieve(self, user_id: str, message: str, limit: int = 5) -> List[Memory]:
        ...


def build_context_from_memories(memories: Iterable[Memory]) -> str:
    """Format memories as the numbered block that gets embedded in the system prompt."""

    lines: List[str] = []
    for index, memory in enumerate(memories, start=1):
        topic = f" [{memory.topic}]" if memory.topic else ""
        sentiment = f" ({memory.sentiment})" if memory.sentiment else ""
        lines.append(f"Memory {index}{topic}{sentiment}: {memory.content}")
    if not lines:
        return ""
    body = "\n\n".join(lines)
    return f"\n\n--- User's Relevant Memories ---\n{body}\n--- End of Memories ---\n\n"


def _tokens(text: str) -> set:
    return set(_WORD.findall(text.lower()))


class InMemoryMemoryStore:
    """Per-user memory list ranked by word overlap with the incoming message.

    Stands in for the hosted vector search; similarity is the Jaccard overlap
    of the two word sets.
    """

    def __init__(self, threshold: float = 0.0) -> None:
        self.threshold = threshold
        self._memories: Dict[str, List[Memory]] = defaultdict(list)

    def add(self, user_id: str, memory: Memory) -> None:
        self._memories[user_id].append(memory)

    async def retrieve(self, user_id: str, message: str, limit: int = 5) -> List[Memory]:
        query = _tokens(message)
        if not query:
            return []

        scored: List[Memory] = []
        for memory in self._memories.get(user_id, []):
            words = _tokens(memory.content)
            if not words:
                continue
            score = len(query & words) / len(query | words)
            if score > self.threshold:
                scored.append(
                    Memory(
                        content=memory.content,
                        topic=memory.topic,
                        sentiment=memory.sentiment,
                        similarity=score,
                    )
                )
        scored.sort(key=lambda item: item.similarity or 0.0, reverse=True)
        return scored[:limit]
