from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from companion_agent.router import AgentCategory


class ChatRequest(BaseModel):
    message: str = Field("", description="The user's chat message.")
    user_id: Optional[str] = Field(
        None,
        description="Identifier used to look up memories from earlier sessions.",
    )


class ChatResponse(BaseModel):
    summary: str
    next_step: Optional[str] = None
    agent: Optional[AgentCategory] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    error: Optional[str] = None


class RouteRequest(BaseModel):
    message: str = Field("", description="Message to classify without calling any agent.")


class RouteResponse(BaseModel):
    agent: AgentCategory
    matched_keyword: Optional[str] = None


class AgentInfo(BaseModel):
    name: AgentCategory
    description: str


class AgentList(BaseModel):
    agents: List[AgentInfo]


class MemoryCreate(BaseModel):
    user_id: str
    content: str = Field(..., min_length=1)
    topic: Optional[str] = None
    sentiment: Optional[str] = None


class MemoryCreated(BaseModel):
    user_id: str
    stored: bool = True
