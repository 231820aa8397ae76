from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from companion_agent.memory import InMemoryMemoryStore, Memory
from companion_agent.router import available_agents, route_message

from app.config import load_settings, validate_api_key
from app.exceptions import AgentCallError, AgentError, ConfigurationError
from app.observability import MetricsEmitter, configure_logging
from app.runtime import build_orchestrator
from app.schemas import (
    AgentInfo,
    AgentList,
    ChatRequest,
    ChatResponse,
    MemoryCreate,
    MemoryCreated,
    RouteRequest,
    RouteResponse,
)

# Ensure .env is loaded even if uvicorn is started from a different CWD.
_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(_DOTENV_PATH, override=False)
settings = load_settings()
configure_logging(settings.observability)
logger = logging.getLogger("app")
metrics = MetricsEmitter()

if settings.openai_api_key:
    logger.info("OPENAI_API_KEY detected (length=%s)", len(settings.openai_api_key))
else:
    logger.warning("OPENAI_API_KEY not detected; chat replies will report a configuration error")

app = FastAPI(title="Companion Agents API", version="0.1.0")

allowed_origins = os.getenv("ALLOWED_ORIGINS", "*")
if allowed_origins != "*":
    allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if isinstance(allowed_origins, list) else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        response = await call_next(request)
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response


app.add_middleware(LoggingMiddleware)

_memory_store = InMemoryMemoryStore()
_orchestrator = build_orchestrator(settings, memory_store=_memory_store, metrics=metrics)


def error_reply(exc: Exception) -> ChatResponse:
    """Turn a terminal agent failure into the companion's 'try again' answer."""

    if isinstance(exc, ConfigurationError):
        return ChatResponse(
            summary="I'm not fully connected yet. Please check the API configuration.",
            error="Missing API key",
        )
    if isinstance(exc, AgentCallError):
        if exc.status_code is None:
            return ChatResponse(
                summary="I'm having trouble connecting. Check your internet and we'll try again.",
                error="Network error",
            )
        if exc.status_code == 401:
            return ChatResponse(
                summary="My connection seems to be having issues. Can you check back in a moment?",
                error="Invalid API key",
            )
        if exc.status_code == 429:
            return ChatResponse(
                summary="I'm a bit overwhelmed right now. Give me a second to catch my breath.",
                error="Rate limited",
            )
        if exc.status_code in (500, 503):
            return ChatResponse(
                summary="Something's happening on my end. Let's try that again in a sec.",
                error="Server error",
            )
        return ChatResponse(
            summary="I had a hiccup there. Mind trying that again?",
            error=f"API error {exc.status_code}",
        )
    return ChatResponse(summary="Something went sideways there. Let's try that again.", error=str(exc))


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/health/ready")
async def readiness_check() -> dict:
    """Readiness check - verifies an OpenAI API key is configured and well formed."""
    has_api_key = bool(settings.openai_api_key)
    key_valid = validate_api_key(settings.openai_api_key)
    return {
        "status": "ready" if key_valid else "degraded",
        "openai_api_key_configured": has_api_key,
        "openai_api_key_valid": key_valid,
        "model": settings.agent.model,
        "fallback_enabled": settings.fallback.enabled,
        "tracing_enabled": _orchestrator.tracer.enabled if _orchestrator.tracer is not None else False,
    }


@app.get("/v1/agents", response_model=AgentList)
async def list_agents() -> AgentList:
    """List the specialist agents messages can be routed to."""
    return AgentList(agents=[AgentInfo(name=name, description=description) for name, description in available_agents()])


@app.post("/v1/agents/route", response_model=RouteResponse)
async def route(payload: RouteRequest) -> RouteResponse:
    """Classify a message without calling any agent."""
    decision = route_message(payload.message)
    return RouteResponse(agent=decision.category, matched_keyword=decision.matched_keyword)


@app.post("/v1/memories", response_model=MemoryCreated, status_code=201)
async def create_memory(payload: MemoryCreate) -> MemoryCreated:
    """Remember a snippet so later chats from the same user can reference it."""
    _memory_store.add(
        payload.user_id,
        Memory(content=payload.content, topic=payload.topic, sentiment=payload.sentiment),
    )
    return MemoryCreated(user_id=payload.user_id)


@app.post("/v1/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest) -> ChatResponse:
    """Answer a chat message through the routed specialist agent."""

    if not payload.message.strip():
        return ChatResponse(summary="I didn't catch that. What's on your mind?", error="Empty input")

    if settings.openai_api_key and not validate_api_key(settings.openai_api_key):
        logger.error("OpenAI API key appears invalid: %s...", settings.openai_api_key[:10])
        return ChatResponse(
            summary="There's something off with my connection. Let me know if this keeps happening.",
            error="Invalid API key format",
        )

    try:
        result = await _orchestrator.respond(payload.message, user_id=payload.user_id)
    except AgentError as exc:
        logger.error("Chat reply failed: %s", exc)
        metrics.emit_metric("chat.failed", 1, extra={"error": type(exc).__name__})
        return error_reply(exc)

    return ChatResponse(
        summary=result.summary,
        next_step=result.next_step,
        agent=result.agent,
        confidence=result.confidence,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.error("HTTP error %s: %s", exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
