"""Health check endpoints for NagarSeva API v1.

Liveness and readiness probes for container deployments.  Readiness
checks the record store, the chat orchestrator and the notification
poller.
"""

from __future__ import annotations

import time

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe.  Does *not* check downstream dependencies."""
    start_time: float = getattr(request.app.state, "start_time", time.time())
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        uptime_seconds=round(time.time() - start_time, 2),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Readiness probe.

    The language model is reported but never fails readiness: without it
    the chatbot runs on the keyword fallback.
    """
    checks: dict[str, str] = {}
    all_ok = True

    store = getattr(request.app.state, "store", None)
    if store is not None:
        try:
            checks["store"] = "ok" if await store.ping() else "unreachable"
        except Exception as exc:
            checks["store"] = f"error: {exc!s}"
        all_ok = all_ok and checks["store"] == "ok"
    else:
        checks["store"] = "not_configured"
        all_ok = False

    if getattr(request.app.state, "orchestrator", None) is not None:
        checks["orchestrator"] = "ok"
    else:
        checks["orchestrator"] = "not_initialised"
        all_ok = False

    generator = getattr(request.app.state, "response_generator", None)
    checks["llm"] = "enabled" if generator is not None and generator.llm_enabled else "fallback_only"

    poller = getattr(request.app.state, "notification_poller", None)
    checks["notification_poller"] = "running" if poller is not None and poller.is_running else "stopped"

    sessions = getattr(request.app.state, "sessions", None)
    if sessions is not None:
        checks["sessions"] = f"ok ({len(sessions)} live)"

    status = "ready" if all_ok else "degraded"
    logger.info("health.readiness_check", status=status, checks=checks)
    return ReadinessResponse(status=status, checks=checks)
