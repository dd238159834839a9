"""Chat session endpoints for NagarSeva API v1.

A session is created first (it starts with the language-selection welcome
message), then every user turn is posted to it.  Attachments may be sent
either as an ``attachment`` object or inline as an ``[ATTACHMENT: ...]``
marker in ``text``.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request

from config.settings import settings
from src.models.chat import (
    CreateSessionRequest,
    SendMessageRequest,
    SessionResponse,
    TurnResponse,
)
from src.services.sessions import ChatSession, SessionStore

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _sessions(request: Request) -> SessionStore:
    sessions = getattr(request.app.state, "sessions", None)
    if sessions is None:
        raise HTTPException(status_code=503, detail="Chat service not available")
    return sessions


def _session_or_404(request: Request, session_id: str) -> ChatSession:
    session = _sessions(request).get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session


def _session_response(session: ChatSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.id,
        citizen_id=session.citizen_id,
        context=session.context,
        messages=session.history(),
    )


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(body: CreateSessionRequest, request: Request) -> SessionResponse:
    session = _sessions(request).create(body.citizen_id or settings.demo_citizen_id)
    return _session_response(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, request: Request) -> SessionResponse:
    return _session_response(_session_or_404(request, session_id))


@router.post("/sessions/{session_id}/messages", response_model=TurnResponse)
async def send_message(session_id: str, body: SendMessageRequest, request: Request) -> TurnResponse:
    """Process one user turn and return the bot reply."""
    if not body.text.strip() and body.attachment is None:
        raise HTTPException(status_code=422, detail="Message must have text or an attachment")

    session = _session_or_404(request, session_id)
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Chat service not available")

    async with session.lock:
        result = await orchestrator.process_message(session, body.text, body.attachment)

    return TurnResponse(
        session_id=session.id,
        user_message=result.user_message,
        reply=result.reply,
        context=result.context,
        action=result.action,
    )


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, request: Request) -> SessionResponse:
    session = _session_or_404(request, session_id)
    # Wait for an in-flight turn so it cannot write into the cleared session.
    async with session.lock:
        reset = _sessions(request).reset(session_id)
    if reset is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(reset)
