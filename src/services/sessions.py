"""In-memory chat session registry.

Sessions live in process memory only and expire after ``ttl_seconds`` of
inactivity.  A session's message log is append-only: the poller and the
turn pipeline both add messages, neither rewrites the log.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import structlog

from src.models.chat import ChatMessage
from src.models.conversation import ConversationContext
from src.models.enums import MessageSender
from src.services.messages import WELCOME_MESSAGE

logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class ChatSession:
    citizen_id: str
    id: str = field(default_factory=lambda: uuid4().hex)
    messages: list[ChatMessage] = field(default_factory=list)
    context: ConversationContext = field(default_factory=ConversationContext)
    last_active: datetime = field(default_factory=_now)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    """Serialises turns of the same session."""

    def append(self, message: ChatMessage) -> None:
        self.messages.append(message)
        self.last_active = _now()

    def history(self) -> list[ChatMessage]:
        """Snapshot of the message log."""
        return list(self.messages)


def welcome_message() -> ChatMessage:
    return ChatMessage(text=WELCOME_MESSAGE, sender=MessageSender.BOT)


class SessionStore:
    """Keeps live :class:`ChatSession` objects keyed by session id."""

    __slots__ = ("_sessions", "_ttl")

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self._sessions: dict[str, ChatSession] = {}
        self._ttl = timedelta(seconds=ttl_seconds)

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, citizen_id: str) -> ChatSession:
        """Open a session with the welcome message; expired sessions are dropped first."""
        self.prune()
        session = ChatSession(citizen_id=citizen_id)
        session.append(welcome_message())
        self._sessions[session.id] = session
        logger.info("session.created", session_id=session.id, citizen_id=citizen_id)
        return session

    def get(self, session_id: str, now: datetime | None = None) -> ChatSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session, now or _now()):
            self._sessions.pop(session_id, None)
            logger.info("session.expired", session_id=session_id)
            return None
        return session

    def reset(self, session_id: str) -> ChatSession | None:
        """Clear the log and context of a session, keeping its id."""
        session = self.get(session_id)
        if session is None:
            return None
        session.messages.clear()
        session.context = ConversationContext()
        session.append(welcome_message())
        logger.info("session.reset", session_id=session_id)
        return session

    def live_sessions(self) -> list[ChatSession]:
        return list(self._sessions.values())

    def _expired(self, session: ChatSession, now: datetime) -> bool:
        return now - session.last_active > self._ttl

    def prune(self, now: datetime | None = None) -> int:
        """Drop expired sessions and return how many were removed."""
        now = now or _now()
        expired = [sid for sid, s in self._sessions.items() if self._expired(s, now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("session.pruned", count=len(expired), remaining=len(self._sessions))
        return len(expired)
