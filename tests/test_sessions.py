"""Tests for the in-memory chat session registry."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from src.models.chat import ChatMessage
from src.models.conversation import ConversationContext
from src.models.enums import ChatLanguage, MessageSender
from src.services.messages import WELCOME_MESSAGE
from src.services.sessions import SessionStore


class TestSessionStore:
    def test_new_session_starts_with_welcome(self) -> None:
        sessions = SessionStore()
        session = sessions.create("c1")
        assert session.citizen_id == "c1"
        assert len(session.messages) == 1
        assert session.messages[0].sender == MessageSender.BOT
        assert session.messages[0].text == WELCOME_MESSAGE
        assert sessions.get(session.id) is session
        assert len(sessions) == 1

    def test_unknown_session(self) -> None:
        assert SessionStore().get("nope") is None

    def test_expired_session_is_dropped(self) -> None:
        sessions = SessionStore(ttl_seconds=60)
        session = sessions.create("c1")
        later = session.last_active + timedelta(seconds=61)
        assert sessions.get(session.id, now=later) is None
        assert len(sessions) == 0

    def test_activity_extends_the_session(self) -> None:
        sessions = SessionStore(ttl_seconds=60)
        session = sessions.create("c1")
        session.append(ChatMessage(text="hi", sender=MessageSender.USER))
        assert sessions.get(session.id, now=session.last_active + timedelta(seconds=59)) is session

    def test_prune(self) -> None:
        sessions = SessionStore(ttl_seconds=60)
        stale = sessions.create("c1")
        fresh = sessions.create("c2")
        stale.last_active = datetime.now(UTC) - timedelta(minutes=5)
        assert sessions.prune() == 1
        assert sessions.live_sessions() == [fresh]

    def test_create_drops_expired_sessions(self) -> None:
        sessions = SessionStore(ttl_seconds=60)
        stale = sessions.create("c1")
        stale.last_active = datetime.now(UTC) - timedelta(minutes=5)
        fresh = sessions.create("c2")
        assert sessions.live_sessions() == [fresh], (
            "abandoned sessions are dropped even when nothing else sweeps the store"
        )

    def test_reset_keeps_id_and_clears_state(self) -> None:
        sessions = SessionStore()
        session = sessions.create("c1")
        session.append(ChatMessage(text="road", sender=MessageSender.USER))
        session.context = ConversationContext(language=ChatLanguage.HI)

        reset = sessions.reset(session.id)
        assert reset is not None and reset.id == session.id
        assert reset.context == ConversationContext()
        assert [m.text for m in reset.messages] == [WELCOME_MESSAGE]

    def test_history_is_a_snapshot(self) -> None:
        session = SessionStore().create("c1")
        snapshot = session.history()
        session.append(ChatMessage(text="later", sender=MessageSender.BOT))
        assert len(snapshot) == 1
