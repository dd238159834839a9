"""Tests for broadcast notifications and the chat poller.

All tests run against the in-memory store; the poller is driven through
``poll_once`` rather than its background loop, except for the lifecycle
tests.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from src.models.enums import MessageSender
from src.models.records import Notification
from src.services.notifications import (
    NOTIFICATION_READS,
    NOTIFICATIONS,
    UNREAD_LIMIT,
    NotificationPoller,
    NotificationService,
    format_notification,
)
from src.services.sessions import SessionStore
from src.services.store import InMemoryRecordStore, StoreError


class _BrokenStore(InMemoryRecordStore):
    async def select(self, table: str, filters: dict | None = None) -> list[dict]:
        raise StoreError("connection reset")

    async def get(self, table: str, row_id: str) -> dict | None:
        raise StoreError("connection reset")


async def _insert(store: InMemoryRecordStore, title: str, minutes_ago: int = 0) -> Notification:
    notification = Notification(
        title=title,
        message=f"{title} details",
        created_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
    )
    await store.insert(NOTIFICATIONS, notification.model_dump(mode="json"))
    return notification


@pytest.fixture()
def service(store: InMemoryRecordStore) -> NotificationService:
    return NotificationService(store)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestFormatNotification:
    def test_title_and_message(self) -> None:
        notification = Notification(title="Water cut", message="Ward 5, Sunday 10-4")
        assert format_notification(notification) == "📢 *Water cut*\n\nWard 5, Sunday 10-4"


# ---------------------------------------------------------------------------
# NotificationService
# ---------------------------------------------------------------------------


class TestGetUnread:
    async def test_newest_first_and_limited(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        for i in range(UNREAD_LIMIT + 2):
            await _insert(store, f"n{i}", minutes_ago=i)
        unread = await service.get_unread("c1")
        assert [n.title for n in unread] == [f"n{i}" for i in range(UNREAD_LIMIT)], (
            f"only the {UNREAD_LIMIT} newest notifications are offered, newest first"
        )

    async def test_read_ones_are_hidden(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        first = await _insert(store, "first", minutes_ago=1)
        await _insert(store, "second")
        await service.mark_as_read(first.id, "c1")

        assert [n.title for n in await service.get_unread("c1")] == ["second"]
        assert len(await service.get_unread("c2")) == 2, "reads are tracked per citizen"

    async def test_store_failure_is_empty(self) -> None:
        assert await NotificationService(_BrokenStore()).get_unread("c1") == []


class TestMarkAsRead:
    async def test_idempotent(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        notification = await _insert(store, "n")
        assert await service.mark_as_read(notification.id, "c1") is True
        assert await service.mark_as_read(notification.id, "c1") is True
        assert await store.count(NOTIFICATION_READS) == 1, "a pair is only recorded once"

    async def test_store_failure(self) -> None:
        assert await NotificationService(_BrokenStore()).mark_as_read("n", "c1") is False


class TestVerifyActive:
    async def test_filters_deleted(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        kept = await _insert(store, "kept")
        gone = await _insert(store, "gone")
        await service.delete_notification(gone.id)
        assert await service.verify_active([kept.id, gone.id]) == [kept.id]

    async def test_store_failure_returns_input(self) -> None:
        assert await NotificationService(_BrokenStore()).verify_active(["a", "b"]) == ["a", "b"]


class TestAdminSide:
    async def test_send_list_delete(self, service: NotificationService) -> None:
        sent = await service.send_notification("Tax camp", "Property tax camp at Ward 3", sent_by="admin-1")
        listed = await service.list_notifications()
        assert [n.id for n in listed] == [sent.id]
        assert listed[0].sent_by == "admin-1"

        assert await service.delete_notification(sent.id) is True
        assert await service.delete_notification(sent.id) is False
        assert await service.list_notifications() == []


# ---------------------------------------------------------------------------
# NotificationPoller
# ---------------------------------------------------------------------------


class TestPollOnce:
    async def test_delivers_once_per_citizen(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        sessions = SessionStore()
        session = sessions.create("c1")
        await _insert(store, "Water cut")
        poller = NotificationPoller(service, sessions, interval_seconds=60)

        assert await poller.poll_once() == 1
        last = session.messages[-1]
        assert last.sender == MessageSender.BOT
        assert last.text.startswith("📢 *Water cut*")

        assert await poller.poll_once() == 0, "a delivered notification is marked read"
        assert len(session.messages) == 2

    async def test_every_live_session_gets_it(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        sessions = SessionStore()
        first = sessions.create("c1")
        second = sessions.create("c2")
        await _insert(store, "Holiday")

        assert await NotificationPoller(service, sessions).poll_once() == 2
        assert first.messages[-1].text == second.messages[-1].text

    async def test_expired_sessions_are_skipped(self, store: InMemoryRecordStore, service: NotificationService) -> None:
        sessions = SessionStore(ttl_seconds=60)
        session = sessions.create("c1")
        session.last_active = datetime.now(UTC) - timedelta(minutes=5)
        await _insert(store, "Holiday")

        assert await NotificationPoller(service, sessions).poll_once() == 0
        assert len(sessions) == 0


class TestPollerLifecycle:
    async def test_start_and_stop(self, service: NotificationService) -> None:
        poller = NotificationPoller(service, SessionStore(), interval_seconds=0.01)
        assert poller.is_running is False

        poller.start()
        assert poller.is_running is True
        await asyncio.sleep(0.05)

        await poller.stop()
        assert poller.is_running is False

    async def test_stop_without_start(self, service: NotificationService) -> None:
        await NotificationPoller(service, SessionStore()).stop()

    async def test_poll_failure_does_not_kill_loop(self, service: NotificationService) -> None:
        poller = NotificationPoller(service, SessionStore(), interval_seconds=0.01)
        calls = 0

        async def failing_poll() -> int:
            nonlocal calls
            calls += 1
            raise RuntimeError("boom")

        poller.poll_once = failing_poll  # type: ignore[method-assign]
        poller.start()
        await asyncio.sleep(0.05)
        assert poller.is_running is True
        await poller.stop()
        assert calls >= 2, "the loop keeps polling after a failed poll"
