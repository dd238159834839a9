"""Broadcast notifications and the poller that delivers them into chats.

Admins write notifications to the ``notifications`` table.  Citizens see
the newest ones they have not read yet; a read is recorded per
(notification, citizen) pair in ``notification_reads``.

Delivery is pull-based: :class:`NotificationPoller` wakes up on a fixed
interval, and for every live chat session appends each unread
notification as a bot message and marks it read.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Final

import structlog

from src.models.chat import ChatMessage
from src.models.enums import MessageSender, NotificationTarget
from src.models.records import Notification, NotificationRead
from src.services.sessions import SessionStore
from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

NOTIFICATIONS: Final[str] = "notifications"
NOTIFICATION_READS: Final[str] = "notification_reads"

UNREAD_LIMIT: Final[int] = 5


def format_notification(notification: Notification) -> str:
    return f"📢 *{notification.title}*\n\n{notification.message}"


# ---------------------------------------------------------------------------
# Notification service
# ---------------------------------------------------------------------------


class NotificationService:
    """Read and write side of broadcast notifications.

    Read-side failures are logged and degrade to an empty result so that
    a store outage never breaks a chat session.
    """

    __slots__ = ("_store",)

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def _newest(self, limit: int | None = None) -> list[Notification]:
        rows = await self._store.select(NOTIFICATIONS, {"target_type": NotificationTarget.ALL.value})
        notifications = sorted(
            (Notification.model_validate(r) for r in rows),
            key=lambda n: n.created_at,
            reverse=True,
        )
        return notifications if limit is None else notifications[:limit]

    async def get_unread(self, citizen_id: str) -> list[Notification]:
        """The newest broadcast notifications *citizen_id* has not read."""
        try:
            latest = await self._newest(UNREAD_LIMIT)
            if not latest:
                return []
            reads = await self._store.select(NOTIFICATION_READS, {"citizen_id": citizen_id})
        except Exception:
            logger.warning("notifications.fetch_unread_failed", citizen_id=citizen_id, exc_info=True)
            return []
        read_ids = {r["notification_id"] for r in reads}
        return [n for n in latest if n.id not in read_ids]

    async def mark_as_read(self, notification_id: str, citizen_id: str) -> bool:
        """Record a read.  Marking the same pair twice is a no-op."""
        record = NotificationRead.for_pair(notification_id, citizen_id)
        try:
            if await self._store.get(NOTIFICATION_READS, record.id) is not None:
                return True
            await self._store.insert(NOTIFICATION_READS, record.model_dump(mode="json"))
        except Exception:
            logger.warning(
                "notifications.mark_read_failed",
                notification_id=notification_id,
                citizen_id=citizen_id,
                exc_info=True,
            )
            return False
        return True

    async def verify_active(self, notification_ids: Iterable[str]) -> list[str]:
        """Return the ids that still exist.

        On a store error the input is returned unchanged so that callers
        keep showing what they already have.
        """
        ids = list(notification_ids)
        try:
            return [nid for nid in ids if await self._store.get(NOTIFICATIONS, nid) is not None]
        except Exception:
            logger.warning("notifications.verify_failed", count=len(ids), exc_info=True)
            return ids

    # -- Admin side ------------------------------------------------------------

    async def send_notification(self, title: str, message: str, sent_by: str | None = None) -> Notification:
        notification = Notification(title=title, message=message, sent_by=sent_by)
        await self._store.insert(NOTIFICATIONS, notification.model_dump(mode="json"))
        logger.info("notifications.sent", notification_id=notification.id, sent_by=sent_by)
        return notification

    async def delete_notification(self, notification_id: str) -> bool:
        deleted = await self._store.delete(NOTIFICATIONS, notification_id)
        if deleted:
            logger.info("notifications.deleted", notification_id=notification_id)
        return deleted

    async def list_notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        rows = await self._store.select(NOTIFICATIONS)
        return sorted((Notification.model_validate(r) for r in rows), key=lambda n: n.created_at, reverse=True)


# ---------------------------------------------------------------------------
# Poller
# ---------------------------------------------------------------------------


class NotificationPoller:
    """Background task that pushes unread notifications into live sessions.

    Parameters
    ----------
    service:
        The :class:`NotificationService` to read from.
    sessions:
        Registry of live chat sessions.
    interval_seconds:
        Sleep between polls.
    """

    def __init__(
        self,
        service: NotificationService,
        sessions: SessionStore,
        interval_seconds: float = 30.0,
    ) -> None:
        self._service = service
        self._sessions = sessions
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._running = True
        self._task = asyncio.create_task(self._run(), name="notification-poller")

    async def stop(self) -> None:
        self._running = False
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        logger.info("notifications.poller_started", interval_seconds=self._interval)
        try:
            while self._running:
                await self._safe_poll()
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            logger.info("notifications.poller_cancelled")
            raise
        finally:
            self._running = False
            logger.info("notifications.poller_stopped")

    async def _safe_poll(self) -> int:
        try:
            return await self.poll_once()
        except Exception:
            logger.error("notifications.poll_failed", exc_info=True)
            return 0

    async def poll_once(self) -> int:
        """Deliver unread notifications to every live session.

        Returns the number of messages injected.
        """
        self._sessions.prune()
        delivered = 0
        for session in self._sessions.live_sessions():
            for notification in await self._service.get_unread(session.citizen_id):
                session.append(ChatMessage(text=format_notification(notification), sender=MessageSender.BOT))
                await self._service.mark_as_read(notification.id, session.citizen_id)
                delivered += 1
        if delivered:
            logger.info("notifications.delivered", count=delivered)
        return delivered
