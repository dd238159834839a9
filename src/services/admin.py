"""Admin triage over ``service_requests``.

Listing, detail view, status changes, assignment and internal notes.  Every
mutation writes a ``request_history`` event so the detail view can show a
timeline.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

import structlog

from src.models.admin import (
    AdminActions,
    CitizenDetails,
    DashboardStats,
    RequestDetails,
    RequestListResponse,
    RequestSummary,
)
from src.models.enums import (
    AdminRole,
    HistoryEventType,
    RequestCategory,
    RequestPriority,
    RequestStatus,
    SlaBadge,
)
from src.models.records import Citizen, InternalNote, RequestHistory, ServiceRequest
from src.services.grievances import REQUEST_HISTORY, SERVICE_REQUESTS
from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

CITIZENS: Final[str] = "citizens"
INTERNAL_NOTES: Final[str] = "internal_notes"

PENDING_STATUSES: Final[frozenset[RequestStatus]] = frozenset(
    {RequestStatus.NEW, RequestStatus.IN_PROGRESS, RequestStatus.UNDER_REVIEW}
)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def is_overdue(request: ServiceRequest, now: datetime) -> bool:
    return request.sla_due_at is not None and request.sla_due_at < now


def sla_badge(due_at: datetime | None, now: datetime | None = None) -> SlaBadge:
    if due_at is None:
        return SlaBadge.NO_SLA
    if due_at < (now or datetime.now(UTC)):
        return SlaBadge.OVERDUE
    return SlaBadge.ON_TIME


def actions_for_role(role: AdminRole | str) -> AdminActions:
    """Permission set for *role*; unknown roles get the viewer set."""
    if role == AdminRole.DEPARTMENT_ADMIN:
        return AdminActions(can_change_status=True, can_assign=True, can_add_note=True)
    if role == AdminRole.SUPER_ADMIN:
        return AdminActions(
            can_change_status=True,
            can_assign=True,
            can_add_note=True,
            can_escalate=True,
            can_close=True,
            can_transfer=True,
        )
    return AdminActions()


def summarize(request: ServiceRequest, now: datetime) -> RequestSummary:
    return RequestSummary(
        **request.model_dump(),
        is_overdue=is_overdue(request, now),
        sla_badge=sla_badge(request.sla_due_at, now),
    )


def _matches_search(request: ServiceRequest, needle: str) -> bool:
    haystacks = (request.id, request.reference_code or "", request.description or "")
    return any(needle in h.lower() for h in haystacks)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AdminService:
    __slots__ = ("_store",)

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def _request(self, request_id: str) -> ServiceRequest | None:
        row = await self._store.get(SERVICE_REQUESTS, request_id)
        return ServiceRequest.model_validate(row) if row is not None else None

    async def _log(
        self,
        request_id: str,
        event_type: HistoryEventType,
        description: str,
        *,
        old_value: str | None = None,
        new_value: str | None = None,
        performed_by: str | None = None,
    ) -> None:
        event = RequestHistory(
            request_id=request_id,
            event_type=event_type,
            description=description,
            old_value=old_value,
            new_value=new_value,
            performed_by=performed_by,
        )
        await self._store.insert(REQUEST_HISTORY, event.model_dump(mode="json"))

    async def list_requests(
        self,
        page: int = 1,
        limit: int = 20,
        *,
        category: RequestCategory | None = None,
        status: RequestStatus | None = None,
        priority: RequestPriority | None = None,
        search: str | None = None,
        now: datetime | None = None,
    ) -> RequestListResponse:
        """One page of requests, newest first, with the total match count."""
        now = now or datetime.now(UTC)
        filters = {
            key: value.value
            for key, value in (("category", category), ("status", status), ("priority", priority))
            if value is not None
        }
        try:
            rows = await self._store.select(SERVICE_REQUESTS, filters)
        except Exception:
            logger.exception("admin.list_requests.failed", filters=filters)
            return RequestListResponse(requests=[], total=0, page=page, limit=limit)

        requests = [ServiceRequest.model_validate(r) for r in rows]
        if search:
            needle = search.strip().lower()
            requests = [r for r in requests if _matches_search(r, needle)]
        requests.sort(key=lambda r: r.created_at, reverse=True)

        start = (page - 1) * limit
        return RequestListResponse(
            requests=[summarize(r, now) for r in requests[start : start + limit]],
            total=len(requests),
            page=page,
            limit=limit,
        )

    async def get_request_details(self, request_id: str, now: datetime | None = None) -> RequestDetails | None:
        try:
            request = await self._request(request_id)
            if request is None:
                return None

            citizen: CitizenDetails | None = None
            citizen_row = await self._store.get(CITIZENS, request.citizen_id)
            if citizen_row is not None:
                total = await self._store.count(SERVICE_REQUESTS, {"citizen_id": request.citizen_id})
                citizen = CitizenDetails(**Citizen.model_validate(citizen_row).model_dump(), total_requests=total)

            history = sorted(
                (RequestHistory.model_validate(r) for r in await self._store.select(REQUEST_HISTORY, {"request_id": request_id})),
                key=lambda h: h.created_at,
            )
            notes = sorted(
                (InternalNote.model_validate(r) for r in await self._store.select(INTERNAL_NOTES, {"request_id": request_id})),
                key=lambda n: n.created_at,
                reverse=True,
            )
        except Exception:
            logger.exception("admin.request_details.failed", request_id=request_id)
            return None

        return RequestDetails(
            request=summarize(request, now or datetime.now(UTC)),
            citizen=citizen,
            history=history,
            notes=notes,
        )

    async def update_request_status(self, request_id: str, status: RequestStatus, admin_id: str) -> bool:
        try:
            request = await self._request(request_id)
            if request is None:
                return False
            now = datetime.now(UTC)
            changes: dict[str, object] = {"status": status.value, "updated_at": now.isoformat()}
            if status == RequestStatus.RESOLVED:
                changes["resolved_at"] = now.isoformat()
            await self._store.update(SERVICE_REQUESTS, request_id, changes)
            await self._log(
                request_id,
                HistoryEventType.STATUS_CHANGED,
                f"Status changed from {request.status} to {status}",
                old_value=request.status,
                new_value=status,
                performed_by=admin_id,
            )
        except Exception:
            logger.exception("admin.update_status.failed", request_id=request_id)
            return False
        logger.info("admin.update_status.completed", request_id=request_id, status=status, admin_id=admin_id)
        return True

    async def assign_request(self, request_id: str, admin_id: str) -> bool:
        try:
            request = await self._request(request_id)
            if request is None:
                return False
            await self._store.update(
                SERVICE_REQUESTS,
                request_id,
                {"assigned_to": admin_id, "updated_at": datetime.now(UTC).isoformat()},
            )
            event = HistoryEventType.REASSIGNED if request.assigned_to else HistoryEventType.ASSIGNED
            await self._log(
                request_id,
                event,
                f"Assigned to {admin_id}",
                old_value=request.assigned_to,
                new_value=admin_id,
                performed_by=admin_id,
            )
        except Exception:
            logger.exception("admin.assign.failed", request_id=request_id)
            return False
        logger.info("admin.assign.completed", request_id=request_id, admin_id=admin_id)
        return True

    async def add_internal_note(self, request_id: str, note: str, author_id: str) -> InternalNote | None:
        try:
            if await self._request(request_id) is None:
                return None
            record = InternalNote(request_id=request_id, note=note, author_id=author_id)
            await self._store.insert(INTERNAL_NOTES, record.model_dump(mode="json"))
            await self._log(request_id, HistoryEventType.NOTE_ADDED, "Internal note added", performed_by=author_id)
        except Exception:
            logger.exception("admin.add_note.failed", request_id=request_id)
            return None
        return record

    async def dashboard_stats(self, now: datetime | None = None) -> DashboardStats:
        """Counters for the dashboard header.

        ``resolved_today`` counts requests resolved since midnight UTC.
        """
        now = now or datetime.now(UTC)
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            requests = [ServiceRequest.model_validate(r) for r in await self._store.select(SERVICE_REQUESTS)]
        except Exception:
            logger.exception("admin.dashboard_stats.failed")
            return DashboardStats()

        pending = [r for r in requests if r.status in PENDING_STATUSES]
        return DashboardStats(
            total=len(requests),
            pending=len(pending),
            overdue=sum(1 for r in pending if is_overdue(r, now)),
            resolved_today=sum(
                1
                for r in requests
                if r.status == RequestStatus.RESOLVED and r.resolved_at is not None and r.resolved_at >= midnight
            ),
        )
