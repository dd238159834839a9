"""Grievance filing and lookup over the ``service_requests`` table.

A grievance is stored as a ``complaint`` service request whose
``reference_code`` is the citizen-facing ``GR#####`` ID; the admin triage
side works on the same row.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Final

import structlog

from src.models.conversation import GrievanceDraft
from src.models.enums import (
    ChannelType,
    GrievanceStatus,
    HistoryEventType,
    RequestCategory,
    RequestPriority,
    RequestStatus,
)
from src.models.records import Grievance, RequestHistory, ServiceRequest
from src.services.identifiers import GRIEVANCE_PREFIX, unique_code
from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

SERVICE_REQUESTS: Final[str] = "service_requests"
REQUEST_HISTORY: Final[str] = "request_history"

DEFAULT_DEPARTMENT: Final[str] = "General Administration"

_DEPARTMENTS: Final[dict[str, str]] = {
    "roads": "Public Works",
    "water": "Water Supply",
    "water_supply": "Water Supply",
    "garbage": "Sanitation",
    "street_lights": "Power Dept",
    "electricity": "Power Dept",
    "drainage": "Sewerage Dept",
}

_STATUS_MAP: Final[dict[str, GrievanceStatus]] = {
    "new": GrievanceStatus.NEW,
    "pending": GrievanceStatus.NEW,
    "in_progress": GrievanceStatus.IN_PROGRESS,
    "under_review": GrievanceStatus.UNDER_REVIEW,
    "resolved": GrievanceStatus.RESOLVED,
    "closed": GrievanceStatus.CLOSED,
    "rejected": GrievanceStatus.REJECTED,
}


def department_for_category(category: str) -> str:
    return _DEPARTMENTS.get(category.strip().lower(), DEFAULT_DEPARTMENT)


def map_request_status(status: str | None) -> GrievanceStatus:
    """Map a storage status to the citizen-facing grievance status.

    Unknown or missing values map to ``New``.
    """
    if not status:
        return GrievanceStatus.NEW
    return _STATUS_MAP.get(status.strip().lower(), GrievanceStatus.NEW)


def to_grievance(request: ServiceRequest) -> Grievance:
    return Grievance(
        id=request.reference_code or f"GR{request.id[:5].upper()}",
        request_id=request.id,
        category=request.sub_category or request.category,
        location=request.metadata.get("location"),
        landmark=request.metadata.get("landmark"),
        description=request.description,
        status=map_request_status(request.status),
        department=request.department,
        attachment_count=len(request.attachments),
        created_at=request.created_at,
        sla_due_at=request.sla_due_at,
    )


class GrievanceService:
    """Creates and reads grievances.

    Backend failures are logged and reported as ``None`` / ``False`` /
    ``[]`` so the chat layer can answer with a "not found" or "action
    failed" message instead of an error.
    """

    __slots__ = ("_default_citizen_id", "_sla_days", "_store")

    def __init__(
        self,
        store: RecordStore,
        *,
        sla_days: int = 3,
        default_citizen_id: str = "00000000-0000-0000-0000-000000000000",
    ) -> None:
        self._store = store
        self._sla_days = sla_days
        self._default_citizen_id = default_citizen_id

    async def _code_taken(self, code: str) -> bool:
        return await self._store.count(SERVICE_REQUESTS, {"reference_code": code}) > 0

    async def create_grievance(self, draft: GrievanceDraft, citizen_id: str | None = None) -> Grievance | None:
        """File *draft* and return the created grievance, or ``None`` on failure."""
        if not draft.is_complete:
            logger.warning("grievance.create.incomplete_draft", category=draft.category)
            return None

        now = datetime.now(UTC)
        category = draft.category or "other"
        log = logger.bind(category=category, attachments=len(draft.attachments))
        log.info("grievance.create.started")

        try:
            grievance_id = await unique_code(GRIEVANCE_PREFIX, self._code_taken)
            request = ServiceRequest(
                citizen_id=citizen_id or self._default_citizen_id,
                category=RequestCategory.COMPLAINT,
                sub_category=category,
                status=RequestStatus.NEW,
                priority=RequestPriority.MEDIUM,
                channel=ChannelType.WHATSAPP,
                reference_code=grievance_id,
                department=department_for_category(category),
                description=draft.description,
                metadata={
                    "problem_type": draft.subcategory or "General",
                    "severity": "medium",
                    "location": draft.location,
                    "landmark": draft.landmark,
                    "ward": draft.ward,
                    "grievance_id": grievance_id,
                },
                attachments=[a.model_dump(mode="json") for a in draft.attachments],
                sla_due_at=now + timedelta(days=self._sla_days),
                created_at=now,
                updated_at=now,
            )
            await self._store.insert(SERVICE_REQUESTS, request.model_dump(mode="json"))
            history = RequestHistory(
                request_id=request.id,
                event_type=HistoryEventType.CREATED,
                description=f"Grievance {grievance_id} filed via WhatsApp",
                new_value=RequestStatus.NEW,
                performed_by=request.citizen_id,
                created_at=now,
            )
            await self._store.insert(REQUEST_HISTORY, history.model_dump(mode="json"))
        except Exception:
            log.exception("grievance.create.failed")
            return None

        log.info("grievance.create.completed", grievance_id=grievance_id, department=request.department)
        return to_grievance(request)

    async def _find_request(self, grievance_id: str) -> ServiceRequest | None:
        rows = await self._store.select(SERVICE_REQUESTS, {"reference_code": grievance_id.upper()})
        if not rows:
            return None
        return ServiceRequest.model_validate(rows[0])

    async def get_grievance(self, grievance_id: str) -> Grievance | None:
        try:
            request = await self._find_request(grievance_id)
        except Exception:
            logger.exception("grievance.fetch.failed", grievance_id=grievance_id)
            return None
        if request is None:
            logger.info("grievance.fetch.not_found", grievance_id=grievance_id)
            return None
        return to_grievance(request)

    async def update_grievance_status(
        self,
        grievance_id: str,
        status: RequestStatus,
        performed_by: str | None = None,
    ) -> bool:
        """Set the storage status of a grievance and log a history event."""
        try:
            request = await self._find_request(grievance_id)
            if request is None:
                return False
            now = datetime.now(UTC)
            changes: dict[str, object] = {"status": status.value, "updated_at": now.isoformat()}
            if status == RequestStatus.RESOLVED:
                changes["resolved_at"] = now.isoformat()
            await self._store.update(SERVICE_REQUESTS, request.id, changes)
            history = RequestHistory(
                request_id=request.id,
                event_type=HistoryEventType.STATUS_CHANGED,
                description=f"Status changed from {request.status} to {status}",
                old_value=request.status,
                new_value=status,
                performed_by=performed_by,
                created_at=now,
            )
            await self._store.insert(REQUEST_HISTORY, history.model_dump(mode="json"))
        except Exception:
            logger.exception("grievance.update_status.failed", grievance_id=grievance_id)
            return False
        logger.info("grievance.update_status.completed", grievance_id=grievance_id, status=status)
        return True

    async def get_citizen_grievances(self, citizen_id: str) -> list[Grievance]:
        """All grievances filed by *citizen_id*, newest first."""
        try:
            rows = await self._store.select(
                SERVICE_REQUESTS,
                {"citizen_id": citizen_id, "category": RequestCategory.COMPLAINT.value},
            )
        except Exception:
            logger.exception("grievance.list.failed", citizen_id=citizen_id)
            return []
        requests = [ServiceRequest.model_validate(r) for r in rows]
        requests.sort(key=lambda r: r.created_at, reverse=True)
        return [to_grievance(r) for r in requests]
