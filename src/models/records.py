"""Record store rows and the domain views built from them.

Rows are persisted as JSON-compatible dicts (``model_dump(mode="json")``)
so that the in-memory and Redis stores hold exactly the same shapes.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from src.models.enums import (
    ApplicationStatus,
    BillStatus,
    BillType,
    ChannelType,
    GrievanceStatus,
    HistoryEventType,
    NotificationTarget,
    RequestCategory,
    RequestPriority,
    RequestStatus,
)


def _uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Table rows
# ---------------------------------------------------------------------------


class Citizen(BaseModel):
    id: str = Field(default_factory=_uuid)
    name: str | None = None
    phone: str | None = None
    language: str = "en"
    address: str | None = None
    city: str | None = None
    ward: str | None = None
    created_at: datetime = Field(default_factory=_now)


class ServiceRequest(BaseModel):
    """A row of ``service_requests``: the unit admins triage."""

    id: str = Field(default_factory=_uuid)
    citizen_id: str
    category: RequestCategory
    sub_category: str | None = None
    status: RequestStatus = RequestStatus.NEW
    priority: RequestPriority = RequestPriority.MEDIUM
    channel: ChannelType = ChannelType.WHATSAPP
    reference_code: str | None = None  # GR#####, APP##### or PAY<ms>
    department: str | None = None
    assigned_to: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    attachments: list[dict[str, Any]] = Field(default_factory=list)
    sla_due_at: datetime | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    resolved_at: datetime | None = None


class ApplicationRecord(BaseModel):
    """A row of ``applications``."""

    id: str = Field(default_factory=_uuid)
    application_id: str
    citizen_id: str
    service_request_id: str | None = None
    application_type: str
    application_subtype: str | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    documents_submitted: list[str] = Field(default_factory=list)
    documents_pending: list[str] = Field(default_factory=list)
    form_data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Bill(BaseModel):
    id: str = Field(default_factory=_uuid)
    consumer_number: str
    citizen_id: str | None = None
    bill_type: BillType
    amount: int = Field(ge=0)  # whole rupees
    due_date: date
    status: BillStatus = BillStatus.UNPAID
    paid_at: datetime | None = None
    payment_ref: str | None = None


class Notification(BaseModel):
    id: str = Field(default_factory=_uuid)
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    target_type: NotificationTarget = NotificationTarget.ALL
    target_ids: list[str] = Field(default_factory=list)
    sent_by: str | None = None
    created_at: datetime = Field(default_factory=_now)


class NotificationRead(BaseModel):
    id: str
    notification_id: str
    citizen_id: str
    read_at: datetime = Field(default_factory=_now)

    @classmethod
    def for_pair(cls, notification_id: str, citizen_id: str) -> NotificationRead:
        # One row per (notification, citizen): the key makes re-reads no-ops.
        return cls(
            id=f"{notification_id}:{citizen_id}",
            notification_id=notification_id,
            citizen_id=citizen_id,
        )


class RequestHistory(BaseModel):
    id: str = Field(default_factory=_uuid)
    request_id: str
    event_type: HistoryEventType
    description: str
    old_value: str | None = None
    new_value: str | None = None
    performed_by: str | None = None
    created_at: datetime = Field(default_factory=_now)


class InternalNote(BaseModel):
    id: str = Field(default_factory=_uuid)
    request_id: str
    note: str
    author_id: str
    created_at: datetime = Field(default_factory=_now)


# ---------------------------------------------------------------------------
# Citizen-facing views
# ---------------------------------------------------------------------------


class Grievance(BaseModel):
    """A grievance as shown to the citizen in a status card."""

    id: str  # GR#####
    request_id: str
    category: str
    location: str | None = None
    landmark: str | None = None
    description: str | None = None
    status: GrievanceStatus = GrievanceStatus.NEW
    department: str | None = None
    attachment_count: int = 0
    created_at: datetime = Field(default_factory=_now)
    sla_due_at: datetime | None = None


class Application(BaseModel):
    id: str  # APP#####
    application_type: str
    application_subtype: str | None = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    documents_pending: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
