from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.enums import RequestStatus, SlaBadge
from src.models.records import Citizen, InternalNote, RequestHistory, ServiceRequest


class AdminActions(BaseModel):
    """What an admin role may do on a request detail page."""

    can_change_status: bool = False
    can_assign: bool = False
    can_add_note: bool = False
    can_escalate: bool = False
    can_close: bool = False
    can_transfer: bool = False
    available_statuses: list[RequestStatus] = Field(default_factory=lambda: list(RequestStatus))


class CitizenDetails(Citizen):
    total_requests: int = 0


class RequestSummary(ServiceRequest):
    """A service request row as listed on the triage dashboard."""

    is_overdue: bool = False
    sla_badge: SlaBadge = SlaBadge.NO_SLA


class RequestDetails(BaseModel):
    request: RequestSummary
    citizen: CitizenDetails | None = None
    history: list[RequestHistory] = Field(default_factory=list)
    notes: list[InternalNote] = Field(default_factory=list)


class RequestListResponse(BaseModel):
    requests: list[RequestSummary]
    total: int
    page: int
    limit: int


class DashboardStats(BaseModel):
    total: int = 0
    pending: int = 0
    overdue: int = 0
    resolved_today: int = 0
