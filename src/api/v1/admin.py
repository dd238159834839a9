"""Admin triage API for NagarSeva.

Provides endpoints for:
    * Listing, filtering and searching service requests
    * Request detail view with citizen, timeline and internal notes
    * Status changes, assignment and internal notes
    * Dashboard counters and role permission sets
    * Broadcast notification management

All endpoints require admin API key authentication.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.middleware.auth import require_admin_api_key
from src.models.admin import AdminActions, DashboardStats, RequestDetails, RequestListResponse
from src.models.chat import AssignRequest, NoteRequest, SendNotificationRequest, StatusUpdateRequest
from src.models.enums import AdminRole, RequestCategory, RequestPriority, RequestStatus
from src.models.records import InternalNote, Notification
from src.services.admin import AdminService, actions_for_role
from src.services.notifications import NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin_api_key)],
)


def _admin(request: Request) -> AdminService:
    service = getattr(request.app.state, "admin_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Admin service not available")
    return service


def _notifications(request: Request) -> NotificationService:
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Notification service not available")
    return service


# ---------------------------------------------------------------------------
# Service requests
# ---------------------------------------------------------------------------


@router.get("/requests", response_model=RequestListResponse)
async def list_requests(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    category: RequestCategory | None = None,
    status: RequestStatus | None = None,
    priority: RequestPriority | None = None,
    search: str | None = Query(default=None, max_length=200),
) -> RequestListResponse:
    return await _admin(request).list_requests(
        page,
        limit,
        category=category,
        status=status,
        priority=priority,
        search=search,
    )


@router.get("/requests/{request_id}", response_model=RequestDetails)
async def get_request(request_id: str, request: Request) -> RequestDetails:
    details = await _admin(request).get_request_details(request_id)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Request '{request_id}' not found")
    return details


@router.patch("/requests/{request_id}/status")
async def update_status(request_id: str, body: StatusUpdateRequest, request: Request) -> dict:
    if not await _admin(request).update_request_status(request_id, body.status, body.admin_id):
        raise HTTPException(status_code=404, detail=f"Request '{request_id}' not found")
    return {"request_id": request_id, "status": body.status, "success": True}


@router.post("/requests/{request_id}/assign")
async def assign(request_id: str, body: AssignRequest, request: Request) -> dict:
    if not await _admin(request).assign_request(request_id, body.admin_id):
        raise HTTPException(status_code=404, detail=f"Request '{request_id}' not found")
    return {"request_id": request_id, "assigned_to": body.admin_id, "success": True}


@router.post("/requests/{request_id}/notes", response_model=InternalNote, status_code=201)
async def add_note(request_id: str, body: NoteRequest, request: Request) -> InternalNote:
    note = await _admin(request).add_internal_note(request_id, body.note, body.author_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Request '{request_id}' not found")
    return note


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(request: Request) -> DashboardStats:
    return await _admin(request).dashboard_stats()


@router.get("/roles/{role}/actions", response_model=AdminActions)
async def role_actions(role: AdminRole) -> AdminActions:
    return actions_for_role(role)


# ---------------------------------------------------------------------------
# Broadcast notifications
# ---------------------------------------------------------------------------


@router.get("/notifications", response_model=list[Notification])
async def list_notifications(request: Request) -> list[Notification]:
    try:
        return await _notifications(request).list_notifications()
    except HTTPException:
        raise
    except Exception:
        logger.error("api.admin.list_notifications_failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list notifications") from None


@router.post("/notifications", response_model=Notification, status_code=201)
async def send_notification(body: SendNotificationRequest, request: Request) -> Notification:
    service = _notifications(request)
    try:
        return await service.send_notification(body.title, body.message, body.sent_by)
    except Exception:
        logger.error("api.admin.send_notification_failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to send notification") from None


@router.delete("/notifications/{notification_id}")
async def delete_notification(notification_id: str, request: Request) -> dict:
    if not await _notifications(request).delete_notification(notification_id):
        raise HTTPException(status_code=404, detail=f"Notification '{notification_id}' not found")
    return {"notification_id": notification_id, "deleted": True}
