"""Citizen-side notification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from src.models.chat import MarkReadRequest
from src.models.records import Notification
from src.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _service(request: Request) -> NotificationService:
    service = getattr(request.app.state, "notification_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Notification service not available")
    return service


@router.get("/unread", response_model=list[Notification])
async def unread_notifications(
    request: Request,
    citizen_id: str = Query(..., min_length=1, max_length=64),
) -> list[Notification]:
    return await _service(request).get_unread(citizen_id)


@router.post("/{notification_id}/read")
async def mark_notification_read(notification_id: str, body: MarkReadRequest, request: Request) -> dict:
    success = await _service(request).mark_as_read(notification_id, body.citizen_id)
    return {"notification_id": notification_id, "success": success}
