"""Main API router combining all v1 route modules.

Aggregates all routers under the ``/api/v1`` prefix so the
FastAPI application only needs to include a single router.

Includes:
    * Chat: sessions and turns
    * Notifications: unread broadcasts, read receipts
    * Admin: request triage, dashboard, broadcast management
    * Health: liveness and readiness probes
"""

from __future__ import annotations

from fastapi import APIRouter

from src.api.v1 import admin, chat, health, notifications

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(chat.router)
api_router.include_router(notifications.router)
api_router.include_router(admin.router)
api_router.include_router(health.router)
