"""NagarSeva service layer -- record store, sessions, domain services and notifications.

The Vertex AI backed modules (``llm``, ``response_generator``) are not
re-exported here so that ``import src.services`` does not load the
``vertexai`` SDK; import them from their modules directly.
"""

from __future__ import annotations

from src.services.admin import AdminService, actions_for_role, sla_badge
from src.services.applications import ApplicationService
from src.services.bills import BillService, format_bill_details, generate_payment_link
from src.services.grievances import GrievanceService
from src.services.hinglish import HinglishProcessor
from src.services.notifications import NotificationPoller, NotificationService
from src.services.sessions import ChatSession, SessionStore
from src.services.store import InMemoryRecordStore, RecordStore, RedisRecordStore, StoreError, create_store

__all__ = [
    "AdminService",
    "ApplicationService",
    "BillService",
    "ChatSession",
    "GrievanceService",
    "HinglishProcessor",
    "InMemoryRecordStore",
    "NotificationPoller",
    "NotificationService",
    "RecordStore",
    "RedisRecordStore",
    "SessionStore",
    "StoreError",
    "actions_for_role",
    "create_store",
    "format_bill_details",
    "generate_payment_link",
    "sla_badge",
]
